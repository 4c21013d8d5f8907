from __future__ import annotations

import os
import unittest
from pathlib import Path
from unittest import mock

from flowform.settings import DEFAULT_FORM_PATH, load_settings


class SettingsTests(unittest.TestCase):
    def test_defaults_without_environment(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True), mock.patch("flowform.settings.load_dotenv"):
            settings = load_settings()

        self.assertEqual(settings.form_path, Path(DEFAULT_FORM_PATH))
        self.assertEqual(settings.initial_block_index, 0)
        self.assertEqual(settings.layout_horizontal_spacing, 300.0)
        self.assertEqual(settings.layout_vertical_spacing, 100.0)
        self.assertEqual(settings.layout_origin, 100.0)

    def test_environment_overrides(self) -> None:
        env = {
            "FLOWFORM_FORM_PATH": "custom/form.json",
            "FLOWFORM_INITIAL_BLOCK_INDEX": "2",
            "LAYOUT_HORIZONTAL_SPACING": "250",
            "LAYOUT_VERTICAL_SPACING": "not-a-number",
            "LAYOUT_ORIGIN": "0",
        }
        with mock.patch.dict(os.environ, env, clear=True), mock.patch("flowform.settings.load_dotenv"):
            settings = load_settings()

        self.assertEqual(settings.form_path, Path("custom/form.json"))
        self.assertEqual(settings.initial_block_index, 2)
        self.assertEqual(settings.layout_horizontal_spacing, 250.0)
        self.assertEqual(settings.layout_vertical_spacing, 100.0)
        self.assertEqual(settings.layout_origin, 0.0)

    def test_explicit_form_path_wins(self) -> None:
        with mock.patch.dict(os.environ, {"FLOWFORM_FORM_PATH": "env.json"}, clear=True), mock.patch(
            "flowform.settings.load_dotenv"
        ):
            settings = load_settings("cli.json")

        self.assertEqual(settings.form_path, Path("cli.json"))


if __name__ == "__main__":
    unittest.main()
