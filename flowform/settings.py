from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from flowform.workflow.layout import DEFAULT_HORIZONTAL_SPACING, DEFAULT_ORIGIN, DEFAULT_VERTICAL_SPACING


DEFAULT_FORM_PATH = "forms/sample_form.json"


@dataclass(slots=True)
class AppSettings:
    form_path: Path = Path(DEFAULT_FORM_PATH)
    initial_block_index: int = 0
    layout_horizontal_spacing: float = DEFAULT_HORIZONTAL_SPACING
    layout_vertical_spacing: float = DEFAULT_VERTICAL_SPACING
    layout_origin: float = DEFAULT_ORIGIN



def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default



def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default



def load_settings(form_path: str | None = None) -> AppSettings:
    load_dotenv()

    raw_path = form_path or os.getenv("FLOWFORM_FORM_PATH", DEFAULT_FORM_PATH)
    initial_index = _get_int("FLOWFORM_INITIAL_BLOCK_INDEX", 0)

    return AppSettings(
        form_path=Path(raw_path).expanduser(),
        initial_block_index=max(0, initial_index),
        layout_horizontal_spacing=_get_float("LAYOUT_HORIZONTAL_SPACING", DEFAULT_HORIZONTAL_SPACING),
        layout_vertical_spacing=_get_float("LAYOUT_VERTICAL_SPACING", DEFAULT_VERTICAL_SPACING),
        layout_origin=_get_float("LAYOUT_ORIGIN", DEFAULT_ORIGIN),
    )
