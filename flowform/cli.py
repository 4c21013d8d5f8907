from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Callable, Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console

from flowform.logging_utils import configure_logging
from flowform.settings import AppSettings, load_settings
from flowform.workflow import (
    Block,
    Connection,
    WorkflowGraphService,
    WorkflowValidationError,
    load_workflow_definition,
    render_diagnostics,
)
from flowform.workflow.condition_fields import summarize_connection
from flowform.workflow.conditions import Answer
from flowform.workflow.models import ChoiceOption


LOGGER = logging.getLogger(__name__)

COMMANDS: dict[str, str] = {
    "/back": "Go to the previous question",
    "/forward": "Return to a question you stepped back from",
    "/reset": "Clear all answers and start over",
    "/path": "Show the resolved navigation path",
    "/answers": "Show the answers recorded so far",
    "/check": "Analyze the form graph for cycles, orphans and broken references",
    "/layout": "Show auto-layout positions for every block",
    "/help": "Show this help",
    "/quit": "Exit",
}
NUMERIC_SUBTYPES = {"number", "rating", "scale"}


class SlashCommandCompleter(Completer):
    def __init__(self, commands_provider: Callable[[], Sequence[str]]) -> None:
        self._commands_provider = commands_provider

    def get_completions(self, document, complete_event):  # type: ignore[override]
        text_before_cursor = document.text_before_cursor
        if not text_before_cursor.startswith("/"):
            return
        if " " in text_before_cursor:
            return

        for command in sorted(set(self._commands_provider())):
            if command.startswith(text_before_cursor):
                yield Completion(command, start_position=-len(text_before_cursor))


def load_form(path: Path) -> tuple[list[Block], list[Connection]]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    return load_workflow_definition(payload)


def _match_option(token: str, options: list[ChoiceOption]) -> ChoiceOption:
    cleaned = token.strip()
    if cleaned.isdigit():
        position = int(cleaned)
        if 1 <= position <= len(options):
            return options[position - 1]

    lowered = cleaned.lower()
    for option in options:
        if cleaned in {option.id, option.value} or option.label.lower() == lowered:
            return option
    raise ValueError(f"'{cleaned}' is not one of the available options.")


def parse_answer(block: Block, raw: str) -> Answer:
    """Turn typed input into the answer shape the condition evaluator expects.

    Option-bearing blocks accept a 1-based number, an option id, value or
    label; checkbox groups take a comma separated list of those.
    """
    text = raw.strip()
    options = block.options

    if block.subtype == "checkbox_group":
        tokens = [token for token in text.split(",") if token.strip()]
        if not options:
            return [token.strip() for token in tokens]
        return [_match_option(token, options).value for token in tokens]

    if block.subtype in {"multiple_choice", "dropdown"} and options:
        return _match_option(text, options).value

    if block.subtype in NUMERIC_SUBTYPES:
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return text

    return text


class FlowFormCLI:
    def __init__(self, settings: AppSettings | None = None) -> None:
        self.console = Console(highlight=False, markup=False)
        self.settings = settings or load_settings()

        blocks, connections = load_form(self.settings.form_path)
        self.service = WorkflowGraphService(
            blocks,
            connections,
            horizontal_spacing=self.settings.layout_horizontal_spacing,
            vertical_spacing=self.settings.layout_vertical_spacing,
            layout_origin=self.settings.layout_origin,
        )
        initial_index = self.settings.initial_block_index
        if initial_index >= len(self.service.blocks):
            initial_index = 0
        self.session = self.service.start_session(initial_index=initial_index)
        self._finished = False
        self._shown_position: tuple[int, int] | None = None
        self._prompt_session: PromptSession[str] = PromptSession(
            completer=SlashCommandCompleter(lambda: list(COMMANDS)),
            complete_while_typing=True,
            history=InMemoryHistory(),
        )

    async def _prompt(self, prompt: str) -> str:
        return await self._prompt_session.prompt_async(prompt)

    def _print_kv_lines(self, title: str, rows: list[tuple[str, str]]) -> None:
        self.console.print(title)
        for key, value in rows:
            self.console.print(f"- {key}: {value}")
        self.console.print()

    def _print_list(self, title: str, items: list[str]) -> None:
        self.console.print(title)
        if not items:
            self.console.print("- (none)")
        else:
            for item in items:
                self.console.print(f"- {item}")
        self.console.print()

    def _print_welcome(self) -> None:
        self.console.print(f"FlowForm: {self.settings.form_path}")
        self.console.print(
            f"{len(self.service.blocks)} block(s), {len(self.service.connections)} connection(s). "
            "Type /help for commands."
        )
        self.console.print()
        self._print_analysis(only_problems=True)

    def _print_help(self) -> None:
        self._print_kv_lines("Commands", list(COMMANDS.items()))

    def _print_analysis(self, *, only_problems: bool = False) -> None:
        result = self.service.analyze()
        if only_problems and not result.diagnostics:
            return
        self.console.print("Form check")
        if result.diagnostics:
            self.console.print(render_diagnostics(result.diagnostics))
        else:
            self.console.print("- No problems found.")
        self.console.print()

    def _print_layout(self) -> None:
        positions = self.service.compute_layout()
        rows = [
            (block.id, f"x={positions[block.id]['x']:.0f} y={positions[block.id]['y']:.0f}")
            for block in self.service.blocks
            if block.id in positions
        ]
        self._print_kv_lines("Layout", rows)

    def _print_answers(self) -> None:
        answers = self.session.get_all_answers()
        rows = [(block_id, json.dumps(answer)) for block_id, answer in answers.items()]
        if not rows:
            self._print_list("Answers", [])
            return
        self._print_kv_lines("Answers", rows)

    def _print_question(self) -> None:
        block = self.session.current_block
        if block is None:
            return
        position = (self.session.current_index, self.session.history_index)
        if position == self._shown_position:
            return
        self._shown_position = position

        title = block.title or block.id
        self.console.print(f"[{self.session.current_index + 1}/{len(self.service.blocks)}] {title} ({block.subtype})")
        for number, option in enumerate(block.options, start=1):
            self.console.print(f"  {number}. {option.label}")
        for connection in self.service.connections:
            if connection.source_id == block.id and connection.rules:
                LOGGER.debug("Routing from %s: %s", block.id, summarize_connection(connection, block))
        previous = self.session.answers.get(block.id)
        if previous is not None:
            self.console.print(f"  (current answer: {json.dumps(previous)})")

    def _print_complete(self) -> None:
        self.console.print("Form complete.")
        self._print_answers()

    def _handle_command(self, command_line: str) -> bool:
        parts = command_line.strip().split()
        command = parts[0].lower()

        if command == "/quit":
            self.console.print("Goodbye.")
            return True

        if command == "/back":
            if self.session.go_to_previous():
                self._finished = False
            else:
                self.console.print("Already at the first question.")
            return False

        if command == "/forward":
            if not self.session.go_to_forward():
                self.console.print("Nothing to go forward to.")
            return False

        if command == "/reset":
            self.session.reset()
            self._finished = False
            self._shown_position = None
            self.console.print("Answers cleared.")
            return False

        if command == "/path":
            self._print_list("Navigation path", self.session.navigation_path)
            return False

        if command == "/answers":
            self._print_answers()
            return False

        if command == "/check":
            self._print_analysis()
            return False

        if command == "/layout":
            self._print_layout()
            return False

        if command == "/help":
            self._print_help()
            return False

        self.console.print("Unknown command. Use /help for available commands.")
        return False

    def _handle_answer(self, raw: str) -> None:
        if self._finished:
            self.console.print("The form is complete. Use /back or /reset to change answers.")
            return

        block = self.session.current_block
        if block is None:
            self.console.print("This form has no questions.")
            return

        try:
            answer = parse_answer(block, raw)
        except ValueError as exc:
            self.console.print(str(exc))
            return

        moved = self.session.submit_answer(answer)
        if not moved and self.session.is_complete:
            self._finished = True
            self._print_complete()

    async def run(self) -> None:
        self._print_welcome()

        with patch_stdout():
            while True:
                if not self._finished:
                    self._print_question()
                try:
                    raw = await self._prompt("> ")
                except EOFError:
                    self.console.print("Goodbye.")
                    break
                except KeyboardInterrupt:
                    continue

                user_input = raw.strip()
                if not user_input:
                    continue

                if user_input.startswith("/"):
                    if self._handle_command(user_input):
                        break
                    continue

                self._handle_answer(user_input)


def run() -> None:
    configure_logging()
    form_path = sys.argv[1] if len(sys.argv) > 1 else None
    console = Console(highlight=False, markup=False)
    try:
        app = FlowFormCLI(load_settings(form_path))
    except (OSError, json.JSONDecodeError, WorkflowValidationError) as exc:
        console.print(f"Could not load form: {exc}")
        return

    try:
        asyncio.run(app.run())
    except KeyboardInterrupt:
        app.console.print("\nInterrupted. Goodbye.")
