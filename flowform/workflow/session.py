from __future__ import annotations

import logging
from collections.abc import Sequence

from flowform.workflow.conditions import Answer
from flowform.workflow.models import END_OF_FORM, Block, Connection, outgoing_connections
from flowform.workflow.resolver import NextBlockResolver


LOGGER = logging.getLogger(__name__)


class NavigationSession:
    """Respondent-side position, answers and back/forward history over a block list."""

    def __init__(
        self,
        blocks: Sequence[Block],
        connections: Sequence[Connection],
        *,
        initial_index: int = 0,
        resolver: NextBlockResolver | None = None,
    ) -> None:
        self._blocks = list(blocks)
        self._connections = list(connections)
        self._initial_index = initial_index
        self._resolver = resolver or NextBlockResolver()

        self.current_index = initial_index
        self.direction = 1
        self.history: list[int] = [initial_index]
        self.history_index = 0
        self.answers: dict[str, Answer] = {}
        self.is_complete = False

    @property
    def current_block(self) -> Block | None:
        if not self._blocks or self.current_index < 0 or self.current_index >= len(self._blocks):
            return None
        return self._blocks[self.current_index]

    @property
    def navigation_path(self) -> list[str]:
        return self._resolver.navigation_path

    @property
    def is_last_question(self) -> bool:
        block = self.current_block
        if block is None:
            return False
        return not outgoing_connections(self._connections, block.id)

    @property
    def can_go_back(self) -> bool:
        return self.history_index > 0

    @property
    def can_go_forward(self) -> bool:
        return self.history_index < len(self.history) - 1

    def set_current_answer(self, answer: Answer) -> bool:
        block = self.current_block
        if block is None:
            return False
        self.answers[block.id] = answer
        return True

    def submit_answer(self, answer: Answer) -> bool:
        if not self.set_current_answer(answer):
            return False
        return self.go_to_next()

    def go_to_next(self) -> bool:
        """Move to the block resolved from the current answer.

        Advancing sequentially off a block with no outgoing connections also
        marks the session complete while it sits on the new block. The flag
        stays set through later submits until ``go_to_previous`` or ``reset``,
        so ``is_complete`` does not imply ``current_block`` is None.
        """
        block = self.current_block
        if block is None:
            return False
        if block.id not in self.answers:
            LOGGER.warning("Attempted to advance from block '%s' with no answer.", block.id)
            return False

        was_last_question = self.is_last_question
        next_index = self._resolver.resolve_next(
            block,
            self.answers[block.id],
            self._blocks,
            self._connections,
        )

        if next_index == END_OF_FORM:
            self.is_complete = True
            LOGGER.debug("Form complete after block '%s'.", block.id)
            return False

        self.direction = 1
        self.current_index = next_index
        self.history = [*self.history[: self.history_index + 1], next_index]
        self.history_index = len(self.history) - 1
        if was_last_question:
            self.is_complete = True
        return True

    def go_to_previous(self) -> bool:
        if not self.can_go_back:
            return False
        self.direction = -1
        self.history_index -= 1
        self.current_index = self.history[self.history_index]
        self.is_complete = False
        return True

    def go_to_forward(self) -> bool:
        if not self.can_go_forward:
            return False
        self.direction = 1
        self.history_index += 1
        self.current_index = self.history[self.history_index]
        return True

    def reset(self) -> None:
        self.current_index = self._initial_index
        self.direction = 1
        self.history = [self._initial_index]
        self.history_index = 0
        self.answers = {}
        self.is_complete = False
        self._resolver.clear()

    def get_all_answers(self) -> dict[str, Answer]:
        return dict(self.answers)
