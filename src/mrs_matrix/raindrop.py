"""A single falling stream of characters.

A drop is made of a *head* and a *follower*. The head is the bottom-most
character; it is resampled every time it is read, so it flickers from frame
to frame. The follower is the tail trailing above the head; its length and
content are random but fixed until the drop is reinitialized.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import random
from typing import Optional

from rich.color import Color

from mrs_matrix.charsets import CharacterSet
from mrs_matrix.color_algorithms import ColorAlgorithm

logger = logging.getLogger(__name__)

# shortest length a follower will be
FOLLOWER_MIN_LENGTH = 4

# the longest follower is the terminal height minus this offset
FOLLOWER_MAX_LENGTH_OFFSET = 4

# a reinitialized drop starts this far above row 0
START_OFFSET_MIN = -64
START_OFFSET_MAX = -1

HEAD_COLOR = Color.parse("white")


@dataclass(frozen=True)
class StyledChar:
    char: str
    color: Color
    bold: bool = False


class Drop:
    """One column's falling stream."""

    def __init__(
        self,
        charset: CharacterSet,
        color_algorithm: ColorAlgorithm,
        advance_chance: float,
        terminal_height: int,
        rng: Optional[random.Random] = None,
    ) -> None:
        if not 0.0 < advance_chance <= 1.0:
            raise ValueError(
                f"advance chance {advance_chance} outside of expected bounds (0, 1]"
            )
        self.charset = charset
        self.color_algorithm = color_algorithm
        self.advance_chance = advance_chance
        self._rng = rng if rng is not None else random.Random()
        # index 0 is the character directly above the head
        self.follower: tuple[str, ...] = ()
        # may be negative (above the screen) or past the bottom edge
        self.position = 0
        self.reinit(terminal_height)

    @staticmethod
    def max_follower_length(terminal_height: int) -> int:
        available = max(0, terminal_height - FOLLOWER_MAX_LENGTH_OFFSET)
        return max(available, FOLLOWER_MIN_LENGTH + 1)

    def reinit(self, terminal_height: int) -> None:
        """Pick a new follower and move the drop back above row 0."""
        length = self._rng.randint(
            FOLLOWER_MIN_LENGTH, self.max_follower_length(terminal_height)
        )
        self.follower = tuple(self.charset.sample(self._rng) for _ in range(length))
        self.position = self._rng.randint(START_OFFSET_MIN, START_OFFSET_MAX)

    def next_head_char(self) -> str:
        return self.charset.sample(self._rng)

    def _follower_char(self, follower_index: int) -> Optional[str]:
        if follower_index < 0:
            logger.warning(
                "Follower index %d out of range for drop at row %d; skipping char",
                follower_index,
                self.position,
            )
            return None
        if follower_index >= len(self.follower):
            return None
        return self.follower[follower_index]

    def char_at(self, row: int) -> Optional[str]:
        """Return the character this drop shows on ``row``, if any.

        Reading the head row draws a new random character on every call.
        """
        if row > self.position:
            return None
        if row == self.position:
            return self.next_head_char()
        return self._follower_char((self.position - 1) - row)

    def styled_char_at(self, row: int) -> Optional[StyledChar]:
        char = self.char_at(row)
        if char is None:
            return None
        if row == self.position:
            return StyledChar(char, HEAD_COLOR, bold=True)
        follower_index = (self.position - 1) - row
        proportion = follower_index / len(self.follower)
        proportion = max(0.0, min(1.0, proportion))
        color = self.color_algorithm.color_for(proportion)
        return StyledChar(char, color.to_color())

    def is_visible(self, terminal_height: int) -> bool:
        if self.position < 0:
            return False
        return self.position < terminal_height + len(self.follower)

    def advance(self, terminal_height: int) -> None:
        """Advance the drop by one frame.

        A drop that has fallen past the bottom edge is reinitialized instead
        of moved. Drops above row 0 are never considered for recycling, since
        they are not visible until they reach it.
        """
        if self.position >= 0 and not self.is_visible(terminal_height):
            self.reinit(terminal_height)
            return
        if self.advance_chance >= 1.0 or self._rng.random() < self.advance_chance:
            self.position += 1

    def __repr__(self) -> str:
        return (
            f"Drop(position={self.position}, follower_length={len(self.follower)}, "
            f"advance_chance={self.advance_chance})"
        )
