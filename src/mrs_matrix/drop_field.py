"""One drop per terminal column."""

from __future__ import annotations

import random
from typing import Iterator, Optional

from mrs_matrix.charsets import CharacterSet
from mrs_matrix.color_algorithms import ColorAlgorithm
from mrs_matrix.raindrop import Drop, StyledChar


class DropField:
    """The drops covering a ``columns`` x ``rows`` terminal.

    A field never changes size. When the terminal is resized a new field is
    built with :meth:`resized` and the old one is discarded.
    """

    def __init__(
        self,
        columns: int,
        rows: int,
        charset: CharacterSet,
        color_algorithm: ColorAlgorithm,
        advance_chance: float,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.columns = max(0, columns)
        self.rows = max(0, rows)
        self.charset = charset
        self.color_algorithm = color_algorithm
        self.advance_chance = advance_chance
        self._seed_rng = rng
        self.drops: tuple[Drop, ...] = tuple(
            Drop(
                charset,
                color_algorithm,
                advance_chance,
                self.rows,
                rng=self._drop_rng(),
            )
            for _ in range(self.columns)
        )

    def _drop_rng(self) -> random.Random:
        # each drop owns its generator; a seeded field derives them all from one
        if self._seed_rng is None:
            return random.Random()
        return random.Random(self._seed_rng.getrandbits(64))

    def __len__(self) -> int:
        return len(self.drops)

    def __iter__(self) -> Iterator[Drop]:
        return iter(self.drops)

    def styled_char_at(self, column: int, row: int) -> Optional[StyledChar]:
        return self.drops[column].styled_char_at(row)

    def advance(self) -> None:
        for drop in self.drops:
            drop.advance(self.rows)

    def resized(self, columns: int, rows: int) -> "DropField":
        """Return a fresh field for the new terminal size."""
        return DropField(
            columns,
            rows,
            self.charset,
            self.color_algorithm,
            self.advance_chance,
            rng=self._seed_rng,
        )
