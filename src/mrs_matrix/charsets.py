"""Built-in character sets for the rain."""

from __future__ import annotations

from dataclasses import dataclass
import random
import string
from typing import Iterable

# Code points left out of the symbol blocks below.
# U+00AD (soft hyphen) renders zero-width on many terminals.
# U+03A2 is unassigned inside the Greek capital block.
_EXCLUDED_CODE_POINTS = frozenset({0x00AD, 0x03A2})

_SYMBOL_RANGES = (
    (0x00A1, 0x00BF),
    (0x0391, 0x03A9),
    (0x2190, 0x2199),
    (0x2500, 0x257F),
    (0x2580, 0x259F),
)


@dataclass(frozen=True)
class CharacterSet:
    """Immutable ordered collection of characters drops draw from."""

    name: str
    chars: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.chars:
            raise ValueError(f"character set {self.name!r} must not be empty")

    @classmethod
    def from_chars(cls, name: str, chars: Iterable[str]) -> "CharacterSet":
        return cls(name=name, chars=tuple(chars))

    def characters(self) -> tuple[str, ...]:
        return self.chars

    def sample(self, rng: random.Random) -> str:
        """Return a uniformly chosen character using ``rng``."""
        return self.chars[rng.randrange(len(self.chars))]


def _code_range(first: int, last: int) -> list[str]:
    return [
        chr(code)
        for code in range(first, last + 1)
        if code not in _EXCLUDED_CODE_POINTS
    ]


def alphanumeric() -> CharacterSet:
    return CharacterSet.from_chars(
        "alphanumeric",
        string.digits + string.ascii_uppercase + string.ascii_lowercase,
    )


def printable_ascii() -> CharacterSet:
    """Printable ASCII without the space character (0x21 through 0x7E)."""
    return CharacterSet.from_chars("printable_ascii", _code_range(0x21, 0x7E))


def ascii_and_symbols() -> CharacterSet:
    chars = _code_range(0x21, 0x7E)
    for first, last in _SYMBOL_RANGES:
        chars.extend(_code_range(first, last))
    return CharacterSet.from_chars("ascii_and_symbols", chars)


BUILTIN_CHARSETS = {
    "alphanumeric": alphanumeric,
    "printable_ascii": printable_ascii,
    "ascii_and_symbols": ascii_and_symbols,
}


def get_charset(name: str) -> CharacterSet:
    """Return the built-in character set called ``name``.

    Raises ``KeyError`` for unknown names.
    """
    try:
        factory = BUILTIN_CHARSETS[name]
    except KeyError:
        raise KeyError(f"unknown character set: {name!r}") from None
    return factory()
