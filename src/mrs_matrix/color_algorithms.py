"""Algorithms that color follower characters by their distance from the head.

Every algorithm receives a ``proportion`` in ``[0.0, 1.0]``: ``0.0`` is the
character right above the head and ``1.0`` is the far end of the tail.

Algorithm parameters and the proportion are checked on every call. A value
out of range raises ``ValueError``; nothing is clamped on the caller's behalf.
"""

from __future__ import annotations

import colorsys
from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol

from rich.color import Color


@dataclass(frozen=True)
class HslColor:
    """A color in the HSL model; hue in degrees, the rest in ``[0, 1]``."""

    hue: float
    saturation: float
    lightness: float

    def to_color(self) -> Color:
        return _hsl_to_color(self.hue, self.saturation, self.lightness)


@lru_cache(maxsize=4096)
def _hsl_to_color(hue: float, saturation: float, lightness: float) -> Color:
    red, green, blue = colorsys.hls_to_rgb(hue / 360.0, lightness, saturation)
    return Color.from_rgb(red * 255.0, green * 255.0, blue * 255.0)


class ColorAlgorithm(Protocol):
    def color_for(self, proportion: float) -> HslColor: ...


def _check_proportion(proportion: float) -> None:
    if not 0.0 <= proportion <= 1.0:
        raise ValueError(
            f"follower proportion {proportion} outside of expected bounds [0, 1]"
        )


def _check_hue(hue: float) -> None:
    if not 0.0 <= hue < 360.0:
        raise ValueError(f"hue {hue} outside of expected bounds [0, 360)")


def _check_unit(label: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{label} {value} outside of expected bounds [0, 1]")


@dataclass(frozen=True)
class LightnessDescending:
    """Fixed hue and saturation; characters dim toward the tail."""

    hue: float
    saturation: float

    def color_for(self, proportion: float) -> HslColor:
        _check_proportion(proportion)
        _check_hue(self.hue)
        _check_unit("saturation", self.saturation)
        # never darker than 10%
        lightness = max(0.9 - proportion, 0.1)
        return HslColor(self.hue, self.saturation, lightness)


@dataclass(frozen=True)
class SaturationDescending:
    """Fixed hue and lightness; characters lose saturation toward the tail."""

    hue: float
    lightness: float

    def color_for(self, proportion: float) -> HslColor:
        _check_proportion(proportion)
        _check_hue(self.hue)
        _check_unit("lightness", self.lightness)
        saturation = max(1.0 - proportion, 0.0)
        return HslColor(self.hue, saturation, self.lightness)


@dataclass(frozen=True)
class HueVariation:
    """Sweeps the full hue circle along the tail."""

    saturation: float
    lightness: float

    def color_for(self, proportion: float) -> HslColor:
        _check_proportion(proportion)
        _check_unit("saturation", self.saturation)
        _check_unit("lightness", self.lightness)
        return HslColor(proportion * 360.0, self.saturation, self.lightness)


COLOR_PRESETS: dict[str, ColorAlgorithm] = {
    "green": LightnessDescending(hue=118.0, saturation=1.0),
    "blue": LightnessDescending(hue=244.0, saturation=1.0),
    "purple": LightnessDescending(hue=302.0, saturation=1.0),
    "red": LightnessDescending(hue=0.0, saturation=1.0),
    "yellow": LightnessDescending(hue=51.0, saturation=1.0),
    "rainbow": HueVariation(saturation=1.0, lightness=0.5),
}
