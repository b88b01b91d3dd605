"""Tests for the per-column drop field."""

from __future__ import annotations

import random

from mrs_matrix.charsets import alphanumeric
from mrs_matrix.color_algorithms import HueVariation
from mrs_matrix.drop_field import DropField

RAINBOW = HueVariation(saturation=1.0, lightness=0.5)


def _field(columns: int, rows: int, seed: int | None = 42) -> DropField:
    rng = random.Random(seed) if seed is not None else None
    return DropField(columns, rows, alphanumeric(), RAINBOW, 1.0, rng=rng)


def test_one_drop_per_column() -> None:
    field = _field(10, 4)
    assert len(field) == 10
    assert len({id(drop) for drop in field}) == 10


def test_drops_own_their_random_sources() -> None:
    field = _field(5, 20)
    rngs = {id(drop._rng) for drop in field}
    assert len(rngs) == 5


def test_seeded_fields_are_reproducible() -> None:
    first = _field(8, 30, seed=9)
    second = _field(8, 30, seed=9)
    assert [d.follower for d in first] == [d.follower for d in second]
    assert [d.position for d in first] == [d.position for d in second]


def test_unseeded_field_builds() -> None:
    field = _field(3, 10, seed=None)
    assert len(field) == 3


def test_long_run_keeps_shape() -> None:
    field = _field(10, 4)
    for _ in range(1000):
        for row in range(field.rows):
            for column in range(field.columns):
                field.styled_char_at(column, row)
        field.advance()
        assert len(field) == 10
        for drop in field:
            assert drop.position <= field.rows + len(drop.follower)


def test_resize_builds_fresh_field() -> None:
    field = _field(10, 4)
    for _ in range(100):
        field.advance()
    old_drops = set(map(id, field))
    resized = field.resized(20, 4)
    assert resized is not field
    assert len(resized) == 20
    assert len(field) == 10
    assert not old_drops & set(map(id, resized))
    for drop in resized:
        assert -64 <= drop.position <= -1
        assert drop.advance_chance == 1.0


def test_zero_sized_field_is_empty() -> None:
    field = _field(0, 0)
    assert len(field) == 0
    field.advance()
