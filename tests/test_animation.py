"""Tests for the render loop."""

from __future__ import annotations

import random
from typing import Optional

import pytest

from mrs_matrix.animation import LoopState, RenderLoop
from mrs_matrix.charsets import alphanumeric
from mrs_matrix.color_algorithms import LightnessDescending
from mrs_matrix.config import ConfigError
from mrs_matrix.terminal import Event, OtherEvent, ResizeEvent

GREEN = LightnessDescending(hue=118.0, saturation=1.0)


class _FakeTerminal:
    def __init__(
        self,
        columns: int = 10,
        rows: int = 4,
        events: Optional[list[Optional[Event]]] = None,
    ) -> None:
        self.columns = columns
        self.rows = rows
        self.events = list(events or [])
        self.calls: list[str] = []
        self.timeouts: list[float] = []
        self.cells = 0
        self.frame_cells: list[int] = []
        self.fail_on: set[str] = set()

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise OSError(f"{name} failed")

    def size(self) -> tuple[int, int]:
        self._record("size")
        return (self.columns, self.rows)

    def enter_alt_screen(self) -> None:
        self._record("enter_alt_screen")

    def leave_alt_screen(self) -> None:
        self._record("leave_alt_screen")

    def hide_cursor(self) -> None:
        self._record("hide_cursor")

    def show_cursor(self) -> None:
        self._record("show_cursor")

    def enable_raw_input(self) -> None:
        self._record("enable_raw_input")

    def disable_raw_input(self) -> None:
        self._record("disable_raw_input")

    def move_cursor_to(self, row: int, col: int) -> None:
        self._record(f"move_cursor_to({row},{col})")

    def write_char_styled(self, ch, color, bold: bool = False) -> None:
        self.cells += 1

    def write_blank(self) -> None:
        self.cells += 1

    def flush(self) -> None:
        self._record("flush")
        self.frame_cells.append(self.cells)
        self.cells = 0

    def poll_event(self, timeout: float) -> Optional[Event]:
        self._record("poll_event")
        self.timeouts.append(timeout)
        if not self.events:
            return OtherEvent(b"q")
        return self.events.pop(0)


def _loop(terminal: _FakeTerminal, **kwargs) -> RenderLoop:
    kwargs.setdefault("rng", random.Random(1))
    return RenderLoop(terminal, alphanumeric(), GREEN, 1.0, 25, **kwargs)


def test_zero_framerate_rejected_before_terminal_use() -> None:
    terminal = _FakeTerminal()
    with pytest.raises(ConfigError):
        RenderLoop(terminal, alphanumeric(), GREEN, 1.0, 0)
    assert terminal.calls == []


def test_bad_advance_chance_rejected() -> None:
    with pytest.raises(ConfigError):
        RenderLoop(_FakeTerminal(), alphanumeric(), GREEN, 0.0, 25)


def test_keypress_terminates_after_one_frame() -> None:
    terminal = _FakeTerminal(events=[OtherEvent(b"x")])
    render_loop = _loop(terminal)
    assert render_loop.run() == 1
    assert render_loop.state is LoopState.TERMINATED
    assert terminal.calls == [
        "size",
        "enable_raw_input",
        "enter_alt_screen",
        "hide_cursor",
        "move_cursor_to(0,0)",
        "flush",
        "poll_event",
        "disable_raw_input",
        "leave_alt_screen",
        "show_cursor",
        "flush",
    ]


def test_every_cell_written_each_frame() -> None:
    terminal = _FakeTerminal(columns=7, rows=5, events=[None, None])
    _loop(terminal).run()
    assert terminal.frame_cells[:3] == [35, 35, 35]


def test_timeouts_advance_frames() -> None:
    terminal = _FakeTerminal(events=[None] * 5)
    assert _loop(terminal).run() == 6


def test_remaining_budget_is_passed_to_poll() -> None:
    ticks = iter([0.0, 0.01, 1.0, 1.5])
    terminal = _FakeTerminal(events=[None])
    _loop(terminal, now=lambda: next(ticks)).run()
    assert terminal.timeouts[0] == pytest.approx(0.04 - 0.01)
    # a frame that overran its budget polls without waiting
    assert terminal.timeouts[1] == 0.0


def test_resize_rebuilds_field() -> None:
    terminal = _FakeTerminal(events=[None, ResizeEvent(20, 4), None])
    render_loop = _loop(terminal)
    original_field: list = []

    real_step = render_loop.step

    def step() -> None:
        if not original_field and render_loop.field is not None:
            original_field.append(render_loop.field)
        real_step()

    render_loop.step = step  # type: ignore[method-assign]
    render_loop.run()
    assert render_loop.field is not None
    assert len(render_loop.field) == 20
    assert render_loop.field is not original_field[0]
    assert len(original_field[0]) == 10
    # the last flush comes from terminal restore
    assert terminal.frame_cells[-2] == 80


def test_resize_field_is_fresh() -> None:
    terminal = _FakeTerminal(events=[ResizeEvent(20, 4)])
    render_loop = _loop(terminal)
    render_loop.field = render_loop.build_field(10, 4)
    render_loop.step()
    assert render_loop.field is not None
    assert len(render_loop.field) == 20
    for drop in render_loop.field:
        assert -64 <= drop.position <= -1


def test_long_run_with_resize() -> None:
    events: list[Optional[Event]] = [None] * 999
    events.insert(500, ResizeEvent(20, 4))
    terminal = _FakeTerminal(columns=10, rows=4, events=events)
    render_loop = _loop(terminal)
    render_loop.run()
    assert render_loop.field is not None
    assert len(render_loop.field) == 20


def test_restores_terminal_when_frame_fails() -> None:
    terminal = _FakeTerminal()
    terminal.fail_on.add("poll_event")
    with pytest.raises(OSError, match="poll_event failed"):
        _loop(terminal).run()
    assert terminal.calls[-4:] == [
        "disable_raw_input",
        "leave_alt_screen",
        "show_cursor",
        "flush",
    ]


def test_restores_only_entered_modes() -> None:
    terminal = _FakeTerminal()
    terminal.fail_on.add("enter_alt_screen")
    with pytest.raises(OSError, match="enter_alt_screen failed"):
        _loop(terminal).run()
    assert "leave_alt_screen" not in terminal.calls
    assert "show_cursor" not in terminal.calls
    assert terminal.calls[-2:] == ["disable_raw_input", "flush"]


def test_size_failure_touches_nothing() -> None:
    terminal = _FakeTerminal()
    terminal.fail_on.add("size")
    with pytest.raises(OSError):
        _loop(terminal).run()
    assert terminal.calls == ["size"]


def test_cleanup_failure_does_not_mask_original_error() -> None:
    terminal = _FakeTerminal()
    terminal.fail_on.update({"poll_event", "leave_alt_screen"})
    with pytest.raises(OSError, match="poll_event failed"):
        _loop(terminal).run()
    assert "show_cursor" in terminal.calls


def test_cleanup_failure_reported_on_clean_exit() -> None:
    terminal = _FakeTerminal(events=[OtherEvent()])
    terminal.fail_on.add("show_cursor")
    with pytest.raises(OSError, match="show_cursor failed"):
        _loop(terminal).run()
    assert terminal.calls[-1] == "flush"


class _CellTerminal(_FakeTerminal):
    def __init__(self, columns: int, rows: int) -> None:
        super().__init__(columns=columns, rows=rows)
        self.written: list[Optional[str]] = []

    def write_char_styled(self, ch, color, bold: bool = False) -> None:
        super().write_char_styled(ch, color, bold)
        self.written.append(ch)

    def write_blank(self) -> None:
        super().write_blank()
        self.written.append(None)


def test_frame_follows_field_cells_in_row_order() -> None:
    terminal = _CellTerminal(columns=6, rows=5)
    render_loop = _loop(terminal)
    field = render_loop.build_field(6, 5)
    render_loop.field = field
    for _ in range(200):
        field.advance()
        if any(drop.is_visible(field.rows) for drop in field):
            break
    expected = []
    for row in range(field.rows):
        for column in range(field.columns):
            cell = field.styled_char_at(column, row)
            expected.append(None if cell is None else cell.char)
    assert any(ch is not None for ch in expected)
    render_loop.render_frame()
    assert terminal.written == expected
