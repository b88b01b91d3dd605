"""Terminal capabilities required by the render loop."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Union

from rich.color import Color
from typing_extensions import TypeAlias


class TerminalError(OSError):
    """The terminal could not do what was asked of it."""


@dataclass(frozen=True)
class ResizeEvent:
    columns: int
    rows: int


@dataclass(frozen=True)
class OtherEvent:
    """A key press, mouse event or anything else that is not a resize."""

    data: bytes = b""


Event: TypeAlias = Union[ResizeEvent, OtherEvent]


class Terminal(Protocol):
    def size(self) -> tuple[int, int]:
        """Return ``(columns, rows)``."""
        ...

    def enter_alt_screen(self) -> None: ...

    def leave_alt_screen(self) -> None: ...

    def hide_cursor(self) -> None: ...

    def show_cursor(self) -> None: ...

    def enable_raw_input(self) -> None: ...

    def disable_raw_input(self) -> None: ...

    def move_cursor_to(self, row: int, col: int) -> None: ...

    def write_char_styled(self, ch: str, color: Color, bold: bool = False) -> None: ...

    def write_blank(self) -> None: ...

    def flush(self) -> None: ...

    def poll_event(self, timeout: float) -> Optional[Event]:
        """Wait up to ``timeout`` seconds; ``None`` means nothing happened."""
        ...
