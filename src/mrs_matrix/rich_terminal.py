"""POSIX terminal backend built on a rich console."""

from __future__ import annotations

import logging
import os
import select
import signal
import sys
from typing import Any, Optional

from rich.color import Color, ColorSystem
from rich.console import Console
from rich.control import Control
from rich.style import Style

from mrs_matrix.terminal import Event, OtherEvent, ResizeEvent, TerminalError

try:
    import termios
    import tty
except ImportError as exc:  # pragma: no cover - depends on platform
    raise RuntimeError("mrs-matrix needs a POSIX terminal (termios).") from exc

logger = logging.getLogger(__name__)

_COLOR_SYSTEMS = {
    "standard": ColorSystem.STANDARD,
    "256": ColorSystem.EIGHT_BIT,
    "truecolor": ColorSystem.TRUECOLOR,
    "windows": ColorSystem.WINDOWS,
}


class RichTerminal:
    """Buffered terminal writer with raw, select-based input.

    Output is collected between flushes and written in one go. Resizes are
    reported through ``SIGWINCH``, forwarded over a pipe so they interrupt
    :meth:`poll_event`.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        *,
        stdin_fd: Optional[int] = None,
    ) -> None:
        self._console = console or Console(highlight=False)
        self._stdin_fd = sys.stdin.fileno() if stdin_fd is None else stdin_fd
        self._color_system = _COLOR_SYSTEMS.get(self._console.color_system or "")
        self._buffer: list[str] = []
        self._styles: dict[tuple[Color, bool], Style] = {}
        self._saved_attrs: Optional[list[Any]] = None
        self._wakeup_read: Optional[int] = None
        self._wakeup_write: Optional[int] = None
        self._previous_winch: Any = None
        self._winch_installed = False

    def size(self) -> tuple[int, int]:
        width, height = self._console.size
        if width <= 0 or height <= 0:
            raise TerminalError(f"Unable to determine terminal size ({width}x{height})")
        return (width, height)

    def enter_alt_screen(self) -> None:
        self._console.set_alt_screen(True)

    def leave_alt_screen(self) -> None:
        self._console.set_alt_screen(False)

    def hide_cursor(self) -> None:
        self._console.show_cursor(False)

    def show_cursor(self) -> None:
        self._console.show_cursor(True)

    def enable_raw_input(self) -> None:
        try:
            saved = termios.tcgetattr(self._stdin_fd)
            tty.setraw(self._stdin_fd)
        except termios.error as exc:
            raise TerminalError(f"Unable to enable raw input: {exc}") from exc
        self._saved_attrs = saved
        try:
            self._wakeup_read, self._wakeup_write = os.pipe()
            os.set_blocking(self._wakeup_read, False)
            os.set_blocking(self._wakeup_write, False)
            self._previous_winch = signal.signal(signal.SIGWINCH, self._on_winch)
            self._winch_installed = True
        except BaseException:
            self._close_wakeup_pipe()
            self._saved_attrs = None
            termios.tcsetattr(self._stdin_fd, termios.TCSADRAIN, saved)
            raise

    def disable_raw_input(self) -> None:
        if self._winch_installed:
            previous = self._previous_winch
            signal.signal(
                signal.SIGWINCH, signal.SIG_DFL if previous is None else previous
            )
            self._winch_installed = False
            self._previous_winch = None
        self._close_wakeup_pipe()
        if self._saved_attrs is not None:
            termios.tcsetattr(self._stdin_fd, termios.TCSADRAIN, self._saved_attrs)
            self._saved_attrs = None

    def _close_wakeup_pipe(self) -> None:
        for fd in (self._wakeup_read, self._wakeup_write):
            if fd is not None:
                os.close(fd)
        self._wakeup_read = self._wakeup_write = None

    def _on_winch(self, signum: int, frame: object) -> None:
        del signum, frame
        if self._wakeup_write is None:
            return
        try:
            os.write(self._wakeup_write, b"\0")
        except BlockingIOError:
            # pipe full; a wakeup is already pending
            return

    def move_cursor_to(self, row: int, col: int) -> None:
        self._buffer.append(str(Control.move_to(col, row)))

    def _style(self, color: Color, bold: bool) -> Style:
        key = (color, bold)
        style = self._styles.get(key)
        if style is None:
            style = Style(color=color, bold=bold)
            self._styles[key] = style
        return style

    def write_char_styled(self, ch: str, color: Color, bold: bool = False) -> None:
        style = self._style(color, bold)
        self._buffer.append(style.render(ch, color_system=self._color_system))

    def write_blank(self) -> None:
        self._buffer.append(" ")

    def flush(self) -> None:
        data = "".join(self._buffer)
        self._buffer.clear()
        out = self._console.file
        out.write(data)
        out.flush()

    def poll_event(self, timeout: float) -> Optional[Event]:
        fds = [self._stdin_fd]
        if self._wakeup_read is not None:
            fds.append(self._wakeup_read)
        ready, _, _ = select.select(fds, [], [], max(0.0, timeout))
        if self._wakeup_read is not None and self._wakeup_read in ready:
            self._drain_wakeups()
            columns, rows = self.size()
            logger.debug("Terminal resized to %sx%s", columns, rows)
            return ResizeEvent(columns, rows)
        if self._stdin_fd in ready:
            return OtherEvent(os.read(self._stdin_fd, 1024))
        return None

    def _drain_wakeups(self) -> None:
        fd = self._wakeup_read
        if fd is None:
            return
        while True:
            try:
                if not os.read(fd, 64):
                    return
            except BlockingIOError:
                return
