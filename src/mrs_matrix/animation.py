"""The fixed-framerate render loop."""

from __future__ import annotations

import enum
import logging
import random
import time
from typing import Callable, Optional

from mrs_matrix.charsets import CharacterSet
from mrs_matrix.color_algorithms import ColorAlgorithm
from mrs_matrix.config import ConfigError
from mrs_matrix.drop_field import DropField
from mrs_matrix.terminal import ResizeEvent, Terminal

logger = logging.getLogger(__name__)


class LoopState(enum.Enum):
    RUNNING = "running"
    TERMINATED = "terminated"


class RenderLoop:
    """Draws a :class:`DropField` on a terminal until a non-resize event arrives.

    Frames are paced by the input poll: after drawing and advancing, the loop
    blocks on the terminal for whatever is left of the frame budget.
    """

    def __init__(
        self,
        terminal: Terminal,
        charset: CharacterSet,
        color_algorithm: ColorAlgorithm,
        advance_chance: float,
        target_framerate: int,
        *,
        now: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
    ) -> None:
        if target_framerate <= 0:
            raise ConfigError(f"framerate must be positive, got {target_framerate}")
        if not 0.0 < advance_chance <= 1.0:
            raise ConfigError(
                f"advance chance must be within (0, 1], got {advance_chance}"
            )
        self._terminal = terminal
        self._charset = charset
        self._color_algorithm = color_algorithm
        self._advance_chance = advance_chance
        self._now = now
        self._rng = rng
        self.frame_duration = 1.0 / target_framerate
        self.state = LoopState.TERMINATED
        self.field: Optional[DropField] = None
        self.frames = 0
        self._release: list[tuple[str, Callable[[], None]]] = []

    def build_field(self, columns: int, rows: int) -> DropField:
        if self.field is not None:
            return self.field.resized(columns, rows)
        return DropField(
            columns,
            rows,
            self._charset,
            self._color_algorithm,
            self._advance_chance,
            rng=self._rng,
        )

    def run(self) -> int:
        """Run until terminated and return the number of frames drawn."""
        columns, rows = self._terminal.size()
        try:
            self._enter_modes()
            self.field = self.build_field(columns, rows)
            self.state = LoopState.RUNNING
            logger.info(
                "Render loop started at %sx%s, %.1f fps",
                columns,
                rows,
                1.0 / self.frame_duration,
            )
            while self.state is LoopState.RUNNING:
                self.step()
        except BaseException:
            self.state = LoopState.TERMINATED
            self._restore_modes(raise_errors=False)
            raise
        self._restore_modes(raise_errors=True)
        logger.info("Render loop terminated after %s frames", self.frames)
        return self.frames

    def _enter_modes(self) -> None:
        terminal = self._terminal
        terminal.enable_raw_input()
        self._release.append(("disable raw input", terminal.disable_raw_input))
        terminal.enter_alt_screen()
        self._release.append(("leave alternate screen", terminal.leave_alt_screen))
        terminal.hide_cursor()
        self._release.append(("show cursor", terminal.show_cursor))

    def _restore_modes(self, *, raise_errors: bool) -> None:
        first_error: Optional[BaseException] = None
        release = self._release + [("flush", self._terminal.flush)]
        self._release = []
        for label, action in release:
            try:
                action()
            except Exception as exc:
                logger.exception("Terminal restore step failed: %s", label)
                if first_error is None:
                    first_error = exc
        if raise_errors and first_error is not None:
            raise first_error

    def render_frame(self) -> None:
        field = self.field
        if field is None:
            return
        terminal = self._terminal
        terminal.move_cursor_to(0, 0)
        for row in range(field.rows):
            for column in range(field.columns):
                styled = field.styled_char_at(column, row)
                if styled is None:
                    terminal.write_blank()
                else:
                    terminal.write_char_styled(styled.char, styled.color, styled.bold)
        terminal.flush()

    def step(self) -> None:
        """Draw, advance and wait out one frame, then handle any input."""
        started = self._now()
        self.render_frame()
        if self.field is not None:
            self.field.advance()
        self.frames += 1
        remaining = max(0.0, self.frame_duration - (self._now() - started))
        event = self._terminal.poll_event(remaining)
        if event is None:
            return
        if isinstance(event, ResizeEvent):
            logger.debug("Resize to %sx%s", event.columns, event.rows)
            self.field = self.build_field(event.columns, event.rows)
            return
        logger.debug("Input event %r; stopping", event)
        self.state = LoopState.TERMINATED
