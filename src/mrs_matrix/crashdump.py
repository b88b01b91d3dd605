"""faulthandler integration so hard crashes leave a trace on disk."""

from __future__ import annotations

import faulthandler
import time
from pathlib import Path
from typing import Optional, TextIO

_DUMP_FILE: Optional[TextIO] = None


def enable_faulthandler(log_path: Path) -> Path:
    """Send fatal-signal tracebacks to ``crashdump.log`` beside ``log_path``."""
    global _DUMP_FILE
    dump_path = log_path.parent / "crashdump.log"
    try:
        dump_path.parent.mkdir(parents=True, exist_ok=True)
        handle = open(dump_path, "a", encoding="utf-8")
    except OSError:
        return dump_path
    _DUMP_FILE = handle
    faulthandler.enable(file=handle)
    return dump_path


def dump_traceback(label: str) -> None:
    """Append a labelled stack dump of the current process."""
    handle = _DUMP_FILE
    if handle is None:
        return
    stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
    try:
        handle.write(f"\n[{stamp}] {label}\n")
        faulthandler.dump_traceback(file=handle)
        handle.flush()
    except (OSError, ValueError):
        return
