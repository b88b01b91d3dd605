"""Pytest configuration for mrs-matrix."""

from __future__ import annotations

import os

import pytest


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    del config
    if os.name == "posix":
        return
    skip_tty = pytest.mark.skip(reason="Pseudo-terminals need POSIX.")
    for item in items:
        if "tty" in item.keywords:
            item.add_marker(skip_tty)
