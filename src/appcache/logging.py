# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Console messages for build progress with optional colour and emoji."""

from __future__ import annotations

import sys
from functools import lru_cache
from typing import Final

from rich.console import Console
from rich.text import Text

_PREFIXES: Final[dict[str, tuple[str, str]]] = {
    "info": ("ℹ️ ", "cyan"),
    "ok": ("✅ ", "green"),
    "warn": ("⚠️ ", "yellow"),
    "fail": ("❌ ", "red"),
}


@lru_cache(maxsize=4)
def _console(color: bool, emoji: bool) -> Console:
    return Console(no_color=not color, emoji=emoji, soft_wrap=True, highlight=False)


def _report(kind: str, msg: str, *, use_emoji: bool, use_color: bool | None) -> None:
    """Print ``msg`` with the prefix and style registered for ``kind``.

    Colour defaults to on when stdout is a terminal.
    """

    if use_color is None:
        use_color = sys.stdout.isatty()
    symbol, style = _PREFIXES[kind]
    text = Text(f"{symbol if use_emoji else ''}{msg}")
    if use_color:
        text.stylize(style)
    _console(use_color, use_emoji).print(text)


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an informational message."""

    _report("info", msg, use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a success message."""

    _report("ok", msg, use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a warning message."""

    _report("warn", msg, use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an error message."""

    _report("fail", msg, use_emoji=use_emoji, use_color=use_color)


__all__ = ["fail", "info", "ok", "warn"]
