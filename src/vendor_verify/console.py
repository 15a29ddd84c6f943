# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared Rich consoles for status output."""

from __future__ import annotations

import sys
from functools import lru_cache

from rich.console import Console


def detect_tty() -> bool:
    """Return ``True`` when stdout is attached to a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


class RichConsoleManager:
    """Hand out one :class:`Console` per ``(color, emoji)`` preference.

    A console is replaced when ``sys.stdout`` has been swapped since it was
    built (test runners and ``CliRunner`` do this), so output always reaches
    the current stream.
    """

    def __init__(self) -> None:
        self._consoles: dict[tuple[bool, bool], Console] = {}

    def get(self, *, color: bool, emoji: bool) -> Console:
        """Return the console for ``color`` and ``emoji``.

        Args:
            color: Whether ANSI styling may be emitted (only on a terminal).
            emoji: Whether Rich may render emoji codes.

        Returns:
            Console: Console writing to the current ``sys.stdout``.
        """

        key = (color, emoji)
        console = self._consoles.get(key)
        if console is None or console.file is not sys.stdout:
            styled = color and detect_tty()
            console = Console(
                file=sys.stdout,
                color_system="auto" if styled else None,
                force_terminal=styled,
                no_color=not styled,
                emoji=emoji,
                highlight=False,
                soft_wrap=True,
            )
            self._consoles[key] = console
        return console


@lru_cache(maxsize=1)
def get_console_manager() -> RichConsoleManager:
    """Return the process-wide :class:`RichConsoleManager`."""

    return RichConsoleManager()


__all__ = ["RichConsoleManager", "detect_tty", "get_console_manager"]
