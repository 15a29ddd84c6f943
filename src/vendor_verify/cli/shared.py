# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Logger handed to the pipeline by the CLI."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from rich.console import Console
from rich.text import Text

from ..logging import fail as core_fail
from ..logging import ok as core_ok

_KEY_VALUE: Final[re.Pattern[str]] = re.compile(r"(?P<key>[\w-]+)=(?P<value>\"[^\"]*\"|\S+)")
_LOCATION_KEYS: Final[frozenset[str]] = frozenset({"url", "root", "import", "prefix"})


@dataclass(slots=True)
class CLILogger:
    """Status and verbose output honouring the ``--emoji`` and ``--color`` flags."""

    console: Console
    use_emoji: bool
    use_color: bool = True
    debug_enabled: bool = False

    def fail(self, message: str) -> None:
        """Print a failure line."""

        core_fail(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def ok(self, message: str) -> None:
        """Print a success line."""

        core_ok(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def debug(self, message: str) -> None:
        """Print ``message`` with a ``[debug]`` prefix in verbose mode.

        Git command lines (``$ ...``) are dimmed as a whole; elsewhere
        ``key=value`` pairs are highlighted, with locations in blue.
        """

        if not self.debug_enabled:
            return
        line = Text("[debug] ", style="bold cyan")
        if message.startswith("$ "):
            line.append(message, style="dim")
        else:
            line.append_text(_highlight_pairs(message))
        self.console.print(line)


def _highlight_pairs(message: str) -> Text:
    """Return ``message`` with every ``key=value`` pair styled.

    Args:
        message: Debug message text.

    Returns:
        Text: Rich text with keys in magenta and values in green, or blue for locations.
    """

    text = Text()
    position = 0
    for match in _KEY_VALUE.finditer(message):
        text.append(message[position : match.start()])
        key = match.group("key")
        text.append(key, style="magenta")
        text.append("=")
        text.append(match.group("value"), style="bold blue" if key in _LOCATION_KEYS else "bold green")
        position = match.end()
    text.append(message[position:])
    return text


def build_cli_logger(*, emoji: bool, debug: bool = False, no_color: bool = False) -> CLILogger:
    """Return a :class:`CLILogger` for the given output preferences.

    Args:
        emoji: Whether status lines may carry emoji prefixes.
        debug: Whether verbose ``[debug]`` lines are printed.
        no_color: Whether styling is suppressed.

    Returns:
        CLILogger: Logger with its own Rich console.
    """

    console = Console(no_color=no_color, highlight=False, soft_wrap=True)
    return CLILogger(console=console, use_emoji=emoji, use_color=not no_color, debug_enabled=debug)


__all__ = ["CLILogger", "build_cli_logger"]
