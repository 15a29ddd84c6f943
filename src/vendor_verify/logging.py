# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Terminal output helpers: stage markers, verbatim text and status lines."""

from __future__ import annotations

from typing import Final

import typer
from rich.text import Text

from .console import detect_tty, get_console_manager

# kind -> (emoji prefix, rich style)
_STATUS_STYLES: Final[dict[str, tuple[str, str]]] = {
    "ok": ("✅ ", "green"),
    "fail": ("❌ ", "red"),
}


def emoji(symbol: str, enable: bool) -> str:
    """Return *symbol* when emoji output is enabled, otherwise blank."""

    return symbol if enable else ""


def _emit(msg: str, *, style: str | None, use_emoji: bool, use_color: bool | None) -> None:
    """Print ``msg`` on the shared console, styled only when colour is enabled.

    Args:
        msg: Text to print; never parsed as markup.
        style: Rich style applied when colour is enabled.
        use_emoji: Whether the console may render emoji.
        use_color: Colour preference; ``None`` follows TTY detection.
    """

    color_enabled = detect_tty() if use_color is None else use_color
    text = Text(msg)
    if style and color_enabled:
        text.stylize(style)
    get_console_manager().get(color=color_enabled, emoji=use_emoji).print(text)


def _status(kind: str, msg: str, *, use_emoji: bool, use_color: bool | None) -> None:
    """Print ``msg`` with the symbol and style registered for ``kind``."""

    symbol, style = _STATUS_STYLES[kind]
    _emit(f"{emoji(symbol, use_emoji)}{msg}", style=style, use_emoji=use_emoji, use_color=use_color)


def plain(msg: str, *, end: str = "\n") -> None:
    """Write ``msg`` verbatim, without markup or wrapping.

    Diff bodies go through here so tabs and brackets survive untouched.
    """

    typer.echo(f"{msg}{end}", nl=False)


def section(title: str, *, use_color: bool) -> None:
    """Print a ``# title`` stage marker.

    Args:
        title: Stage description.
        use_color: Whether the marker may be styled.
    """

    _emit(f"# {title}", style="bold cyan", use_emoji=False, use_color=use_color)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Print a success line."""

    _status("ok", msg, use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a fatal-error line, prefixed with ``❌`` when emoji are enabled."""

    _status("fail", msg, use_emoji=use_emoji, use_color=use_color)


__all__ = ["emoji", "fail", "ok", "plain", "section"]
