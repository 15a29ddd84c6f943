# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run external commands (``git``) without a shell and without prompting."""

from __future__ import annotations

import os
import shutil

# Bandit: commands are always argument lists resolved against PATH; no shell.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final

TIMEOUT_RETURNCODE: Final[int] = 124
NON_INTERACTIVE_ENV: Final[Mapping[str, str]] = {"GIT_TERMINAL_PROMPT": "0"}


@dataclass(frozen=True, slots=True)
class CommandOptions:
    """How a command is launched.

    Attributes:
        cwd: Working directory, or ``None`` for the current one.
        env: Variables layered over the inherited environment.
        capture_output: Collect stdout and stderr instead of inheriting them.
        text: Decode captured output as text.
        timeout: Seconds before the command is killed, or ``None``.
        discard_stdin: Connect stdin to ``/dev/null``.
    """

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    capture_output: bool = False
    text: bool = True
    timeout: float | None = None
    discard_stdin: bool = False

    def with_cwd(self, cwd: Path | None) -> CommandOptions:
        """Return a copy of these options running in ``cwd``."""

        return replace(self, cwd=cwd)

    def environment(self) -> dict[str, str]:
        """Return the inherited environment with prompts disabled and ``env`` applied."""

        merged = dict(os.environ)
        merged.update(NON_INTERACTIVE_ENV)
        if self.env:
            merged.update(self.env)
        return merged


def _as_text(value: str | bytes | None) -> str | None:
    """Decode partial output captured from a timed-out command."""

    if isinstance(value, bytes):
        return value.decode(errors="replace")
    return value


def resolve_executable(args: Sequence[str]) -> list[str]:
    """Return ``args`` with the executable replaced by its absolute path.

    Raises:
        ValueError: If ``args`` is empty.
        FileNotFoundError: If the executable is not on ``PATH``.
    """

    if not args:
        raise ValueError("cannot run an empty command")
    executable, *rest = args
    if Path(executable).is_absolute():
        return [executable, *rest]
    located = shutil.which(executable)
    if located is None:
        raise FileNotFoundError(f"Executable '{executable}' was not found on PATH")
    return [located, *rest]


def run_command(args: Sequence[str], *, options: CommandOptions | None = None) -> CompletedProcess[str]:
    """Run ``args`` and return the completed process.

    A non-zero exit never raises; callers inspect ``returncode``. A timeout is
    reported the same way, as :data:`TIMEOUT_RETURNCODE` with a note appended
    to stderr.

    Args:
        args: Executable and its arguments.
        options: Launch options; defaults to :class:`CommandOptions`.

    Returns:
        CompletedProcess: Exit status and any captured output.

    Raises:
        FileNotFoundError: If the executable cannot be located.
    """

    opts = options or CommandOptions()
    command = resolve_executable(args)
    try:
        completed: CompletedProcess[str] = subprocess.run(  # nosec B603
            command,
            cwd=opts.cwd,
            env=opts.environment(),
            check=False,
            capture_output=opts.capture_output,
            text=opts.text,
            timeout=opts.timeout,
            stdin=subprocess.DEVNULL if opts.discard_stdin else None,
        )
    except subprocess.TimeoutExpired as exc:
        note = f"timed out after {opts.timeout:g}s"
        stderr = _as_text(exc.stderr)
        completed = CompletedProcess(
            command,
            TIMEOUT_RETURNCODE,
            stdout=_as_text(exc.stdout) or "",
            stderr=f"{stderr.rstrip()}\n{note}" if stderr else note,
        )
    return completed


__all__ = [
    "CommandOptions",
    "NON_INTERACTIVE_ENV",
    "TIMEOUT_RETURNCODE",
    "resolve_executable",
    "run_command",
]
