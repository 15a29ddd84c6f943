# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Thin Git client used to materialise cached working copies."""

from __future__ import annotations

import shlex
from collections.abc import Callable, Sequence
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final

from .process import CommandOptions, run_command

GIT_EXECUTABLE: Final[str] = "git"

GitRunner = Callable[[Sequence[str], CommandOptions], CompletedProcess[str]]
CommandLog = Callable[[str], None]


class GitCommandError(RuntimeError):
    """Raised when a git invocation exits with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str | None) -> None:
        detail = (stderr or "").strip() or "<no output>"
        super().__init__(f"'{shlex.join(command)}' exited with status {returncode}: {detail}")
        self.command = tuple(command)
        self.returncode = returncode
        self.stderr = stderr


def _default_runner(cmd: Sequence[str], options: CommandOptions) -> CompletedProcess[str]:
    """Execute ``cmd`` through :func:`run_command`."""

    return run_command(cmd, options=options)


class GitClient:
    """Run the handful of git commands the source cache needs."""

    def __init__(
        self,
        *,
        runner: GitRunner | None = None,
        log: CommandLog | None = None,
        timeout: float | None = None,
    ) -> None:
        """Create a git client.

        Args:
            runner: Optional command runner; defaults to :func:`run_command`.
            log: Optional sink receiving each command line before it runs.
            timeout: Optional per-command timeout in seconds.
        """

        self._runner = runner or _default_runner
        self._log = log
        self._options = CommandOptions(capture_output=True, text=True, timeout=timeout, discard_stdin=True)

    def clone(self, repo_url: str, directory: Path) -> None:
        """Clone ``repo_url`` into the not yet existing ``directory``."""

        self._run(["clone", repo_url, str(directory)], cwd=None)

    def fetch(self, directory: Path) -> None:
        """Fetch new commits from ``origin`` into the working copy."""

        self._run(["fetch", "origin"], cwd=directory)

    def checkout(self, directory: Path, revision: str) -> None:
        """Detach the working copy in ``directory`` at ``revision``.

        The trailing ``--`` makes git read ``revision`` as a commit only, so a
        tracked file of the same name is never checked out in its place.

        Raises:
            GitCommandError: If ``revision`` looks like an option or names no commit.
        """

        args = ["checkout", "--quiet", "--detach", revision, "--"]
        if revision.startswith("-"):
            raise GitCommandError([GIT_EXECUTABLE, *args], 128, f"invalid revision '{revision}'")
        self._run(args, cwd=directory)

    def head(self, directory: Path) -> str:
        """Return the full hash of the commit checked out in ``directory``."""

        completed = self._run(["rev-parse", "HEAD"], cwd=directory)
        return (completed.stdout or "").strip()

    def _run(self, args: Sequence[str], *, cwd: Path | None) -> CompletedProcess[str]:
        """Run ``git`` with ``args`` in ``cwd`` and return the completed process.

        Args:
            args: Git subcommand and its arguments.
            cwd: Working copy to run in, or ``None`` for the current directory.

        Returns:
            CompletedProcess[str]: The successful invocation with captured output.

        Raises:
            GitCommandError: If git is missing or exits with a non-zero status.
        """

        cmd = [GIT_EXECUTABLE, *args]
        if self._log is not None:
            prefix = f"cd {cwd}; " if cwd is not None else ""
            self._log(f"$ {prefix}{shlex.join(cmd)}")
        try:
            completed = self._runner(cmd, self._options.with_cwd(cwd))
        except FileNotFoundError as exc:
            raise GitCommandError(cmd, 127, str(exc)) from exc
        if completed.returncode != 0:
            raise GitCommandError(cmd, completed.returncode, completed.stderr)
        return completed


__all__ = ["GitClient", "GitCommandError", "GitRunner"]
