# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Revision-pinned working copies of upstream repositories."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from threading import Lock
from typing import Final

from .errors import CacheCorruptionError, CheckoutError, CloneError, FetchError
from .git import GitClient, GitCommandError
from .resolution.vcs import RepositoryRoot

CACHE_DIR_MODE: Final[int] = 0o700

ProgressLog = Callable[[str], None]


class CacheAction(str, Enum):
    """What :meth:`SourceCache.ensure` had to do to reach the pinned revision."""

    CLONED = "cloned"
    FETCHED = "fetched"
    REUSED = "reused"


@dataclass(frozen=True, slots=True)
class CacheResult:
    """A working copy checked out at ``revision``."""

    root: str
    directory: Path
    revision: str
    action: CacheAction


def cache_directory(cache_root: Path, root_key: str) -> Path:
    """Return the working-copy location for ``root_key`` beneath ``cache_root``.

    Raises:
        CacheCorruptionError: If ``root_key`` would escape ``cache_root``.
    """

    parts = PurePosixPath(root_key).parts
    if not parts or any(part in {"..", "/"} for part in parts):
        raise CacheCorruptionError("repository root cannot be mapped to a cache directory", subject=root_key)
    return cache_root.joinpath(*parts)


class SourceCache:
    """Keep one working copy per repository root at a pinned revision.

    A working copy that already sits at the pinned revision is reused without
    touching the network. Distinct roots may be prepared concurrently; calls
    for the same root are serialised.
    """

    def __init__(self, cache_root: Path, git: GitClient, *, progress: ProgressLog | None = None) -> None:
        """Create a cache.

        Args:
            cache_root: Directory holding one working copy per repository root.
            git: Client used for clone, fetch and checkout.
            progress: Optional sink for per-root download messages.
        """

        self._cache_root = cache_root
        self._git = git
        self._progress = progress
        self._locks: dict[str, Lock] = {}
        self._registry_lock = Lock()

    @property
    def cache_root(self) -> Path:
        """Return the directory holding every working copy."""

        return self._cache_root

    def directory_for(self, root_key: str) -> Path:
        """Return the working-copy location for ``root_key``."""

        return cache_directory(self._cache_root, root_key)

    def ensure(self, repository: RepositoryRoot, revision: str) -> CacheResult:
        """Make the working copy for ``repository`` reflect ``revision``.

        Args:
            repository: Repository to materialise.
            revision: Pinned revision to check out.

        Returns:
            CacheResult: Location of the working copy and the action taken.

        Raises:
            CloneError: If the initial clone fails.
            FetchError: If refreshing an existing working copy fails.
            CheckoutError: If ``revision`` cannot be checked out.
            CacheCorruptionError: If the cache location is not a usable working copy.
        """

        with self._lock_for(repository.root):
            return self._ensure_locked(repository, revision)

    def _lock_for(self, root_key: str) -> Lock:
        """Return the lock serialising work on ``root_key``, creating it on first use."""

        with self._registry_lock:
            return self._locks.setdefault(root_key, Lock())

    def _ensure_locked(self, repository: RepositoryRoot, revision: str) -> CacheResult:
        """Clone or refresh the working copy, then check out ``revision``.

        Must be called with the lock for ``repository.root`` held.
        """

        directory = self.directory_for(repository.root)
        if self._progress is not None:
            self._progress(f'downloading "{repository.root}" rev {revision} to "{directory}"')

        if not directory.exists() and not directory.is_symlink():
            action = self._clone(repository, directory)
        elif not directory.is_dir():
            raise CacheCorruptionError(f"{directory} should be a directory", subject=repository.root)
        else:
            action = self._refresh(repository, directory, revision)

        try:
            self._git.checkout(directory, revision)
        except GitCommandError as exc:
            raise CheckoutError(f"cannot check out revision {revision}: {exc}", subject=repository.root) from exc
        return CacheResult(root=repository.root, directory=directory, revision=revision, action=action)

    def _clone(self, repository: RepositoryRoot, directory: Path) -> CacheAction:
        """Create the private parent directories and clone into ``directory``.

        Raises:
            CloneError: If the parents cannot be created or the clone fails.
        """

        try:
            directory.parent.mkdir(mode=CACHE_DIR_MODE, parents=True, exist_ok=True)
        except OSError as exc:
            raise CloneError(f"cannot create {directory.parent}: {exc.strerror or exc}", subject=repository.root) from exc
        try:
            self._git.clone(repository.repo_url, directory)
        except GitCommandError as exc:
            raise CloneError(f"cannot clone {repository.repo_url}: {exc}", subject=repository.root) from exc
        return CacheAction.CLONED

    def _refresh(self, repository: RepositoryRoot, directory: Path, revision: str) -> CacheAction:
        """Reuse ``directory`` when it already sits at ``revision``; fetch otherwise.

        Raises:
            CacheCorruptionError: If ``directory`` is not a git working copy.
            FetchError: If fetching from ``origin`` fails.
        """

        try:
            head = self._git.head(directory)
        except GitCommandError as exc:
            raise CacheCorruptionError(f"{directory} is not a git working copy: {exc}", subject=repository.root) from exc
        if head == revision:
            return CacheAction.REUSED
        try:
            self._git.fetch(directory)
        except GitCommandError as exc:
            raise FetchError(f"cannot fetch updates: {exc}", subject=repository.root) from exc
        return CacheAction.FETCHED


__all__ = ["CacheAction", "CacheResult", "SourceCache", "cache_directory"]
