# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Enumerate the file entries of a directory tree."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

from .errors import TreeReadError


def relative_path(path: Path | str, root: Path | str) -> str:
    """Return ``path`` relative to ``root`` as a ``/``-separated string.

    The root prefix and any leading separators are stripped so vendor and cache
    lookups address the same relative structure.
    """

    raw = os.fspath(path)
    prefix = os.fspath(root)
    if raw.startswith(prefix):
        raw = raw[len(prefix) :]
    raw = raw.lstrip("/" + os.sep)
    return raw.replace(os.sep, "/")


def _raise_walk_error(error: OSError) -> None:
    """``os.walk`` error hook turning listing failures into :class:`TreeReadError`."""

    raise TreeReadError(f"cannot walk directory: {error.strerror or error}", subject=error.filename) from error


def iter_relative_files(root: Path) -> Iterator[str]:
    """Yield relative paths of every non-directory entry under ``root``, lazily.

    Entries are classified without following symlinks: a link is yielded as a
    file whatever it points at, including a dangling link or a link to a
    directory, and linked directories are never descended into. Reading such an
    entry later fails loudly instead of the entry being skipped.

    Args:
        root: Directory to enumerate.

    Yields:
        str: ``/``-separated path below ``root``, sorted within each directory.

    Raises:
        TreeReadError: If a directory cannot be listed.
    """

    if not root.exists():
        return
    for directory, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        base = Path(directory)
        linked = [name for name in dirnames if (base / name).is_symlink()]
        dirnames[:] = sorted(name for name in dirnames if name not in linked)
        for name in sorted([*filenames, *linked]):
            yield relative_path(base / name, root)


__all__ = ["iter_relative_files", "relative_path"]
