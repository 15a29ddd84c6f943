# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Compare a vendored tree against its pinned upstream working copy."""

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .compare import file_digest, render_unified_diff
from .errors import TreeReadError
from .walk import iter_relative_files

CheckLog = Callable[[str], None]


class ComparisonStatus(str, Enum):
    """Verdict for one vendored file."""

    MATCH = "match"
    MISMATCH = "mismatch"
    MISSING_UPSTREAM = "missing_upstream"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class FileComparison:
    """Outcome of comparing one vendored file with its upstream counterpart.

    Attributes:
        relative_path: ``/``-separated path below the repository root.
        status: Comparison verdict.
        diff: Unified diff from vendored to upstream content for mismatches.
        cause: Underlying error for :attr:`ComparisonStatus.ERROR`.
        repaired: Whether repair mode brought the vendored file in line.
    """

    relative_path: str
    status: ComparisonStatus
    diff: str = ""
    cause: OSError | None = None
    repaired: bool = False

    @property
    def is_mismatch(self) -> bool:
        """Return whether the file differs from upstream or is gone upstream."""

        return self.status in {ComparisonStatus.MISMATCH, ComparisonStatus.MISSING_UPSTREAM}


@dataclass(slots=True)
class RootReport:
    """Non-matching files found under one repository root."""

    root: str
    files_checked: int = 0
    mismatches: list[FileComparison] = field(default_factory=list)

    @property
    def unrepaired(self) -> list[FileComparison]:
        """Return the mismatches that repair mode did not fix."""

        return [comparison for comparison in self.mismatches if not comparison.repaired]

    @property
    def failed(self) -> bool:
        """Return whether any mismatch under this root remains unrepaired."""

        return bool(self.unrepaired)


def compare_file(vendor_file: Path, upstream_file: Path, relative: str) -> FileComparison:
    """Classify ``vendor_file`` against ``upstream_file``.

    Read failures are returned as :attr:`ComparisonStatus.ERROR` rather than
    raised, so callers decide how to abort.
    """

    try:
        vendored_digest = file_digest(vendor_file)
        if not upstream_file.is_file():
            diff = render_unified_diff(vendor_file.read_bytes(), b"")
            return FileComparison(relative, ComparisonStatus.MISSING_UPSTREAM, diff=diff)
        if vendored_digest == file_digest(upstream_file):
            return FileComparison(relative, ComparisonStatus.MATCH)
        diff = render_unified_diff(vendor_file.read_bytes(), upstream_file.read_bytes())
    except OSError as exc:
        return FileComparison(relative, ComparisonStatus.ERROR, cause=exc)
    return FileComparison(relative, ComparisonStatus.MISMATCH, diff=diff)


def repair_file(vendor_file: Path, upstream_file: Path, comparison: FileComparison) -> FileComparison:
    """Bring ``vendor_file`` in line with upstream and mark ``comparison`` repaired.

    Mismatched files are overwritten with the upstream bytes and mode; files
    that no longer exist upstream are removed. A vendored symlink is replaced
    by a regular file rather than written through.

    Raises:
        TreeReadError: If the vendored file cannot be written or removed.
    """

    try:
        if comparison.status is ComparisonStatus.MISSING_UPSTREAM:
            vendor_file.unlink()
        else:
            if vendor_file.is_symlink():
                vendor_file.unlink()
            shutil.copyfile(upstream_file, vendor_file)
            shutil.copymode(upstream_file, vendor_file)
    except OSError as exc:
        raise TreeReadError(f"cannot repair file: {exc.strerror or exc}", subject=str(vendor_file)) from exc
    return FileComparison(
        comparison.relative_path,
        comparison.status,
        diff=comparison.diff,
        repaired=True,
    )


class Verifier:
    """Walk vendored trees and compare each file with the cached upstream copy."""

    def __init__(self, vendor_root: Path, *, fix: bool = False, log: CheckLog | None = None) -> None:
        """Create a verifier.

        Args:
            vendor_root: Directory holding ``<root-key>/...`` vendored trees.
            fix: Repair mismatches in place instead of only reporting them.
            log: Optional sink receiving every checked path.
        """

        self._vendor_root = vendor_root
        self._fix = fix
        self._log = log

    def vendor_directory(self, root_key: str) -> Path:
        """Return the vendored copy of ``root_key``, e.g. ``vendor/github.com/a/b``.

        Args:
            root_key: ``/``-separated repository root.

        Returns:
            Path: Directory holding the vendored files of that root.
        """

        return self._vendor_root.joinpath(*root_key.split("/"))

    def verify_root(self, root_key: str, upstream_dir: Path) -> RootReport:
        """Compare every vendored file of ``root_key`` with ``upstream_dir``.

        The walk visits every file; mismatches never stop it early.

        Args:
            root_key: Repository root whose vendored tree is checked.
            upstream_dir: Working copy checked out at the pinned revision.

        Returns:
            RootReport: Mismatches found (and repaired in fix mode).

        Raises:
            TreeReadError: If the vendored tree is missing or any file cannot be read.
        """

        vendor_dir = self.vendor_directory(root_key)
        if not vendor_dir.is_dir():
            raise TreeReadError("vendored copy is missing", subject=str(vendor_dir))

        report = RootReport(root=root_key)
        for relative in iter_relative_files(vendor_dir):
            if self._log is not None:
                self._log(f"checking {root_key}/{relative}")
            vendor_file = vendor_dir / relative
            upstream_file = upstream_dir / relative
            comparison = compare_file(vendor_file, upstream_file, relative)
            report.files_checked += 1
            if comparison.status is ComparisonStatus.ERROR:
                cause = comparison.cause
                detail = cause.strerror if cause is not None and cause.strerror else cause
                raise TreeReadError(f"cannot read file: {detail}", subject=f"{root_key}/{relative}") from cause
            if not comparison.is_mismatch:
                continue
            if self._fix:
                comparison = repair_file(vendor_file, upstream_file, comparison)
            report.mismatches.append(comparison)
        return report


__all__ = [
    "ComparisonStatus",
    "FileComparison",
    "RootReport",
    "Verifier",
    "compare_file",
    "repair_file",
]
