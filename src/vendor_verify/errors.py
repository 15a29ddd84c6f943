# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Exceptions raised by the vendor verification pipeline.

Every exception derived from :class:`VendorVerifyError` is fatal: the run stops
and no pass/fail summary is printed. Content mismatches are not exceptions;
they are collected into the verification outcome instead.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final

FATAL_EXIT_CODE: Final[int] = 2


class VendorVerifyError(RuntimeError):
    """Base class for fatal verification errors."""

    stage: str = "verify"

    def __init__(self, message: str, *, subject: str | None = None) -> None:
        """Initialise the error with a message and the identifier that failed.

        Args:
            message: Human-readable description of the failure.
            subject: Import path, repository root, or filesystem path involved.
        """

        super().__init__(message)
        self.message = message
        self.subject = subject

    def describe(self) -> str:
        """Return ``[stage] subject: message`` for terminal output.

        Returns:
            str: Formatted description naming the stage and identifier.
        """

        if self.subject:
            return f"[{self.stage}] {self.subject}: {self.message}"
        return f"[{self.stage}] {self.message}"


class ConfigError(VendorVerifyError):
    """Raised when configuration input is invalid."""

    stage = "config"


class ManifestParseError(VendorVerifyError):
    """Raised when the dependency manifest is missing or malformed."""

    stage = "manifest"


class ResolutionError(VendorVerifyError):
    """Raised when an import path cannot be mapped to a repository."""

    stage = "resolve"


class UnsupportedVCSError(ResolutionError):
    """Raised when a repository uses a version-control system other than Git."""

    def __init__(self, root: str, vcs_name: str) -> None:
        """Initialise the error for ``root`` served by ``vcs_name``.

        Args:
            root: Repository root that resolved to the unsupported backend.
            vcs_name: Display name of the version-control system.
        """

        super().__init__(f"currently only git dependencies can be verified (found {vcs_name})", subject=root)
        self.vcs_name = vcs_name


class InconsistentManifestError(ResolutionError):
    """Raised when import paths of one repository pin different revisions."""

    def __init__(self, root: str, pins: Iterable[tuple[str, str]]) -> None:
        """Initialise the error listing every conflicting ``(import path, revision)`` pin.

        Args:
            root: Repository root shared by the conflicting import paths.
            pins: Pairs of import path and pinned revision.
        """

        formatted = ", ".join(f"{path}@{rev}" for path, rev in pins)
        super().__init__(f"import paths pin different revisions: {formatted}", subject=root)


class CloneError(VendorVerifyError):
    """Raised when cloning a repository into the cache fails."""

    stage = "cache"


class FetchError(CloneError):
    """Raised when updating an existing cache working copy fails."""


class CheckoutError(VendorVerifyError):
    """Raised when the pinned revision cannot be checked out."""

    stage = "cache"


class CacheCorruptionError(VendorVerifyError):
    """Raised when a cache location exists but is not a usable working copy."""

    stage = "cache"


class TreeReadError(VendorVerifyError):
    """Raised when the vendor or cache tree cannot be walked or read."""

    stage = "compare"


__all__ = [
    "FATAL_EXIT_CODE",
    "CacheCorruptionError",
    "CheckoutError",
    "CloneError",
    "ConfigError",
    "FetchError",
    "InconsistentManifestError",
    "ManifestParseError",
    "ResolutionError",
    "TreeReadError",
    "UnsupportedVCSError",
    "VendorVerifyError",
]
