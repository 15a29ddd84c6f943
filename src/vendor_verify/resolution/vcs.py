# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Version-control kinds and repository roots."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class VcsKind(str, Enum):
    """Version-control systems an import path can resolve to."""

    GIT = "git"
    MERCURIAL = "hg"
    BAZAAR = "bzr"
    SUBVERSION = "svn"
    FOSSIL = "fossil"

    @property
    def display_name(self) -> str:
        """Return the human-readable name, e.g. ``Mercurial``."""

        return _DISPLAY_NAMES[self]

    @classmethod
    def from_command(cls, command: str) -> VcsKind | None:
        """Return the kind whose command name is ``command``, if any."""

        try:
            return cls(command)
        except ValueError:
            return None


_DISPLAY_NAMES = {
    VcsKind.GIT: "Git",
    VcsKind.MERCURIAL: "Mercurial",
    VcsKind.BAZAAR: "Bazaar",
    VcsKind.SUBVERSION: "Subversion",
    VcsKind.FOSSIL: "Fossil",
}


@dataclass(frozen=True, slots=True)
class RepositoryRoot:
    """A physical repository serving one or more import paths.

    Attributes:
        root: Import-path prefix identifying the repository (the cache and
            vendor key, e.g. ``github.com/pkg/errors``).
        repo_url: URL handed to the version-control client.
        vcs: Version-control system hosting the repository.
    """

    root: str
    repo_url: str
    vcs: VcsKind


__all__ = ["RepositoryRoot", "VcsKind"]
