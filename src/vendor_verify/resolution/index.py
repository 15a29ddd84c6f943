# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Group manifest entries by the repository that serves them."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from ..errors import InconsistentManifestError, ResolutionError, UnsupportedVCSError
from ..manifest import ManifestEntry
from .vcs import RepositoryRoot, VcsKind

SUPPORTED_VCS = VcsKind.GIT


class Resolver(Protocol):
    """Anything able to map an import path to its repository root."""

    def resolve(self, import_path: str) -> RepositoryRoot: ...


@dataclass(frozen=True, slots=True)
class IndexedRoot:
    """A repository root with the import paths vendored from it and its pin."""

    repository: RepositoryRoot
    import_paths: tuple[str, ...]
    revision: str

    @property
    def key(self) -> str:
        """Return the repository root used as the cache and vendor key."""

        return self.repository.root


@dataclass(slots=True)
class ResolutionIndex:
    """Mapping of root key to repository, import paths and pinned revision.

    Iteration yields :class:`IndexedRoot` values in the order roots first
    appeared in the manifest.
    """

    roots: dict[str, RepositoryRoot] = field(default_factory=dict)
    paths: dict[str, list[str]] = field(default_factory=dict)
    revisions: dict[str, str] = field(default_factory=dict)
    _pins: dict[str, list[tuple[str, str]]] = field(default_factory=dict)

    def add(self, entry: ManifestEntry, repository: RepositoryRoot) -> None:
        """Record ``entry`` as served by ``repository``.

        Raises:
            ResolutionError: If the same root was resolved to a different version-control system.
            InconsistentManifestError: If the root is already pinned to a different revision.
        """

        key = repository.root
        known = self.roots.get(key)
        if known is not None and known.vcs is not repository.vcs:
            raise ResolutionError(
                f"resolved to both {known.vcs.display_name} and {repository.vcs.display_name}",
                subject=key,
            )
        pins = self._pins.setdefault(key, [])
        pins.append((entry.import_path, entry.pinned_revision))
        previous = self.revisions.get(key)
        if previous is not None and previous != entry.pinned_revision:
            raise InconsistentManifestError(key, pins)
        self.roots.setdefault(key, repository)
        self.paths.setdefault(key, []).append(entry.import_path)
        self.revisions[key] = entry.pinned_revision

    def __iter__(self) -> Iterator[IndexedRoot]:
        """Yield indexed roots in first-seen manifest order."""

        for key, repository in self.roots.items():
            yield IndexedRoot(repository=repository, import_paths=tuple(self.paths[key]), revision=self.revisions[key])

    def __len__(self) -> int:
        return len(self.roots)

    def entries(self) -> Sequence[IndexedRoot]:
        """Return the indexed roots as a list."""

        return list(self)


def build_index(entries: Iterable[ManifestEntry], resolver: Resolver) -> ResolutionIndex:
    """Resolve every entry and group the results by repository root.

    Args:
        entries: Manifest entries in manifest order.
        resolver: Import-path resolver, called once per entry.

    Returns:
        ResolutionIndex: Grouped roots.

    Raises:
        ResolutionError: If an import path cannot be resolved.
        UnsupportedVCSError: If a root is hosted on anything but Git.
        InconsistentManifestError: If one root is pinned to two revisions.
    """

    index = ResolutionIndex()
    for entry in entries:
        repository = resolver.resolve(entry.import_path)
        if repository.vcs is not SUPPORTED_VCS:
            raise UnsupportedVCSError(repository.root, repository.vcs.display_name)
        index.add(entry, repository)
    return index


__all__ = ["IndexedRoot", "ResolutionIndex", "Resolver", "SUPPORTED_VCS", "build_index"]
