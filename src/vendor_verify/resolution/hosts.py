# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Well-known code hosting sites resolved without HTTP discovery."""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Final

from ..errors import ResolutionError
from .http import HttpFetcher, HttpTransportError
from .vcs import RepositoryRoot, VcsKind

VCS_SUFFIXES: Final[tuple[str, ...]] = tuple(f".{kind.value}" for kind in VcsKind)
BITBUCKET_API: Final[str] = "https://api.bitbucket.org/2.0/repositories/{name}?fields=scm"

_ELEMENT: Final[str] = r"[A-Za-z0-9_.\-]+"


@dataclass(frozen=True, slots=True)
class HostMatch:
    """Named groups of a successful host pattern match."""

    root: str
    groups: dict[str, str]


VcsDetector = Callable[[HostMatch, HttpFetcher], VcsKind]


@dataclass(frozen=True, slots=True)
class HostPattern:
    """Prefix and pattern identifying the repository part of an import path.

    Attributes:
        prefix: Literal prefix checked before the regular expression; empty for
            the generic ``host/path.vcs`` form.
        pattern: Expression with a ``root`` group naming the repository root.
        vcs: Fixed kind, or ``None`` when ``detect`` or the ``vcs`` group decides.
        detect: Optional callable determining the kind (may use the network).
        reject_vcs_suffix: Whether a root ending in ``.git`` and friends is invalid.
    """

    prefix: str
    pattern: re.Pattern[str]
    vcs: VcsKind | None = None
    detect: VcsDetector | None = None
    reject_vcs_suffix: bool = False

    def match(self, import_path: str) -> HostMatch | None:
        """Match ``import_path`` against this host.

        Args:
            import_path: Import path being resolved.

        Returns:
            HostMatch | None: Named groups, or ``None`` when the prefix differs.

        Raises:
            ResolutionError: If the prefix matches but the rest of the path does not.
        """

        if not import_path.startswith(self.prefix):
            return None
        found = self.pattern.match(import_path)
        if found is None:
            raise ResolutionError("invalid import path for this host", subject=import_path)
        groups = {name: value for name, value in found.groupdict().items() if value is not None}
        return HostMatch(root=groups["root"], groups=groups)

    def resolve(self, import_path: str, fetch: HttpFetcher) -> RepositoryRoot | None:
        """Return the repository root for ``import_path`` or ``None`` if this host does not apply.

        Raises:
            ResolutionError: If the path belongs to this host but is malformed.
        """

        matched = self.match(import_path)
        if matched is None:
            return None
        if self.reject_vcs_suffix and matched.root.endswith(VCS_SUFFIXES):
            raise ResolutionError("invalid version control suffix in path", subject=import_path)
        kind = self._kind(matched, fetch)
        repo = matched.groups.get("repo", matched.root)
        return RepositoryRoot(root=matched.root, repo_url=f"https://{repo}", vcs=kind)

    def _kind(self, matched: HostMatch, fetch: HttpFetcher) -> VcsKind:
        """Return the fixed, detected or path-encoded version-control kind."""

        if self.vcs is not None:
            return self.vcs
        if self.detect is not None:
            return self.detect(matched, fetch)
        kind = VcsKind.from_command(matched.groups.get("vcs", ""))
        if kind is None:
            raise ResolutionError("unknown version control system", subject=matched.root)
        return kind


def _bitbucket_vcs(matched: HostMatch, fetch: HttpFetcher) -> VcsKind:
    """Ask the Bitbucket API whether the repository is Git or Mercurial."""

    url = BITBUCKET_API.format(name=matched.groups["bitname"])
    try:
        response = fetch(url)
    except HttpTransportError as exc:
        raise ResolutionError(f"bitbucket lookup failed: {exc}", subject=matched.root) from exc
    if not response.ok:
        raise ResolutionError(f"bitbucket lookup returned HTTP {response.status_code}", subject=matched.root)
    try:
        payload = json.loads(response.text)
    except json.JSONDecodeError as exc:
        raise ResolutionError("bitbucket lookup returned invalid JSON", subject=matched.root) from exc
    scm = payload.get("scm") if isinstance(payload, dict) else None
    if not scm:
        return VcsKind.GIT
    kind = VcsKind.from_command(str(scm))
    if kind is None:
        raise ResolutionError(f"bitbucket reports unknown scm {scm!r}", subject=matched.root)
    return kind


KNOWN_HOSTS: Final[tuple[HostPattern, ...]] = (
    HostPattern(
        prefix="github.com/",
        pattern=re.compile(rf"^(?P<root>github\.com/{_ELEMENT}/{_ELEMENT})(/{_ELEMENT})*$"),
        vcs=VcsKind.GIT,
        reject_vcs_suffix=True,
    ),
    HostPattern(
        prefix="bitbucket.org/",
        pattern=re.compile(rf"^(?P<root>bitbucket\.org/(?P<bitname>{_ELEMENT}/{_ELEMENT}))(/{_ELEMENT})*$"),
        detect=_bitbucket_vcs,
    ),
    HostPattern(
        prefix="launchpad.net/",
        pattern=re.compile(
            rf"^(?P<root>launchpad\.net/((?P<project>{_ELEMENT})(?P<series>/{_ELEMENT})?"
            rf"|~{_ELEMENT}/(\+junk|{_ELEMENT})/{_ELEMENT}))(/{_ELEMENT})*$"
        ),
        vcs=VcsKind.BAZAAR,
    ),
    HostPattern(
        prefix="hub.jazz.net/git/",
        pattern=re.compile(rf"^(?P<root>hub\.jazz\.net/git/[a-z0-9]+/{_ELEMENT})(/{_ELEMENT})*$"),
        vcs=VcsKind.GIT,
        reject_vcs_suffix=True,
    ),
    HostPattern(
        prefix="git.apache.org/",
        pattern=re.compile(rf"^(?P<root>git\.apache\.org/[a-z0-9_.\-]+\.git)(/{_ELEMENT})*$"),
        vcs=VcsKind.GIT,
    ),
)

GENERIC_VCS_PATH: Final[re.Pattern[str]] = re.compile(
    r"^(?P<root>(?P<repo>([a-z0-9.\-]+\.)+[a-z0-9.\-]+(:[0-9]+)?(/~?[A-Za-z0-9_.\-]+)+?)"
    r"\.(?P<vcs>bzr|fossil|git|hg|svn))(/~?[A-Za-z0-9_.\-]+)*$"
)


def resolve_static(import_path: str, fetch: HttpFetcher) -> RepositoryRoot | None:
    """Resolve ``import_path`` against the known-host table.

    Returns ``None`` for hosts that need HTTP discovery.

    Raises:
        ResolutionError: If the path names a known host but is malformed.
    """

    for host in KNOWN_HOSTS:
        resolved = host.resolve(import_path, fetch)
        if resolved is not None:
            return resolved
    generic = GENERIC_VCS_PATH.match(import_path)
    if generic is None:
        return None
    kind = VcsKind(generic.group("vcs"))
    return RepositoryRoot(root=generic.group("root"), repo_url=f"https://{generic.group('repo')}", vcs=kind)


__all__ = ["GENERIC_VCS_PATH", "HostPattern", "KNOWN_HOSTS", "resolve_static"]
