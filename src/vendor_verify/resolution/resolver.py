# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Map Go import paths to the repositories that serve them."""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Final

from ..errors import ResolutionError
from .hosts import resolve_static
from .http import HttpFetcher, HttpResponse, HttpTransportError
from .meta import MetaImport, match_go_import, parse_meta_go_imports
from .vcs import RepositoryRoot, VcsKind

DebugLog = Callable[[str], None]

_VALID_IMPORT_PATH: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9_.\-~+/:]+$")


def _silent(_message: str) -> None:
    """Discard a debug message."""

    return None


class ImportPathResolver:
    """Resolve import paths the way ``go get`` does.

    Known hosting sites are matched against a static table; any other host is
    asked for its ``go-import`` meta tags over HTTPS, falling back to HTTP.
    The resolver does not deduplicate: callers group results by
    :attr:`RepositoryRoot.root`.
    """

    def __init__(self, fetch: HttpFetcher, *, debug: DebugLog | None = None) -> None:
        """Create a resolver.

        Args:
            fetch: HTTP GET callable used for discovery requests.
            debug: Optional sink for verbose progress messages.
        """

        self._fetch = fetch
        self._debug = debug or _silent

    def resolve(self, import_path: str) -> RepositoryRoot:
        """Return the repository root serving ``import_path``.

        Raises:
            ResolutionError: If the path is malformed or no repository can be determined.
        """

        _validate_import_path(import_path)
        static = resolve_static(import_path, self._fetch)
        if static is not None:
            self._debug(f"resolved import={import_path} root={static.root} vcs={static.vcs.value} source=static")
            return static
        return self._resolve_dynamic(import_path)

    def _resolve_dynamic(self, import_path: str) -> RepositoryRoot:
        """Resolve ``import_path`` through ``go-import`` meta tag discovery.

        When the matching tag covers only a prefix of the path, the prefix is
        fetched again and must advertise the same tag.

        Raises:
            ResolutionError: If discovery fails or the tags disagree.
        """

        host = import_path.split("/", 1)[0]
        if "." not in host:
            raise ResolutionError("import path does not begin with a hostname", subject=import_path)
        selected = match_go_import(self._meta_imports(import_path), import_path)
        if selected.prefix != import_path:
            self._debug(f"verifying prefix={selected.prefix} import={import_path}")
            confirmed = match_go_import(self._meta_imports(selected.prefix), selected.prefix)
            if confirmed != selected:
                raise ResolutionError(
                    f"meta tags for {selected.prefix} do not agree with those for the import path",
                    subject=import_path,
                )
        root = _to_repository_root(selected, import_path)
        self._debug(f"resolved import={import_path} root={root.root} vcs={root.vcs.value} source=meta")
        return root

    def _meta_imports(self, import_path: str) -> list[MetaImport]:
        """Fetch the discovery page for ``import_path`` and parse its meta tags."""

        response = self._fetch_discovery_page(import_path)
        self._debug(f"parsing meta tags url={response.url} status={response.status_code}")
        return parse_meta_go_imports(response.text)

    def _fetch_discovery_page(self, import_path: str) -> HttpResponse:
        """GET ``?go-get=1`` over HTTPS, then HTTP, returning the first ``200``.

        Raises:
            ResolutionError: If both schemes fail, listing each failure.
        """

        failures: list[str] = []
        for scheme in ("https", "http"):
            url = f"{scheme}://{import_path}?go-get=1"
            self._debug(f"fetching url={url}")
            try:
                response = self._fetch(url)
            except HttpTransportError as exc:
                failures.append(f"{url}: {exc}")
                continue
            if response.ok:
                return response
            failures.append(f"{url}: HTTP {response.status_code}")
        raise ResolutionError(f"discovery failed ({'; '.join(failures)})", subject=import_path)


def _validate_import_path(import_path: str) -> None:
    """Reject empty, absolute or dot-segment paths and unexpected characters.

    Raises:
        ResolutionError: If ``import_path`` is not a valid import path.
    """

    if not import_path or import_path.startswith("/") or not _VALID_IMPORT_PATH.match(import_path):
        raise ResolutionError("invalid import path", subject=import_path or "<empty>")
    if any(part in {"", ".", ".."} for part in import_path.split("/")):
        raise ResolutionError("invalid import path element", subject=import_path)


def _to_repository_root(selected: MetaImport, import_path: str) -> RepositoryRoot:
    """Build a :class:`RepositoryRoot` from the selected meta tag.

    Args:
        selected: Tag whose prefix matched ``import_path``.
        import_path: Path being resolved, used in error messages.

    Returns:
        RepositoryRoot: Root keyed by the tag prefix.

    Raises:
        ResolutionError: If the repo URL has no scheme or the VCS is unknown.
    """

    if "://" not in selected.repo_root:
        raise ResolutionError(f"invalid repo root {selected.repo_root!r}: no scheme", subject=import_path)
    kind = VcsKind.from_command(selected.vcs)
    if kind is None:
        raise ResolutionError(f"unknown version control system {selected.vcs!r}", subject=import_path)
    return RepositoryRoot(root=selected.prefix, repo_url=selected.repo_root, vcs=kind)


__all__ = ["ImportPathResolver"]
