# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Parsing of ``<meta name="go-import">`` discovery tags."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Final

from ..errors import ResolutionError

GO_IMPORT_META: Final[str] = "go-import"
MODULE_PROXY_VCS: Final[str] = "mod"


@dataclass(frozen=True, slots=True)
class MetaImport:
    """One ``prefix vcs repo-root`` triple from a go-import tag."""

    prefix: str
    vcs: str
    repo_root: str


class _GoImportParser(HTMLParser):
    """Collect go-import meta tags appearing before the document body."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.imports: list[MetaImport] = []
        self._done = False

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        """Record well-formed ``go-import`` meta tags until ``<body>`` opens."""

        if self._done:
            return
        if tag == "body":
            self._done = True
            return
        if tag != "meta":
            return
        attributes = {name.lower(): value or "" for name, value in attrs}
        if attributes.get("name") != GO_IMPORT_META:
            return
        fields = attributes.get("content", "").split()
        if len(fields) == 3:
            self.imports.append(MetaImport(prefix=fields[0], vcs=fields[1], repo_root=fields[2]))

    def handle_endtag(self, tag: str) -> None:
        """Stop collecting once ``</head>`` closes."""

        if tag == "head":
            self._done = True


def parse_meta_go_imports(document: str) -> list[MetaImport]:
    """Return the go-import tags found in the head of ``document``.

    Tags with a field count other than three are ignored, as are tags after
    ``</head>`` or ``<body>``.
    """

    parser = _GoImportParser()
    parser.feed(document)
    parser.close()
    return parser.imports


def has_path_prefix(path: str, prefix: str) -> bool:
    """Return whether ``prefix`` equals ``path`` or ends at a ``/`` boundary of it."""

    if not path.startswith(prefix):
        return False
    return len(path) == len(prefix) or prefix.endswith("/") or path[len(prefix)] == "/"


def match_go_import(imports: Iterable[MetaImport], import_path: str) -> MetaImport:
    """Select the single tag whose prefix covers ``import_path``.

    ``mod`` entries describe module proxies and are skipped.

    Raises:
        ResolutionError: If no tag or more than one tag matches.
    """

    matches: Sequence[MetaImport] = [
        candidate
        for candidate in imports
        if candidate.vcs != MODULE_PROXY_VCS and has_path_prefix(import_path, candidate.prefix)
    ]
    if not matches:
        raise ResolutionError("no go-import meta tag matches the import path", subject=import_path)
    if len(matches) > 1:
        prefixes = ", ".join(candidate.prefix for candidate in matches)
        raise ResolutionError(f"multiple go-import meta tags match the import path ({prefixes})", subject=import_path)
    return matches[0]


__all__ = [
    "MetaImport",
    "has_path_prefix",
    "match_go_import",
    "parse_meta_go_imports",
]
