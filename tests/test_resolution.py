# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for import-path resolution."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from vendor_verify.errors import ResolutionError
from vendor_verify.resolution import HttpResponse, HttpTransportError, ImportPathResolver, RepositoryRoot, VcsKind
from vendor_verify.resolution.meta import MetaImport, has_path_prefix, match_go_import, parse_meta_go_imports


def _meta_page(*contents: str) -> str:
    tags = "\n".join(f'<meta name="go-import" content="{content}">' for content in contents)
    return f"<!DOCTYPE html>\n<html>\n<head>\n{tags}\n</head>\n<body>nothing to see</body>\n</html>\n"


@dataclass
class FakeFetcher:
    """Serve canned pages; any other URL fails at the transport level."""

    pages: dict[str, HttpResponse] = field(default_factory=dict)
    requested: list[str] = field(default_factory=list)

    def page(self, url: str, text: str, status_code: int = 200) -> None:
        self.pages[url] = HttpResponse(url=url, status_code=status_code, text=text)

    def __call__(self, url: str) -> HttpResponse:
        self.requested.append(url)
        try:
            return self.pages[url]
        except KeyError:
            raise HttpTransportError(f"connection refused: {url}") from None


@pytest.mark.parametrize(
    ("import_path", "expected"),
    [
        (
            "github.com/pkg/errors",
            RepositoryRoot("github.com/pkg/errors", "https://github.com/pkg/errors", VcsKind.GIT),
        ),
        (
            "github.com/docker/docker/pkg/term",
            RepositoryRoot("github.com/docker/docker", "https://github.com/docker/docker", VcsKind.GIT),
        ),
        (
            "hub.jazz.net/git/user1/pkgname/sub",
            RepositoryRoot("hub.jazz.net/git/user1/pkgname", "https://hub.jazz.net/git/user1/pkgname", VcsKind.GIT),
        ),
        (
            "git.apache.org/thrift.git/lib/go/thrift",
            RepositoryRoot("git.apache.org/thrift.git", "https://git.apache.org/thrift.git", VcsKind.GIT),
        ),
        (
            "launchpad.net/gocheck",
            RepositoryRoot("launchpad.net/gocheck", "https://launchpad.net/gocheck", VcsKind.BAZAAR),
        ),
        (
            "example.org/user/foo.git/bar",
            RepositoryRoot("example.org/user/foo.git", "https://example.org/user/foo", VcsKind.GIT),
        ),
        (
            "example.org/repo.hg",
            RepositoryRoot("example.org/repo.hg", "https://example.org/repo", VcsKind.MERCURIAL),
        ),
    ],
)
def test_static_hosts_resolve_without_network(import_path: str, expected: RepositoryRoot) -> None:
    fetcher = FakeFetcher()

    assert ImportPathResolver(fetcher).resolve(import_path) == expected
    assert fetcher.requested == []


def test_github_path_with_vcs_suffix_is_rejected() -> None:
    with pytest.raises(ResolutionError, match="invalid version control suffix"):
        ImportPathResolver(FakeFetcher()).resolve("github.com/user/unicode.git")


def test_github_path_without_repository_is_rejected() -> None:
    with pytest.raises(ResolutionError, match="invalid import path for this host"):
        ImportPathResolver(FakeFetcher()).resolve("github.com/user")


@pytest.mark.parametrize(
    ("scm", "expected"),
    [('{"scm": "git"}', VcsKind.GIT), ('{"scm": "hg"}', VcsKind.MERCURIAL), ("{}", VcsKind.GIT)],
)
def test_bitbucket_asks_the_api_for_the_vcs(scm: str, expected: VcsKind) -> None:
    fetcher = FakeFetcher()
    fetcher.page("https://api.bitbucket.org/2.0/repositories/owner/repo?fields=scm", scm)

    resolved = ImportPathResolver(fetcher).resolve("bitbucket.org/owner/repo/pkg")

    assert resolved == RepositoryRoot("bitbucket.org/owner/repo", "https://bitbucket.org/owner/repo", expected)


@pytest.mark.parametrize("import_path", ["", "/abs/path", "example.com/../etc", "example.com//x", "example.com\\x"])
def test_malformed_import_paths_are_rejected(import_path: str) -> None:
    with pytest.raises(ResolutionError):
        ImportPathResolver(FakeFetcher()).resolve(import_path)


def test_dynamic_discovery_uses_go_import_meta_tag() -> None:
    fetcher = FakeFetcher()
    fetcher.page(
        "https://golang.org/x/net?go-get=1",
        _meta_page("golang.org/x/net git https://go.googlesource.com/net"),
    )
    fetcher.page(
        "https://golang.org/x/net/context?go-get=1",
        _meta_page("golang.org/x/net git https://go.googlesource.com/net"),
    )

    resolved = ImportPathResolver(fetcher).resolve("golang.org/x/net/context")

    assert resolved == RepositoryRoot("golang.org/x/net", "https://go.googlesource.com/net", VcsKind.GIT)
    assert fetcher.requested == [
        "https://golang.org/x/net/context?go-get=1",
        "https://golang.org/x/net?go-get=1",
    ]


def test_dynamic_discovery_falls_back_to_http() -> None:
    fetcher = FakeFetcher()
    fetcher.page("http://example.com/repo?go-get=1", _meta_page("example.com/repo git https://example.com/repo.git"))

    resolved = ImportPathResolver(fetcher).resolve("example.com/repo")

    assert resolved.repo_url == "https://example.com/repo.git"
    assert fetcher.requested == ["https://example.com/repo?go-get=1", "http://example.com/repo?go-get=1"]


def test_dynamic_discovery_reports_both_failures() -> None:
    fetcher = FakeFetcher()
    fetcher.page("https://example.com/repo?go-get=1", "gone", status_code=404)

    with pytest.raises(ResolutionError, match="discovery failed") as excinfo:
        ImportPathResolver(fetcher).resolve("example.com/repo")

    assert "HTTP 404" in excinfo.value.message
    assert "connection refused" in excinfo.value.message


def test_dynamic_discovery_requires_dotted_host() -> None:
    fetcher = FakeFetcher()

    with pytest.raises(ResolutionError, match="hostname"):
        ImportPathResolver(fetcher).resolve("localpkg/sub")
    assert fetcher.requested == []


def test_prefix_metadata_must_agree() -> None:
    fetcher = FakeFetcher()
    fetcher.page("https://example.com/a/b?go-get=1", _meta_page("example.com/a git https://example.com/a.git"))
    fetcher.page("https://example.com/a?go-get=1", _meta_page("example.com/a git https://mirror.example.com/a.git"))

    with pytest.raises(ResolutionError, match="do not agree"):
        ImportPathResolver(fetcher).resolve("example.com/a/b")


def test_unknown_vcs_in_meta_tag_is_rejected() -> None:
    fetcher = FakeFetcher()
    fetcher.page("https://example.com/a?go-get=1", _meta_page("example.com/a darcs https://example.com/a"))

    with pytest.raises(ResolutionError, match="unknown version control system"):
        ImportPathResolver(fetcher).resolve("example.com/a")


def test_repo_root_without_scheme_is_rejected() -> None:
    fetcher = FakeFetcher()
    fetcher.page("https://example.com/a?go-get=1", _meta_page("example.com/a git example.com/a"))

    with pytest.raises(ResolutionError, match="no scheme"):
        ImportPathResolver(fetcher).resolve("example.com/a")


def test_verbose_resolution_logs_requests() -> None:
    fetcher = FakeFetcher()
    fetcher.page("https://example.com/a?go-get=1", _meta_page("example.com/a git https://example.com/a"))
    messages: list[str] = []

    ImportPathResolver(fetcher, debug=messages.append).resolve("example.com/a")

    assert "fetching url=https://example.com/a?go-get=1" in messages
    assert messages[-1] == "resolved import=example.com/a root=example.com/a vcs=git source=meta"


def test_meta_parser_stops_at_body() -> None:
    document = (
        '<html><head><meta name="go-import" content="a.com/x git https://a.com/x">'
        '<meta name="go-import" content="a.com/z git">'
        '</head><body><meta name="go-import" content="a.com/y git https://a.com/y"></body></html>'
    )

    assert parse_meta_go_imports(document) == [MetaImport("a.com/x", "git", "https://a.com/x")]


def test_match_go_import_skips_module_proxies_and_rejects_ambiguity() -> None:
    imports = [
        MetaImport("a.com/x", "mod", "https://proxy.a.com"),
        MetaImport("a.com/x", "git", "https://a.com/x"),
    ]

    assert match_go_import(imports, "a.com/x/sub").vcs == "git"
    with pytest.raises(ResolutionError, match="multiple"):
        match_go_import([*imports, MetaImport("a.com", "git", "https://a.com")], "a.com/x/sub")
    with pytest.raises(ResolutionError, match="no go-import"):
        match_go_import(imports, "a.com/xyz")


@pytest.mark.parametrize(
    ("path", "prefix", "expected"),
    [("a.com/x", "a.com/x", True), ("a.com/x/y", "a.com/x", True), ("a.com/xy", "a.com/x", False)],
)
def test_has_path_prefix_respects_element_boundaries(path: str, prefix: str, expected: bool) -> None:
    assert has_path_prefix(path, prefix) is expected
