# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import json
import shutil
import subprocess
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from vendor_verify.process import CommandOptions
from vendor_verify.resolution.vcs import RepositoryRoot, VcsKind


def write_manifest(path: Path, deps: Sequence[tuple[str, str]]) -> Path:
    """Write a Godeps manifest listing ``(import path, revision)`` pairs."""

    document = {
        "ImportPath": "example.com/app",
        "GoVersion": "go1.7",
        "GodepVersion": "v74",
        "Deps": [{"ImportPath": import_path, "Rev": rev} for import_path, rev in deps],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document, indent="\t"), encoding="utf-8")
    return path


def write_tree(root: Path, files: Mapping[str, bytes]) -> None:
    for relative, content in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)


@dataclass
class FakeResolver:
    """Resolve import paths from a fixed ``import path -> root`` table."""

    roots: dict[str, RepositoryRoot]
    calls: list[str] = field(default_factory=list)

    def resolve(self, import_path: str) -> RepositoryRoot:
        self.calls.append(import_path)
        return self.roots[import_path]


def github_root(owner_repo: str, vcs: VcsKind = VcsKind.GIT) -> RepositoryRoot:
    root = f"github.com/{owner_repo}"
    return RepositoryRoot(root=root, repo_url=f"https://{root}", vcs=vcs)


@dataclass
class FakeGitRemotes:
    """Offline stand-in for git.

    ``remotes`` maps repository URLs to ``revision -> files`` snapshots. A clone
    creates the directory, a checkout writes the snapshot for the revision, and
    ``rev-parse HEAD`` reports the last checked-out revision.
    """

    remotes: dict[str, dict[str, dict[str, bytes]]] = field(default_factory=dict)
    calls: list[tuple[tuple[str, ...], Path | None]] = field(default_factory=list)
    heads: dict[Path, str] = field(default_factory=dict)
    origins: dict[Path, str] = field(default_factory=dict)
    failures: dict[str, int] = field(default_factory=dict)

    def verbs(self) -> list[str]:
        return [args[1] for args, _ in self.calls]

    def __call__(self, cmd: Sequence[str], options: CommandOptions) -> subprocess.CompletedProcess[str]:
        args = tuple(cmd)
        self.calls.append((args, options.cwd))
        verb = args[1]
        if verb in self.failures:
            return subprocess.CompletedProcess(list(args), self.failures[verb], stdout="", stderr=f"fatal: {verb} failed")
        if verb == "clone":
            url, directory = args[2], Path(args[3])
            if url not in self.remotes:
                return subprocess.CompletedProcess(list(args), 128, stdout="", stderr="fatal: repository not found")
            directory.mkdir()
            self.origins[directory] = url
            return subprocess.CompletedProcess(list(args), 0, stdout="", stderr="")
        assert options.cwd is not None
        directory = Path(options.cwd)
        if verb == "rev-parse":
            head = self.heads.get(directory)
            if head is None:
                return subprocess.CompletedProcess(list(args), 128, stdout="", stderr="fatal: not a git repository")
            return subprocess.CompletedProcess(list(args), 0, stdout=f"{head}\n", stderr="")
        if verb == "fetch":
            return subprocess.CompletedProcess(list(args), 0, stdout="", stderr="")
        if verb == "checkout":
            revision = args[args.index("--") - 1]
            snapshots = self.remotes[self.origins[directory]]
            if revision not in snapshots:
                return subprocess.CompletedProcess(
                    list(args), 1, stdout="", stderr=f"error: pathspec '{revision}' did not match"
                )
            for child in directory.iterdir():
                if child.is_dir():
                    shutil.rmtree(child)
                else:
                    child.unlink()
            write_tree(directory, snapshots[revision])
            self.heads[directory] = revision
            return subprocess.CompletedProcess(list(args), 0, stdout="", stderr="")
        raise AssertionError(f"unexpected git command {args}")


@pytest.fixture
def fake_git() -> FakeGitRemotes:
    return FakeGitRemotes()


@pytest.fixture
def manifest_writer() -> Callable[[Path, Sequence[tuple[str, str]]], Path]:
    return write_manifest


@pytest.fixture
def tree_writer() -> Callable[[Path, Mapping[str, bytes]], None]:
    return write_tree


@pytest.fixture
def resolver_for() -> Callable[[Mapping[str, str]], FakeResolver]:
    """Return a factory mapping ``import path -> owner/repo`` to GitHub roots."""

    def _build(table: Mapping[str, str]) -> FakeResolver:
        return FakeResolver({import_path: github_root(owner_repo) for import_path, owner_repo in table.items()})

    return _build


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Return an empty project directory used as the working directory."""

    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return project
