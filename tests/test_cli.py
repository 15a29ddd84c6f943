# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the vendor-verify command line."""

from __future__ import annotations

import importlib
import json
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from vendor_verify.cache import SourceCache
from vendor_verify.cli import app
from vendor_verify.config import VerifyConfig
from vendor_verify.git import GitClient
from vendor_verify.pipeline import DebugLog, PipelineServices
from vendor_verify.reporting import Reporter
from vendor_verify.verifier import Verifier

if TYPE_CHECKING:
    from conftest import FakeGitRemotes, FakeResolver

ManifestWriter = Callable[[Path, Sequence[tuple[str, str]]], Path]
TreeWriter = Callable[[Path, Mapping[str, bytes]], None]
ResolverFactory = Callable[[Mapping[str, str]], "FakeResolver"]

VENDORED = Path("vendor") / "github.com" / "a" / "b" / "x.go"


@pytest.fixture
def project(
    workspace: Path,
    fake_git: FakeGitRemotes,
    manifest_writer: ManifestWriter,
    tree_writer: TreeWriter,
    resolver_for: ResolverFactory,
    monkeypatch: pytest.MonkeyPatch,
) -> Path:
    manifest_writer(workspace / "Godeps" / "Godeps.json", [("github.com/a/b", "rev1")])
    tree_writer(workspace / "vendor" / "github.com" / "a" / "b", {"x.go": b"X\n"})
    fake_git.remotes["https://github.com/a/b"] = {"rev1": {"x.go": b"Y\n"}}
    resolver = resolver_for({"github.com/a/b": "a/b"})

    def _build_services(config: VerifyConfig, *, debug: DebugLog | None = None) -> PipelineServices:
        log = debug if config.verbose else None
        return PipelineServices(
            resolver=resolver,
            cache=SourceCache(config.cache_root, GitClient(runner=fake_git, log=log), progress=log),
            verifier=Verifier(config.vendor_path, fix=config.fix, log=log),
            reporter=Reporter(use_color=config.use_color),
        )

    monkeypatch.setattr(importlib.import_module("vendor_verify.cli.app"), "build_services", _build_services)
    return workspace


def test_changed_vendored_file_exits_one(project: Path) -> None:
    result = CliRunner().invoke(app, ["--no-emoji", "--no-color", "-cache", str(project / "cache")])

    assert result.exit_code == 1
    assert "[!] file github.com/a/b/x.go has changes" in result.stdout
    assert "-X\n+Y\n" in result.stdout
    assert result.stdout.rstrip().endswith("# Failures were detected")
    assert (project / VENDORED).read_bytes() == b"X\n"


@pytest.mark.parametrize("flag", ["-fix", "--fix"])
def test_fix_repairs_and_exits_zero(project: Path, flag: str) -> None:
    result = CliRunner().invoke(app, ["--no-emoji", "--no-color", "-cache", str(project / "cache"), flag])

    assert result.exit_code == 0
    assert "has changes (repaired)" in result.stdout
    assert result.stdout.rstrip().endswith("# All done")
    assert (project / VENDORED).read_bytes() == b"Y\n"


def test_explicit_paths_are_honoured(project: Path) -> None:
    (project / "Godeps").rename(project / "deps")
    (project / "vendor").rename(project / "third_party")

    result = CliRunner().invoke(
        app,
        [
            "--no-emoji",
            "-manifest",
            str(project / "deps" / "Godeps.json"),
            "-vendor",
            str(project / "third_party"),
            "--cache",
            str(project / "cache"),
        ],
    )

    assert result.exit_code == 1
    assert (project / "cache" / "vendor-verify" / "github.com" / "a" / "b" / "x.go").exists()


def test_verbose_echoes_git_commands(project: Path) -> None:
    result = CliRunner().invoke(app, ["--no-emoji", "--no-color", "-v", "-cache", str(project / "cache")])

    assert result.exit_code == 1
    assert "[debug] $ git clone https://github.com/a/b" in result.stdout
    assert "[debug] checking github.com/a/b/x.go" in result.stdout
    assert '[debug] downloading "github.com/a/b" rev rev1' in result.stdout


def test_empty_manifest_exits_zero(project: Path, manifest_writer: ManifestWriter) -> None:
    manifest_writer(project / "Godeps" / "Godeps.json", [])

    result = CliRunner().invoke(app, ["--no-emoji", "--no-color", "-cache", str(project / "cache")])

    assert result.exit_code == 0
    assert "# Checking out 0 repositories locally" in result.stdout
    assert not (project / "cache").exists()


def test_missing_manifest_is_fatal(project: Path) -> None:
    (project / "Godeps" / "Godeps.json").unlink()

    result = CliRunner().invoke(app, ["--no-emoji", "--no-color", "-cache", str(project / "cache")])

    assert result.exit_code == 2
    assert "[manifest] Godeps/Godeps.json: cannot read manifest" in result.stdout
    assert "# All done" not in result.stdout
    assert "# Failures were detected" not in result.stdout


def test_json_report_is_written(project: Path) -> None:
    report = project / "reports" / "vendor.json"

    result = CliRunner().invoke(
        app,
        ["--no-emoji", "--no-color", "-cache", str(project / "cache"), "--json-report", str(report)],
    )

    assert result.exit_code == 1
    document = json.loads(report.read_text(encoding="utf-8"))
    assert document["exit_code"] == 1
    assert document["roots"][0]["root"] == "github.com/a/b"
    assert document["roots"][0]["mismatches"][0]["status"] == "mismatch"


def test_project_config_file_is_applied(project: Path) -> None:
    (project / "vendor").rename(project / "third_party")
    (project / ".vendor-verify.toml").write_text(
        f'vendor-path = "third_party"\ncache-path = "{project / "cache"}"\nfix = true\n',
        encoding="utf-8",
    )

    result = CliRunner().invoke(app, ["--no-emoji", "--no-color"])

    assert result.exit_code == 0
    assert (project / "third_party" / "github.com" / "a" / "b" / "x.go").read_bytes() == b"Y\n"


def test_invalid_configuration_is_fatal(project: Path) -> None:
    (project / ".vendor-verify.toml").write_text("jobs = 0\n", encoding="utf-8")

    result = CliRunner().invoke(app, ["--no-emoji", "--no-color", "-cache", str(project / "cache")])

    assert result.exit_code == 2
    assert "[config] invalid configuration: jobs" in result.stdout
