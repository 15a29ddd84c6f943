# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for fatal error formatting."""

from __future__ import annotations

from vendor_verify.errors import (
    CloneError,
    FetchError,
    InconsistentManifestError,
    ResolutionError,
    TreeReadError,
    UnsupportedVCSError,
    VendorVerifyError,
)


def test_describe_names_stage_and_subject() -> None:
    error = TreeReadError("cannot read file: Permission denied", subject="github.com/a/b/x.go")

    assert error.describe() == "[compare] github.com/a/b/x.go: cannot read file: Permission denied"
    assert str(error) == "cannot read file: Permission denied"


def test_describe_without_subject() -> None:
    assert VendorVerifyError("boom").describe() == "[verify] boom"


def test_unsupported_vcs_is_a_resolution_error() -> None:
    error = UnsupportedVCSError("launchpad.net/foo", "Bazaar")

    assert isinstance(error, ResolutionError)
    assert error.describe() == (
        "[resolve] launchpad.net/foo: currently only git dependencies can be verified (found Bazaar)"
    )


def test_inconsistent_manifest_lists_every_pin() -> None:
    error = InconsistentManifestError("github.com/a/b", [("github.com/a/b/x", "r1"), ("github.com/a/b/y", "r2")])

    assert "github.com/a/b/x@r1" in error.message
    assert "github.com/a/b/y@r2" in error.message


def test_fetch_error_is_reported_as_cache_failure() -> None:
    error = FetchError("cannot fetch updates", subject="github.com/a/b")

    assert isinstance(error, CloneError)
    assert error.stage == "cache"
