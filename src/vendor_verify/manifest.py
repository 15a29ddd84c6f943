# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Godeps manifest parsing."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ManifestParseError


class GodepsDependency(BaseModel):
    """One record of the ``Deps`` list."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    import_path: str = Field(alias="ImportPath")
    comment: str | None = Field(default=None, alias="Comment")
    rev: str = Field(alias="Rev")

    @field_validator("import_path", "rev")
    @classmethod
    def _require_text(cls, value: str) -> str:
        """Strip surrounding whitespace and reject empty values."""

        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be empty")
        return stripped


class GodepsManifest(BaseModel):
    """On-disk shape of ``Godeps/Godeps.json``."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    import_path: str | None = Field(default=None, alias="ImportPath")
    go_version: str | None = Field(default=None, alias="GoVersion")
    godep_version: str | None = Field(default=None, alias="GodepVersion")
    packages: list[str] = Field(default_factory=list, alias="Packages")
    deps: list[GodepsDependency] = Field(default_factory=list, alias="Deps")

    @field_validator("deps", mode="before")
    @classmethod
    def _null_deps(cls, value: object) -> object:
        """Treat ``"Deps": null`` as an empty list."""

        return [] if value is None else value


@dataclass(frozen=True, slots=True)
class ManifestEntry:
    """An import path pinned to a revision."""

    import_path: str
    pinned_revision: str
    comment: str | None = None


def parse_manifest(payload: str | bytes, *, source: str = "<manifest>") -> GodepsManifest:
    """Validate ``payload`` as a Godeps document.

    Args:
        payload: Raw JSON document.
        source: Label used in error messages.

    Returns:
        GodepsManifest: Parsed manifest.

    Raises:
        ManifestParseError: If the payload is not JSON or does not match the schema.
    """

    try:
        return GodepsManifest.model_validate_json(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "<root>"
        raise ManifestParseError(f"malformed manifest at {location}: {first['msg']}", subject=source) from exc


def load_manifest(path: Path) -> list[ManifestEntry]:
    """Return the dependencies listed in the manifest at ``path``, in file order.

    Raises:
        ManifestParseError: If the file is missing, unreadable, or malformed.
    """

    try:
        payload = path.read_bytes()
    except OSError as exc:
        raise ManifestParseError(f"cannot read manifest: {exc.strerror or exc}", subject=str(path)) from exc
    manifest = parse_manifest(payload, source=str(path))
    return [
        ManifestEntry(import_path=dep.import_path, pinned_revision=dep.rev, comment=dep.comment)
        for dep in manifest.deps
    ]


__all__ = [
    "GodepsDependency",
    "GodepsManifest",
    "ManifestEntry",
    "load_manifest",
    "parse_manifest",
]
