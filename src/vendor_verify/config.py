# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration model for a verification run."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MANIFEST_PATH: Final[Path] = Path("Godeps") / "Godeps.json"
DEFAULT_VENDOR_PATH: Final[Path] = Path("vendor")
CACHE_DIR_NAME: Final[str] = "vendor-verify"


def _default_cache_path() -> Path:
    """Return the system temporary directory, the default cache parent."""

    return Path(tempfile.gettempdir())


class VerifyConfig(BaseModel):
    """Settings shared by every stage of the verification pipeline.

    Built once by :func:`vendor_verify.config_loader.load_config` and passed
    explicitly to the components that need it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    manifest_path: Path = DEFAULT_MANIFEST_PATH
    vendor_path: Path = DEFAULT_VENDOR_PATH
    cache_path: Path = Field(default_factory=_default_cache_path)
    verbose: bool = False
    fix: bool = False
    jobs: int = Field(default=1, ge=1)
    command_timeout: float | None = Field(default=None, ge=0)
    http_timeout: float = Field(default=30.0, gt=0)
    use_emoji: bool = True
    use_color: bool = True
    json_report: Path | None = None

    @property
    def cache_root(self) -> Path:
        """Return the directory holding one working copy per repository root."""

        return self.cache_path / CACHE_DIR_NAME


__all__ = [
    "CACHE_DIR_NAME",
    "DEFAULT_MANIFEST_PATH",
    "DEFAULT_VENDOR_PATH",
    "VerifyConfig",
]
