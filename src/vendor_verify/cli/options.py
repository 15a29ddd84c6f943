# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Option declarations and option parsing for the verify command.

Single-dash long spellings (``-manifest``, ``-fix``) are accepted alongside
the double-dash forms so existing CI scripts keep working.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any

import typer

MANIFEST_OPTION = Annotated[
    Path | None,
    typer.Option("--manifest", "-manifest", help="Manifest file with dependencies.", show_default=False),
]
VENDOR_OPTION = Annotated[
    Path | None,
    typer.Option("--vendor", "-vendor", help="Vendor directory holding dependencies.", show_default=False),
]
CACHE_OPTION = Annotated[
    Path | None,
    typer.Option("--cache", "-cache", help="Directory for checking out sources.", show_default=False),
]
VERBOSE_OPTION = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Log every git command and network lookup."),
]
FIX_OPTION = Annotated[
    bool,
    typer.Option("--fix", "-fix", help="Overwrite mismatched vendored files with upstream content."),
]
JOBS_OPTION = Annotated[
    int | None,
    typer.Option("--jobs", "-j", min=1, help="Repositories processed in parallel.", show_default=False),
]
JSON_REPORT_OPTION = Annotated[
    Path | None,
    typer.Option("--json-report", help="Write a JSON summary to this path.", show_default=False),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", help="Configuration file used instead of .vendor-verify.toml.", show_default=False),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
COLOR_OPTION = Annotated[
    bool,
    typer.Option("--color/--no-color", help="Toggle coloured output."),
]


@dataclass(slots=True)
class VerifyCLIOptions:
    """Capture the flags supplied to the verify command."""

    manifest: Path | None
    vendor: Path | None
    cache: Path | None
    verbose: bool
    fix: bool
    jobs: int | None
    json_report: Path | None
    config: Path | None
    emoji: bool
    color: bool

    def config_overrides(self) -> dict[str, Any]:
        """Return configuration values the command line set explicitly.

        Flags left at their defaults map to ``None`` so values from
        configuration files still apply.
        """

        return {
            "manifest_path": self.manifest,
            "vendor_path": self.vendor,
            "cache_path": self.cache,
            "verbose": True if self.verbose else None,
            "fix": True if self.fix else None,
            "jobs": self.jobs,
            "json_report": self.json_report,
            "use_emoji": None if self.emoji else False,
            "use_color": None if self.color else False,
        }


__all__ = [
    "CACHE_OPTION",
    "COLOR_OPTION",
    "CONFIG_OPTION",
    "EMOJI_OPTION",
    "FIX_OPTION",
    "JOBS_OPTION",
    "JSON_REPORT_OPTION",
    "MANIFEST_OPTION",
    "VENDOR_OPTION",
    "VERBOSE_OPTION",
    "VerifyCLIOptions",
]
