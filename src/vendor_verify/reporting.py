# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Console output and exit codes for verification runs."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Final, Literal

from pydantic import BaseModel, ConfigDict, Field

from .logging import plain, section
from .verifier import ComparisonStatus, FileComparison, RootReport

SUCCESS_EXIT_CODE: Final[int] = 0
MISMATCH_EXIT_CODE: Final[int] = 1

RESOLVING_MARKER: Final[str] = "Resolving package urls to repositories"
COMPARING_MARKER: Final[str] = "Comparing file contents"
SUCCESS_MARKER: Final[str] = "All done"
FAILURE_MARKER: Final[str] = "Failures were detected"


def exit_code_for(reports: Sequence[RootReport]) -> int:
    """Return ``1`` when any mismatch remains unrepaired, otherwise ``0``."""

    return MISMATCH_EXIT_CODE if any(report.failed for report in reports) else SUCCESS_EXIT_CODE


def mismatch_header(root: str, comparison: FileComparison) -> str:
    """Return the ``[!] file ...`` line introducing a mismatch."""

    path = f"{root}/{comparison.relative_path}"
    if comparison.status is ComparisonStatus.MISSING_UPSTREAM:
        message = f"[!] file {path} was removed upstream"
    else:
        message = f"[!] file {path} has changes"
    if comparison.repaired:
        message = f"{message} (repaired)"
    return message


class FileSummary(BaseModel):
    """JSON view of one mismatched file."""

    model_config = ConfigDict(frozen=True)

    path: str
    status: Literal["mismatch", "missing_upstream"]
    repaired: bool
    diff: str


class RootSummary(BaseModel):
    """JSON view of one repository root."""

    model_config = ConfigDict(frozen=True)

    root: str
    repo_url: str
    revision: str
    import_paths: list[str]
    cache_action: str
    files_checked: int
    mismatches: list[FileSummary] = Field(default_factory=list)


class VerificationOutcome(BaseModel):
    """Aggregated result of a verification run."""

    model_config = ConfigDict(frozen=True)

    roots: list[RootSummary] = Field(default_factory=list)
    fix: bool = False
    exit_code: int = SUCCESS_EXIT_CODE

    @property
    def failed(self) -> bool:
        """Return whether the run ends with a non-zero exit code."""

        return self.exit_code != SUCCESS_EXIT_CODE

    @property
    def mismatch_count(self) -> int:
        """Return the number of mismatched files across every root."""

        return sum(len(root.mismatches) for root in self.roots)

    def write_json(self, path: Path) -> None:
        """Serialise the outcome to ``path`` as indented JSON."""

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2) + "\n", encoding="utf-8")


def summarize_file(comparison: FileComparison) -> FileSummary:
    """Convert a mismatched :class:`FileComparison` into its JSON summary.

    Args:
        comparison: Mismatch recorded by the verifier.

    Returns:
        FileSummary: Serialisable view of the mismatch and its diff.
    """

    status: Literal["mismatch", "missing_upstream"] = (
        "missing_upstream" if comparison.status is ComparisonStatus.MISSING_UPSTREAM else "mismatch"
    )
    return FileSummary(path=comparison.relative_path, status=status, repaired=comparison.repaired, diff=comparison.diff)


class Reporter:
    """Write stage markers, mismatch diffs and the final verdict to stdout.

    Only the driver thread calls into the reporter, one root at a time, so diff
    output from concurrent workers never interleaves.
    """

    def __init__(self, *, use_color: bool = False) -> None:
        self._use_color = use_color

    def stage(self, title: str) -> None:
        """Print the ``# title`` marker opening a stage."""

        section(title, use_color=self._use_color)

    def resolving(self) -> None:
        self.stage(RESOLVING_MARKER)

    def checking_out(self, count: int) -> None:
        """Announce that ``count`` repositories are about to be checked out."""

        self.stage(f"Checking out {count} repositories locally")

    def comparing(self) -> None:
        self.stage(COMPARING_MARKER)

    def root_report(self, report: RootReport) -> None:
        """Print the header and diff of every mismatch found under one root.

        Args:
            report: Verifier result for a single repository root.
        """

        for comparison in report.mismatches:
            plain("")
            plain(mismatch_header(report.root, comparison))
            plain(comparison.diff, end="")

    def verdict(self, exit_code: int) -> None:
        """Print the closing success or failure marker for ``exit_code``."""

        self.stage(SUCCESS_MARKER if exit_code == SUCCESS_EXIT_CODE else FAILURE_MARKER)


__all__ = [
    "FAILURE_MARKER",
    "FileSummary",
    "MISMATCH_EXIT_CODE",
    "Reporter",
    "RootSummary",
    "SUCCESS_EXIT_CODE",
    "SUCCESS_MARKER",
    "VerificationOutcome",
    "exit_code_for",
    "mismatch_header",
    "summarize_file",
]
