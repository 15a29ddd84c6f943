# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Content digests and human-readable diffs."""

from __future__ import annotations

import difflib
import hashlib
from pathlib import Path
from typing import Final

CHUNK_SIZE: Final[int] = 131072
DIFF_CONTEXT_LINES: Final[int] = 3
VENDOR_LABEL: Final[bytes] = b"vendor"
UPSTREAM_LABEL: Final[bytes] = b"original"


def file_digest(path: Path) -> bytes:
    """Return the SHA-256 digest for *path*, read in chunks.

    Raises:
        OSError: If the file cannot be read.
    """

    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.digest()


def split_lines(data: bytes) -> list[bytes]:
    """Split ``data`` after each ``\\n`` and terminate the final piece with one.

    Content with and without a trailing newline therefore produce different
    line lists, so a missing final newline still shows up in the diff.
    """

    return [line + b"\n" for line in data.split(b"\n")]


def render_unified_diff(vendored: bytes, upstream: bytes) -> str:
    """Return a unified diff turning the vendored content into the upstream content.

    Lines are compared as raw bytes. Bytes that are not valid UTF-8 are shown
    as ``\\xNN`` escapes, so two different invalid sequences never render
    alike. Every output line ends with a newline, including a final line that
    had none in the input.

    Args:
        vendored: Bytes of the vendored file.
        upstream: Bytes of the upstream file, empty when it no longer exists.

    Returns:
        str: The diff text, empty when both inputs are equal.
    """

    diff = difflib.diff_bytes(
        difflib.unified_diff,
        split_lines(vendored),
        split_lines(upstream),
        fromfile=VENDOR_LABEL,
        tofile=UPSTREAM_LABEL,
        n=DIFF_CONTEXT_LINES,
    )
    rendered = (line.decode("utf-8", errors="backslashreplace") for line in diff)
    return "".join(line if line.endswith("\n") else f"{line}\n" for line in rendered)


__all__ = [
    "DIFF_CONTEXT_LINES",
    "file_digest",
    "render_unified_diff",
    "split_lines",
]
