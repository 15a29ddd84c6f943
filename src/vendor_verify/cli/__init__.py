# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""vendor-verify CLI package exports."""

from __future__ import annotations

from typing import Final

from .app import app
from .options import VerifyCLIOptions

__all__: Final[list[str]] = ["VerifyCLIOptions", "app", "main"]


def main() -> None:
    """Console-script entry point."""

    app(prog_name="vendor-verify")
