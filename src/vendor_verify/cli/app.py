# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Typer application exposing the ``vendor-verify`` command."""

from __future__ import annotations

from pathlib import Path

import typer

from ..config_loader import load_config
from ..errors import FATAL_EXIT_CODE, VendorVerifyError
from ..pipeline import build_services, run_verification
from .options import (
    CACHE_OPTION,
    COLOR_OPTION,
    CONFIG_OPTION,
    EMOJI_OPTION,
    FIX_OPTION,
    JOBS_OPTION,
    JSON_REPORT_OPTION,
    MANIFEST_OPTION,
    VENDOR_OPTION,
    VERBOSE_OPTION,
    VerifyCLIOptions,
)
from .shared import CLILogger, build_cli_logger

app = typer.Typer(
    add_completion=False,
    help="Verify vendored Go dependencies against their pinned upstream revisions.",
)


@app.command()
def verify(
    manifest: MANIFEST_OPTION = None,
    vendor: VENDOR_OPTION = None,
    cache: CACHE_OPTION = None,
    verbose: VERBOSE_OPTION = False,
    fix: FIX_OPTION = False,
    jobs: JOBS_OPTION = None,
    json_report: JSON_REPORT_OPTION = None,
    config: CONFIG_OPTION = None,
    emoji: EMOJI_OPTION = True,
    color: COLOR_OPTION = True,
) -> None:
    """Compare every vendored file with the upstream revision pinned in the manifest."""

    options = VerifyCLIOptions(
        manifest=manifest,
        vendor=vendor,
        cache=cache,
        verbose=verbose,
        fix=fix,
        jobs=jobs,
        json_report=json_report,
        config=config,
        emoji=emoji,
        color=color,
    )
    logger = build_cli_logger(emoji=emoji, debug=verbose, no_color=not color)
    exit_code = _run(options, logger)
    raise typer.Exit(code=exit_code)


def _run(options: VerifyCLIOptions, logger: CLILogger) -> int:
    """Load configuration, run the pipeline and return the process exit code.

    Fatal errors are reported through ``logger`` and mapped to
    :data:`FATAL_EXIT_CODE`.

    Args:
        options: Parsed command-line options.
        logger: Logger created from the command-line output flags.

    Returns:
        int: ``0`` when clean, ``1`` on unrepaired mismatches, ``2`` on fatal errors.
    """

    try:
        cfg = load_config(Path.cwd(), config_file=options.config, overrides=options.config_overrides())
        logger.debug_enabled = cfg.verbose
        logger.use_emoji = cfg.use_emoji
        logger.use_color = cfg.use_color
        logger.console.no_color = not cfg.use_color
        services = build_services(cfg, debug=logger.debug)
        outcome = run_verification(cfg, services)
    except VendorVerifyError as exc:
        logger.fail(exc.describe())
        return FATAL_EXIT_CODE

    if cfg.json_report is not None:
        try:
            outcome.write_json(cfg.json_report)
        except OSError as exc:
            logger.fail(f"cannot write report {cfg.json_report}: {exc.strerror or exc}")
            return FATAL_EXIT_CODE
        logger.ok(f"JSON report written to {cfg.json_report}")
    return outcome.exit_code


__all__ = ["app", "verify"]
