# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Drive manifest resolution, cache materialisation and verification."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass

from .cache import CacheResult, SourceCache
from .config import VerifyConfig
from .git import GitClient
from .manifest import load_manifest
from .reporting import Reporter, RootSummary, VerificationOutcome, exit_code_for, summarize_file
from .resolution import IndexedRoot, ImportPathResolver, UrlFetcher, Resolver, build_index
from .verifier import RootReport, Verifier

DebugLog = Callable[[str], None]


@dataclass(frozen=True, slots=True)
class PipelineServices:
    """Collaborators used by :func:`run_verification`."""

    resolver: Resolver
    cache: SourceCache
    verifier: Verifier
    reporter: Reporter


def build_services(config: VerifyConfig, *, debug: DebugLog | None = None) -> PipelineServices:
    """Return the default collaborators for ``config``.

    Args:
        config: Effective run configuration.
        debug: Sink for verbose messages; used only when ``config.verbose`` is set.
    """

    log = debug if config.verbose else None
    resolver = ImportPathResolver(UrlFetcher(timeout=config.http_timeout), debug=log)
    git = GitClient(log=log, timeout=config.command_timeout)
    return PipelineServices(
        resolver=resolver,
        cache=SourceCache(config.cache_root, git, progress=log),
        verifier=Verifier(config.vendor_path, fix=config.fix, log=log),
        reporter=Reporter(use_color=config.use_color),
    )


@dataclass(frozen=True, slots=True)
class _RootResult:
    """Working copy and verifier report for one repository root."""

    cache: CacheResult
    report: RootReport


def _process_root(services: PipelineServices, indexed: IndexedRoot) -> _RootResult:
    """Check out and verify one root; runs on a worker thread.

    Args:
        services: Shared cache and verifier.
        indexed: Root to prepare and compare.

    Returns:
        _RootResult: Cache result and comparison report for the root.
    """

    cached = services.cache.ensure(indexed.repository, indexed.revision)
    report = services.verifier.verify_root(indexed.key, cached.directory)
    return _RootResult(cache=cached, report=report)


def _run_sequential(services: PipelineServices, roots: Sequence[IndexedRoot]) -> list[_RootResult]:
    """Check out every root first, then compare them one after another."""

    cached = [services.cache.ensure(indexed.repository, indexed.revision) for indexed in roots]
    services.reporter.comparing()
    return [
        _RootResult(cache=entry, report=services.verifier.verify_root(indexed.key, entry.directory))
        for indexed, entry in zip(roots, cached, strict=True)
    ]


def _run_parallel(services: PipelineServices, roots: Sequence[IndexedRoot], jobs: int) -> list[_RootResult]:
    """Process roots on ``jobs`` worker threads, keeping manifest order.

    The first worker failure cancels roots that have not started and is
    re-raised once running workers finish.

    Raises:
        VendorVerifyError: The first fatal error raised by a worker.
    """

    with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="vendor-verify") as executor:
        futures: list[Future[_RootResult]] = [executor.submit(_process_root, services, indexed) for indexed in roots]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in done:
            error = future.exception()
            if error is not None:
                for other in pending:
                    other.cancel()
                raise error
        results = [future.result() for future in futures]
    services.reporter.comparing()
    return results


def run_verification(config: VerifyConfig, services: PipelineServices) -> VerificationOutcome:
    """Verify every vendored dependency listed in the manifest.

    Roots are reported in manifest order. With ``config.jobs > 1`` distinct
    roots are checked out and compared on a bounded thread pool; each root is
    handled by a single worker.

    Args:
        config: Effective run configuration.
        services: Resolver, cache, verifier and reporter to use.

    Returns:
        VerificationOutcome: Per-root summaries and the exit code.

    Raises:
        VendorVerifyError: On any fatal manifest, resolution, cache or I/O error.
    """

    entries = load_manifest(config.manifest_path)
    reporter = services.reporter

    reporter.resolving()
    index = build_index(entries, services.resolver)
    roots = index.entries()

    reporter.checking_out(len(roots))
    if config.jobs > 1 and len(roots) > 1:
        results = _run_parallel(services, roots, min(config.jobs, len(roots)))
    else:
        results = _run_sequential(services, roots)

    for result in results:
        reporter.root_report(result.report)

    exit_code = exit_code_for([result.report for result in results])
    reporter.verdict(exit_code)
    return VerificationOutcome(
        roots=[
            RootSummary(
                root=indexed.key,
                repo_url=indexed.repository.repo_url,
                revision=indexed.revision,
                import_paths=list(indexed.import_paths),
                cache_action=result.cache.action.value,
                files_checked=result.report.files_checked,
                mismatches=[summarize_file(comparison) for comparison in result.report.mismatches],
            )
            for indexed, result in zip(roots, results, strict=True)
        ],
        fix=config.fix,
        exit_code=exit_code,
    )


__all__ = ["PipelineServices", "build_services", "run_verification"]
