# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Import-path to repository resolution."""

from __future__ import annotations

from .http import HttpFetcher, HttpResponse, HttpTransportError, UrlFetcher
from .index import IndexedRoot, ResolutionIndex, Resolver, build_index
from .resolver import ImportPathResolver
from .vcs import RepositoryRoot, VcsKind

__all__ = [
    "HttpFetcher",
    "HttpResponse",
    "HttpTransportError",
    "ImportPathResolver",
    "IndexedRoot",
    "RepositoryRoot",
    "ResolutionIndex",
    "Resolver",
    "UrlFetcher",
    "VcsKind",
    "build_index",
]
