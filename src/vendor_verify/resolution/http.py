# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""HTTP access used by import-path discovery."""

from __future__ import annotations

import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from email.message import Message
from http import HTTPStatus
from typing import Final, Protocol
from urllib.parse import urlparse

USER_AGENT: Final[str] = "vendor-verify/1.0 (go-get discovery)"
_SUPPORTED_SCHEMES: Final[frozenset[str]] = frozenset({"http", "https"})


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Status code and decoded body of a completed request."""

    url: str
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        """Return whether the server answered ``200 OK``."""

        return self.status_code == HTTPStatus.OK


class HttpTransportError(RuntimeError):
    """Raised when a request fails before any response is received."""


class HttpFetcher(Protocol):
    """Callable performing a GET request for ``url``."""

    def __call__(self, url: str) -> HttpResponse: ...


class UrlFetcher:
    """Default :class:`HttpFetcher` backed by :mod:`urllib.request`.

    Error statuses are returned as responses; only connection, TLS and
    timeout failures raise :class:`HttpTransportError`.
    """

    def __init__(self, *, timeout: float, opener: urllib.request.OpenerDirector | None = None) -> None:
        """Create a fetcher.

        Args:
            timeout: Per-request timeout in seconds.
            opener: Optional opener; defaults to one verifying TLS certificates.
        """

        self._timeout = timeout
        self._opener = opener or urllib.request.build_opener(
            urllib.request.HTTPSHandler(context=ssl.create_default_context()),
        )

    def __call__(self, url: str) -> HttpResponse:
        """GET ``url`` and return the response, whatever its status.

        Raises:
            HttpTransportError: If the scheme is unsupported or no response arrives.
        """

        scheme = urlparse(url).scheme.lower()
        if scheme not in _SUPPORTED_SCHEMES:
            raise HttpTransportError(f"unsupported scheme '{scheme}' in {url}")
        request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        try:
            with self._opener.open(request, timeout=self._timeout) as response:
                return _to_response(url, response.geturl(), response.status, response.read(), response.headers)
        except urllib.error.HTTPError as exc:
            return _to_response(url, exc.geturl(), exc.code, exc.read(), exc.headers)
        except OSError as exc:
            raise HttpTransportError(str(getattr(exc, "reason", exc))) from exc


def _to_response(requested: str, final_url: str | None, status: int, body: bytes, headers: Message) -> HttpResponse:
    """Decode ``body`` using the declared charset, falling back to UTF-8."""

    charset = headers.get_content_charset() or "utf-8"
    try:
        text = body.decode(charset, errors="replace")
    except LookupError:
        text = body.decode("utf-8", errors="replace")
    return HttpResponse(url=final_url or requested, status_code=status, text=text)


__all__ = [
    "HttpFetcher",
    "HttpResponse",
    "HttpTransportError",
    "UrlFetcher",
]
