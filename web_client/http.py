from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

import requests
from requests.adapters import HTTPAdapter

from .models import InternalResponse

logger = logging.getLogger(__name__)

_PROTOCOL_RE = re.compile(r"^https?:")


class Method(str, Enum):
    CONNECT = "CONNECT"
    DELETE = "DELETE"
    GET = "GET"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    PATCH = "PATCH"
    POST = "POST"
    PUT = "PUT"
    TRACE = "TRACE"


@dataclass(frozen=True)
class TransportOptions:
    method: str


def method_name(method: Method | str) -> str:
    """Plain verb string for a Method member or a string literal."""
    return method.value if isinstance(method, Method) else method


def has_protocol(url: str) -> bool:
    return _PROTOCOL_RE.match(url) is not None


def has_secure_protocol(url: str) -> bool:
    return url.startswith("https:")


def _open_session(secure: bool) -> requests.Session:
    session = requests.Session()
    # Only the adapter for the chosen scheme is mounted.
    session.adapters.clear()
    session.mount("https://" if secure else "http://", HTTPAdapter(max_retries=0))
    session.headers["Accept-Encoding"] = "identity"
    return session


def _collect_headers(resp: requests.Response) -> dict[str, str | list[str]]:
    raw_headers = resp.raw.headers
    out: dict[str, str | list[str]] = {}
    for name in raw_headers.keys():
        key = name.lower()
        if key in out:
            continue
        values = raw_headers.getlist(name)
        out[key] = list(values) if key == "set-cookie" else ", ".join(values)
    return out


def _perform_request(
    url: str,
    options: TransportOptions,
    body: Any,
    secure: bool,
) -> InternalResponse:
    with _open_session(secure) as session:
        resp = session.request(
            options.method,
            url,
            data=body,
            allow_redirects=False,
            stream=True,
        )
        try:
            raw_data = resp.content.decode("utf-8", errors="replace")
            return InternalResponse(
                headers=_collect_headers(resp),
                raw_data=raw_data,
                status_code=resp.status_code,
                status_message=resp.reason or "",
                # requests does not expose HTTP trailers.
                trailers={},
            )
        finally:
            resp.close()


async def async_request(
    url: str,
    options: TransportOptions,
    body: Any = None,
    secure: bool = False,
) -> InternalResponse:
    """Perform one HTTP(S) round trip and buffer the whole response body.

    The request is sent through an adapter for ``https://`` when ``secure`` is
    true and for ``http://`` otherwise. ``body`` is written when it is not
    None. Errors raised by requests propagate unchanged; nothing is retried
    and redirects are returned as-is.
    """
    logger.debug("transport %s %s (secure=%s)", options.method, url, secure)
    return await asyncio.to_thread(_perform_request, url, options, body, secure)
