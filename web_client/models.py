from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable

if TYPE_CHECKING:
    from .http import Method, TransportOptions

# (url, transport options, body, secure) -> buffered response
Transport = Callable[[str, "TransportOptions", Any, bool], Awaitable["InternalResponse"]]
Limiter = Callable[[Transport], Transport]


@dataclass(frozen=True)
class RequestOptions:
    # Absolute, or relative to the client's base_url.
    url: str
    method: Method | str | None = None


@dataclass(frozen=True)
class WebClientOptions:
    # Must start with http: or https: when set.
    base_url: str | None = None

    # GET when unset.
    default_method: Method | str | None = None

    # Wraps the transport once per client, e.g. to cap concurrency.
    limiter: Limiter | None = None


@dataclass(frozen=True)
class InternalResponse:
    """What the transport hands back for one completed round trip."""

    headers: dict[str, str | list[str]]
    raw_data: str
    status_code: int
    status_message: str
    trailers: dict[str, str | None]


@dataclass(frozen=True)
class Response(InternalResponse):
    """A buffered response plus the filled options that produced it."""

    request_options: RequestOptions

    @staticmethod
    def from_internal(internal: InternalResponse, request_options: RequestOptions) -> "Response":
        return Response(
            headers=internal.headers,
            raw_data=internal.raw_data,
            status_code=internal.status_code,
            status_message=internal.status_message,
            trailers=internal.trailers,
            request_options=request_options,
        )

    @property
    def ok(self) -> bool:
        return self.status_code < 400
