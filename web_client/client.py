from __future__ import annotations

import dataclasses
import logging
from typing import Any

from .http import Method, TransportOptions, async_request, has_protocol, has_secure_protocol, method_name
from .models import RequestOptions, Response, Transport, WebClientOptions

logger = logging.getLogger(__name__)


def fill_request_option_defaults(
    options: RequestOptions,
    client_options: WebClientOptions,
) -> RequestOptions:
    """Apply the client's default method and resolve a relative url against base_url."""
    method = options.method
    if method is None:
        method = client_options.default_method if client_options.default_method is not None else Method.GET

    url = options.url
    if not has_protocol(url):
        if client_options.base_url is None:
            raise TypeError("url doesn't include a protocol and base_url isn't set")
        url = client_options.base_url.rstrip("/") + "/" + url.lstrip("/")

    return RequestOptions(url=url, method=method)


class WebClient:
    """A client used to communicate over HTTP(S).

    Usage::

        client = WebClient(WebClientOptions(base_url="https://api.example.com"))
        resp = await client.request(RequestOptions(url="/v1/items"))
    """

    def __init__(
        self,
        options: WebClientOptions | None = None,
        *,
        transport: Transport = async_request,
    ):
        options = options if options is not None else WebClientOptions()
        if options.base_url is not None and not has_protocol(options.base_url):
            raise TypeError("base_url doesn't include a protocol")

        self.options = options
        self.transport = transport
        self._request_fn = options.limiter(transport) if options.limiter is not None else transport

    def extend(self, **overrides: Any) -> WebClient:
        """Create a new client from this client's options merged with ``overrides``."""
        return WebClient(dataclasses.replace(self.options, **overrides), transport=self.transport)

    async def request(self, options: RequestOptions) -> Response:
        """Send one HTTP request and return the fully buffered response.

        Unset request options fall back to the client options. Errors raised
        by the transport reach the caller unchanged.
        """
        filled = fill_request_option_defaults(options, self.options)
        method = method_name(filled.method)
        logger.debug("%s %s", method, filled.url)

        internal = await self._request_fn(
            filled.url,
            TransportOptions(method=method),
            None,
            has_secure_protocol(filled.url),
        )

        logger.debug("%s %s -> %d %s", method, filled.url, internal.status_code, internal.status_message)
        return Response.from_internal(internal, filled)
