import asyncio

import pytest

from web_client.client import WebClient
from web_client.http import TransportOptions
from web_client.limiter import compose_limiters, concurrency_limiter, interval_limiter
from web_client.models import InternalResponse, RequestOptions, WebClientOptions


def _ok():
    return InternalResponse(headers={}, raw_data="", status_code=200, status_message="OK", trailers={})


class Tracker:
    def __init__(self, delay=0.02):
        self.delay = delay
        self.in_flight = 0
        self.peak = 0
        self.starts = []

    async def __call__(self, url, options, body, secure):
        self.starts.append(asyncio.get_running_loop().time())
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            return _ok()
        finally:
            self.in_flight -= 1


def _fire(fn, n):
    async def run():
        return await asyncio.gather(*(fn(f"http://h/{i}", TransportOptions("GET"), None, False) for i in range(n)))

    return asyncio.run(run())


def test_concurrency_limiter_caps_in_flight():
    tracker = Tracker()
    results = _fire(concurrency_limiter(2)(tracker), 6)
    assert len(results) == 6
    assert tracker.peak == 2


def test_concurrency_limiter_rejects_zero():
    with pytest.raises(ValueError):
        concurrency_limiter(0)


def test_interval_limiter_spaces_starts():
    tracker = Tracker(delay=0)
    _fire(interval_limiter(0.05)(tracker), 3)
    gaps = [b - a for a, b in zip(tracker.starts, tracker.starts[1:])]
    assert len(gaps) == 2
    assert all(g >= 0.045 for g in gaps)


def test_interval_limiter_rejects_negative():
    with pytest.raises(ValueError):
        interval_limiter(-1)


def test_compose_order_first_is_outermost():
    order = []

    def tag(name):
        def wrap(fn):
            async def limited(url, options, body, secure):
                order.append(name)
                return await fn(url, options, body, secure)

            return limited

        return wrap

    _fire(compose_limiters(tag("outer"), tag("inner"))(Tracker(delay=0)), 1)
    assert order == ["outer", "inner"]


def test_limiter_shared_by_extended_clients():
    tracker = Tracker()
    parent = WebClient(WebClientOptions(base_url="http://h", limiter=concurrency_limiter(1)), transport=tracker)
    child = parent.extend(base_url="http://other")

    async def run():
        await asyncio.gather(
            *(c.request(RequestOptions(url=f"/{i}")) for i, c in enumerate([parent, child, parent, child]))
        )

    asyncio.run(run())
    assert tracker.peak == 1
