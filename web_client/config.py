from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .limiter import compose_limiters, concurrency_limiter, interval_limiter
from .models import WebClientOptions


ENV_KEYS = [
    "WEB_CLIENT_BASE_URL",
    "WEB_CLIENT_DEFAULT_METHOD",
    "WEB_CLIENT_MAX_CONCURRENT",
    "WEB_CLIENT_MIN_INTERVAL",
]


@dataclass(frozen=True)
class Config:
    base_url: str | None = None
    default_method: str | None = None
    max_concurrent: int = 0        # 0 = no cap
    min_interval_s: float = 0.0    # 0 = no spacing

    @staticmethod
    def load_from_env(environ: Mapping[str, str] | None = None) -> "Config":
        env = os.environ if environ is None else environ

        values: dict[str, str] = {}
        for k in ENV_KEYS:
            val = env.get(k, "").strip()
            if val:
                values[k] = val

        method = values.get("WEB_CLIENT_DEFAULT_METHOD")
        return Config(
            base_url=values.get("WEB_CLIENT_BASE_URL"),
            default_method=method.upper() if method else None,
            max_concurrent=_parse_number(values, "WEB_CLIENT_MAX_CONCURRENT", int, 0),
            min_interval_s=_parse_number(values, "WEB_CLIENT_MIN_INTERVAL", float, 0.0),
        )

    def client_options(self) -> WebClientOptions:
        limiters = []
        if self.max_concurrent > 0:
            limiters.append(concurrency_limiter(self.max_concurrent))
        if self.min_interval_s > 0:
            limiters.append(interval_limiter(self.min_interval_s))

        return WebClientOptions(
            base_url=self.base_url,
            default_method=self.default_method,
            limiter=compose_limiters(*limiters) if limiters else None,
        )


def _parse_number(values: dict[str, str], key: str, kind: type, default):
    if key not in values:
        return default
    try:
        parsed = kind(values[key])
    except ValueError:
        raise RuntimeError(f"{key} must be a {kind.__name__}, got {values[key]!r}")
    if parsed < 0:
        raise RuntimeError(f"{key} must not be negative, got {values[key]!r}")
    return parsed
