from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging

import requests

from .client import WebClient, fill_request_option_defaults
from .config import ENV_KEYS, Config
from .http import Method, method_name
from .models import RequestOptions, Response


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="web-client")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = p.add_subparsers(dest="cmd", required=False)

    sub.add_parser("methods", help="List the supported HTTP methods")

    p_config = sub.add_parser("config", help="Config commands")
    sub_config = p_config.add_subparsers(dest="config_cmd", required=True)

    sub_config.add_parser("keys", help="List the environment variables that are read")
    sub_config.add_parser("show", help="Print the effective configuration")

    p_request = sub.add_parser("request", help="Send requests and print the responses")
    p_request.add_argument("urls", nargs="+", metavar="URL", help="Absolute URL or path relative to --base-url")
    p_request.add_argument("--method", "-X", default=None, help="HTTP method (default: GET)")
    p_request.add_argument("--base-url", default=None, help="Base URL for relative paths")
    p_request.add_argument("--max-concurrent", type=int, default=None, help="Max requests in flight (0=no cap)")
    p_request.add_argument("--min-interval", type=float, default=None, help="Min seconds between request starts")
    p_request.add_argument("--include", "-i", action="store_true", help="Print response headers")

    return p


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    if args.version:
        print("0.1.0")
        return 0

    if args.cmd is None:
        p.print_help()
        return 0

    if args.cmd == "methods":
        for m in Method:
            print(m.value)
        return 0

    try:
        cfg = Config.load_from_env()
    except RuntimeError as exc:
        print(f"ERROR: {exc}")
        return 2

    if args.cmd == "config":
        if args.config_cmd == "keys":
            for k in ENV_KEYS:
                print(k)
            return 0

        if args.config_cmd == "show":
            for name, value in dataclasses.asdict(cfg).items():
                print(f"{name}: {value if value is not None else '-'}")
            return 0

    if args.cmd == "request":
        return _run_requests(args, cfg)

    raise RuntimeError("unreachable")


def _run_requests(args, cfg: Config) -> int:
    overrides = {}
    if args.base_url is not None:
        overrides["base_url"] = args.base_url
    if args.max_concurrent is not None:
        overrides["max_concurrent"] = args.max_concurrent
    if args.min_interval is not None:
        overrides["min_interval_s"] = args.min_interval
    cfg = dataclasses.replace(cfg, **overrides)

    method = args.method.upper() if args.method else None

    try:
        client = WebClient(cfg.client_options())
        # Resolve every url up front so a bad one fails before anything is sent.
        options = [fill_request_option_defaults(RequestOptions(url=u, method=method), client.options) for u in args.urls]
    except (TypeError, ValueError) as exc:
        print(f"ERROR: {exc}")
        return 2

    results = asyncio.run(_send_all(client, options))

    status = 0
    for o, result in zip(options, results):
        if isinstance(result, requests.RequestException):
            print(f"ERROR: {o.url}: {result}")
            status = 1
            continue
        if isinstance(result, BaseException):
            raise result
        _print_response(result, include_headers=args.include)
        if not result.ok:
            status = 1
    return status


async def _send_all(client: WebClient, options: list[RequestOptions]) -> list:
    return await asyncio.gather(
        *(client.request(o) for o in options),
        return_exceptions=True,
    )


def _print_response(resp: Response, *, include_headers: bool) -> None:
    ro = resp.request_options
    print(f"{resp.status_code} {resp.status_message}  {method_name(ro.method)} {ro.url}")
    if include_headers:
        for name, value in resp.headers.items():
            for v in value if isinstance(value, list) else [value]:
                print(f"{name}: {v}")
    print()
    if resp.raw_data:
        print(resp.raw_data)


if __name__ == "__main__":
    raise SystemExit(main())
