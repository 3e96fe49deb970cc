"""Command line reporting tool for a running PowerMeter API.

Usage:
    powermeter total                 print the registered meter total
    powermeter total --set 12345.6   register a new meter total
    powermeter watts -i 60           current watts averaged over 60 seconds
"""

from __future__ import annotations

import argparse
import os
import sys
import typing

import httpx

from powermeter.config import settings

_NO_COLOR = os.environ.get("NO_COLOR") or not sys.stdout.isatty()
RED = "" if _NO_COLOR else "\033[31m"
BOLD = "" if _NO_COLOR else "\033[1m"
RESET = "" if _NO_COLOR else "\033[0m"


class ApiError(Exception):
    pass


def _request(client: httpx.Client, method: str, path: str, **kwargs: typing.Any) -> dict:
    try:
        resp = client.request(method, path, **kwargs)
    except httpx.HTTPError as exc:
        raise ApiError(f"Could not reach {client.base_url}: {exc}") from exc
    try:
        data = resp.json()
    except ValueError:
        data = {}
    if resp.is_error:
        raise ApiError(f"{data.get('error', resp.status_code)}: {data.get('message', resp.text)}")
    return data


def cmd_total(client: httpx.Client, args: argparse.Namespace) -> None:
    if args.set is None:
        data = _request(client, "GET", "/meter/total")
        print(f"Meter total: {data['value']}")
        if data.get("delta") is not None:
            print(f"      delta: {data['delta']:.4f}")
        return

    data = _request(client, "PUT", "/meter/total", json={"value": args.set})
    print(data["description"])
    print(f"  old value: {data['oldValue']}")
    print(f"  new value: {data['newValue']}")
    if data.get("delta") is not None:
        print(f"      delta: {data['delta']:.4f}")


def cmd_watts(client: httpx.Client, args: argparse.Namespace) -> None:
    data = _request(client, "GET", f"/watts/{args.interval}")
    print(f"{data['description']}:")
    print(f"   Watts: {data['watt']}")
    print(f"     Max: {data['max']}")
    print(f"     Min: {data['min']}")
    print(f"Interval: {data['interval']}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="powermeter", description="PowerMeter API client")
    parser.add_argument(
        "--url",
        default=settings.api_url,
        help=f"Base URL of the power API (default: {settings.api_url})",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    total = sub.add_parser("total", help="Print power meter kWh's total")
    total.add_argument(
        "--set", "-s",
        type=float,
        metavar="VALUE",
        default=None,
        help="Register VALUE as the new meter total",
    )
    total.set_defaults(func=cmd_total)

    watts = sub.add_parser("watts", help="Print current power consumption in watts")
    watts.add_argument(
        "--interval", "-i",
        type=int,
        default=5,
        help="Seconds to average over (default: 5)",
    )
    watts.set_defaults(func=cmd_watts)
    return parser


def main(argv: list[str] | None = None, transport: httpx.BaseTransport | None = None) -> int:
    args = build_parser().parse_args(argv)
    with httpx.Client(base_url=args.url, timeout=10.0, transport=transport) as client:
        try:
            args.func(client, args)
        except ApiError as exc:
            print(f"{RED}{BOLD}error:{RESET} {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
