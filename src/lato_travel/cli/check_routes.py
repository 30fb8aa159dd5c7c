"""CLI to smoke-test a running lato_travel server.

Usage:
  poetry run check-routes health
  poetry run check-routes trip 3f2b5c1e-8a4d-4f6b-9c2e-1d7a0b9e4f21
  poetry run check-routes marketplace --page 2 --countries PT,ES
"""
import argparse
import json
import sys

import httpx


def print_json(data: object) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_health(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.get("/")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_trip(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get(f"/api/v1/usertrips/{args.trip_id}")
    r.raise_for_status()
    print(f"Cache-Control: {r.headers.get('cache-control', '-')}")
    print_json(r.json())
    return 0


def cmd_marketplace(client: httpx.Client, args: argparse.Namespace) -> int:
    params: dict[str, object] = {"page": args.page, "step": args.step}
    if args.countries:
        params["countries"] = args.countries
    r = client.get("/api/v1/trips/marketplace", params=params)
    r.raise_for_status()
    print_json(r.json())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Smoke-test lato_travel API routes.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--base-url",
        default="http://localhost:8000",
        help="API base URL (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Request timeout in seconds (default: 30)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command")

    subparsers.add_parser("health", help="GET / health check")

    p = subparsers.add_parser("trip", help="GET /api/v1/usertrips/{trip_id}")
    p.add_argument("trip_id", help="Trip UUID (v4)")

    p = subparsers.add_parser("marketplace", help="GET /api/v1/trips/marketplace")
    p.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    p.add_argument("--step", type=int, default=10, help="Page size (default: 10)")
    p.add_argument("--countries", default=None, help="Comma-separated country filter")
    return parser


HANDLERS = {
    "health": cmd_health,
    "trip": cmd_trip,
    "marketplace": cmd_marketplace,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    base_url = args.base_url.rstrip("/")
    handler = HANDLERS[args.command]

    try:
        with httpx.Client(base_url=base_url, timeout=args.timeout) as client:
            return handler(client, args)
    except httpx.HTTPStatusError as e:
        print(f"HTTP error: {e.response.status_code}", file=sys.stderr)
        if e.response.content:
            try:
                print(e.response.json(), file=sys.stderr)
            except ValueError:
                print(e.response.text, file=sys.stderr)
        return 1
    except httpx.RequestError as e:
        print(f"Request error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
