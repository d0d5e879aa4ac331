#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from datetime import datetime

from uifs.app import serve
from uifs.config import Settings, as_utc


def _timestamp(value: str) -> datetime:
    """Parse an ISO 8601 build time."""
    try:
        return as_utc(datetime.fromisoformat(value))
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO 8601 timestamp: {value!r}")


def register_serve_command(subparsers: argparse._SubParsersAction) -> None:
    """Register the `serve` subcommand and its CLI arguments."""
    serve_parser = subparsers.add_parser("serve", help="Serve an SPA bundle over HTTP.")
    serve_parser.add_argument("--bundle", help="Bundle directory, .zip archive or pkg:<package>[/<subdir>].")
    serve_parser.add_argument("--prefix", help="Path inside the bundle that holds the assets.")
    serve_parser.add_argument("--fallback-path", help="Document served for unknown paths (default: index.html).")
    serve_parser.add_argument("--build-time", type=_timestamp, help="Modification time reported for every file.")
    serve_parser.add_argument("--host", dest="app_host", help="Bind address.")
    serve_parser.add_argument("--port", dest="app_port", type=int, help="Bind port.")


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Environment settings with the command line flags applied on top."""
    return Settings().with_overrides(
        bundle=args.bundle,
        prefix=args.prefix,
        fallback_path=args.fallback_path,
        build_time=args.build_time,
        app_host=args.app_host,
        app_port=args.app_port,
    )


def run_serve_command(args: argparse.Namespace) -> int:
    """Serve until the CherryPy engine exits."""
    serve(settings_from_args(args))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="uifs", description="Serve a single-page application bundle.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_serve_command(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        try:
            return run_serve_command(args)
        except Exception as exc:
            print(f"uifs: {exc}", file=sys.stderr)
            return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
