"""Mint a bearer token for the admin API."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from bytespark.core.config import AppSettings, get_settings
from bytespark.services.auth import AdminAuthService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bytespark-admin-token",
        description="Issue a JWT accepted by the /api/admin endpoints.",
    )
    parser.add_argument(
        "--subject",
        default=None,
        help="Token subject (defaults to ADMIN_USER_ID).",
    )
    return parser


def main(argv: Sequence[str] | None = None, *, settings: AppSettings | None = None) -> int:
    args = build_parser().parse_args(argv)
    service = AdminAuthService(settings or get_settings())
    try:
        token = service.issue_token(args.subject)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(token.access_token)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
