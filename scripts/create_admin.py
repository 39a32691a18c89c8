#!/usr/bin/env python3
"""
Create the CMS tables and an initial admin account.
It lets a fresh deployment sign in before public signup is enabled or after it is turned off.
Run it directly with the target environment loaded; it prints the result envelope and exits non-zero on failure.
"""

from __future__ import annotations

import argparse
import getpass
import json
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from pydantic import ValidationError

from src.api.dependencies import get_auth_service, get_cms_schema, get_database_client
from src.api.schemas.auth_schemas import SignupRequest
from src.common.logging import configure_logging


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create CMS tables and an admin account")
    parser.add_argument("--name", required=True, help="Display name of the admin")
    parser.add_argument("--user-name", required=True, help="Login user name (3-20 characters)")
    parser.add_argument(
        "--password",
        default=None,
        help="Password (8-20 characters); prompted for when omitted",
    )
    return parser.parse_args()


def main() -> int:
    configure_logging()
    args = parse_args()
    password = args.password or getpass.getpass("Password: ")

    try:
        request = SignupRequest(
            name=args.name,
            user_name=args.user_name,
            password=password,
            confirm_password=password,
        )
    except ValidationError as exc:
        print(exc, file=sys.stderr)
        return 2

    get_database_client().create_tables(get_cms_schema().metadata)
    result = get_auth_service().register(request)
    print(json.dumps({"status": result.status, "message": result.message, "data": result.data}, default=str, indent=2))
    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
