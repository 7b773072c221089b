#!/usr/bin/env python3
"""
Create a superadmin or partner user.

Users are provisioned out of band; there is no self-registration endpoint.

Run with:
    python scripts/create_user.py admin@aquaria.example --role super_admin
    python scripts/create_user.py dealer@abcwater.example --partner-code AWS42
"""

import argparse
import asyncio
import getpass
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.config import settings
from app.exceptions import AppException
from app.services.auth_service import AuthService
from app.services.record_store import RecordStore


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create an API user")
    parser.add_argument("email")
    parser.add_argument("--role", choices=["super_admin", "partner_user"], default="partner_user")
    parser.add_argument("--partner-code", help="Partner the user belongs to (partner users only)")
    parser.add_argument("--password", help="Prompted for when omitted")
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    args = parse_args(argv)
    password = args.password or getpass.getpass("Password: ")
    if len(password) < 8:
        print("Password must be at least 8 characters", file=sys.stderr)
        return 1

    store = RecordStore.from_settings(settings)
    try:
        user = await AuthService(store, settings).create_user(
            email=args.email,
            password=password,
            role=args.role,
            partner_code=args.partner_code,
        )
    except AppException as e:
        print(f"Could not create user: {e.detail}", file=sys.stderr)
        return 1
    finally:
        await store.close()

    print(f"Created {user.role} {user.email} ({user.id})")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
