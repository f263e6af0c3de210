#!/usr/bin/env python3
"""
Provision an officer account.

Officers do not self-register. Run with:
    python create_officer.py --name "A. Kulkarni" --email ae@example.com --role assistant_engineer --position 1
"""
import argparse
import getpass
import sys

from fastapi import HTTPException
from pydantic import ValidationError

from licensing.database import SessionLocal
from licensing.schemas.officer import OfficerCreate
from licensing.services.account_service import OfficerService
from licensing.workflow.status import OFFICER_ROLES, PositionType


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create a licensing officer account")
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--role", required=True, choices=[r.value for r in OFFICER_ROLES])
    parser.add_argument("--position", type=int, choices=[p.value for p in PositionType],
                        help="Position type handled (required for assistant_engineer)")
    parser.add_argument("--phone")
    parser.add_argument("--password", help="Prompted for when omitted")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    password = args.password or getpass.getpass("Password: ")

    try:
        data = OfficerCreate(
            full_name=args.name,
            email=args.email,
            password=password,
            role=args.role,
            position_type=args.position,
            phone=args.phone,
        )
    except ValidationError as e:
        for error in e.errors():
            print(f"✗ {'.'.join(str(p) for p in error['loc'])}: {error['msg']}")
        return 1

    db = SessionLocal()
    try:
        officer = OfficerService.create_officer(
            db, data.full_name, data.email, data.password, data.role,
            position_type=data.position_type, phone=data.phone
        )
    except HTTPException as e:
        print(f"✗ {e.detail}")
        return 1
    finally:
        db.close()

    print(f"✅ Officer {officer.email} created with id {officer.id} ({officer.role})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
