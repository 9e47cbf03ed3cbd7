"""CLI for Field Dispatch: database setup, users, status reconciliation."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import sys


async def cmd_init_db(args):
    """Create all tables."""
    from app.db.engine import create_all

    await create_all()
    print("Database tables created")


async def cmd_create_user(args):
    """Create an admin or operator account."""
    from app.db import crud
    from app.db.engine import async_session_factory, create_all
    from app.models.auth_models import ROLES
    from app.services.auth import hash_password

    if args.role not in ROLES:
        print(f"Role must be one of: {', '.join(ROLES)}")
        sys.exit(1)

    password = args.password
    if not password:
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match")
            sys.exit(1)

    if len(password) < 8:
        print("Password must be at least 8 characters")
        sys.exit(1)

    await create_all()
    async with async_session_factory() as db:
        if await crud.get_user_by_email(db, args.email.strip().lower()):
            print(f"User {args.email} already exists")
            sys.exit(1)
        user = await crud.create_user(
            db, args.email, hash_password(password),
            role=args.role, display_name=args.display_name, phone=args.phone,
        )

    print(f"User created: {user.email} (id={user.id}, role={user.role})")


async def cmd_sync_job_statuses(args):
    """Reconcile stored job statuses with their timestamps and workflow flags."""
    from app.db.engine import async_session_factory
    from app.services.job_status import sync_job_statuses

    async with async_session_factory() as db:
        report = await sync_job_statuses(db)

    for change in report["changes"]:
        print(f"  {change['job_number']}: {change['from']} -> {change['to']}")
    print(f"Checked {report['checked']} jobs, updated {report['updated']}")


def main():
    parser = argparse.ArgumentParser(description="Field Dispatch CLI")
    subparsers = parser.add_subparsers(dest="command")

    # init-db
    subparsers.add_parser("init-db", help="Create database tables")

    # create-user
    cu = subparsers.add_parser("create-user", help="Create an admin or operator")
    cu.add_argument("--email", required=True, help="Login email")
    cu.add_argument("--role", default="operator", help="admin or operator")
    cu.add_argument("--password", default="", help="Password (prompted if not given)")
    cu.add_argument("--display-name", default="", help="Name shown to customers in SMS")
    cu.add_argument("--phone", default="", help="Operator phone")

    # sync-job-statuses
    subparsers.add_parser("sync-job-statuses", help="Fix job statuses that drifted from their timestamps")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "init-db":
        asyncio.run(cmd_init_db(args))
    elif args.command == "create-user":
        asyncio.run(cmd_create_user(args))
    elif args.command == "sync-job-statuses":
        asyncio.run(cmd_sync_job_statuses(args))


if __name__ == "__main__":
    main()
