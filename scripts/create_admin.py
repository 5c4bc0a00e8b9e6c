"""Create or update a back-office account.

Usage:
    cd /path/to/complaint-desk
    python -m scripts.create_admin --email admin@demo.com --password admin1234 --name "Demo Admin"
    python -m scripts.create_admin --email agent@demo.com --password s3cret --name "Agent" --role agent
"""
import argparse
import asyncio
import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.logging import setup_logging
from app.db.models import AccountRole
from app.db.session import create_tables, get_async_session_maker
from app.errors import DataValidationError
from app.services.account_service import account_service

logger = setup_logging()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or update an admin/agent account.")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", required=True)
    parser.add_argument("--role", choices=[role.value for role in AccountRole], default=AccountRole.ADMIN.value)
    parser.add_argument("--inactive", action="store_true", help="Create the account disabled")
    return parser.parse_args(argv)


async def create_admin(args: argparse.Namespace) -> None:
    await create_tables()

    session_maker = get_async_session_maker(force_new=True)
    async with session_maker() as session:
        account = await account_service.create_or_update(
            session,
            email=args.email,
            password=args.password,
            name=args.name,
            role=AccountRole(args.role),
            is_active=not args.inactive,
        )
        logger.info(f"Account ready: {account.email} ({account.role.value})")


if __name__ == "__main__":
    try:
        asyncio.run(create_admin(parse_args()))
    except DataValidationError as e:
        for detail in e.details:
            logger.error(f"{detail['field']}: {detail['message']}")
        sys.exit(1)
