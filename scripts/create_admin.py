"""Create an admin user, or reset the password of an existing one."""

from __future__ import annotations

import argparse
import asyncio

from funnel_dashboard.api.database import Database
from funnel_dashboard.services.accounts import save_admin_user


async def _run(username: str, password: str, role: str) -> None:
    database = Database()
    try:
        await database.create_all()
        async with database.session() as session:
            user = await save_admin_user(session, username, password, role)
        print(f"Saved admin user {user.username} (id={user.id}, role={user.role})")
    finally:
        await database.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Create or reset a dashboard admin user")
    parser.add_argument("--username", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--role", default="admin")
    args = parser.parse_args()
    asyncio.run(_run(args.username, args.password, args.role))


if __name__ == "__main__":
    main()
