"""
Create a user account from the command line.

Usage:
    python -m scripts.create_user --username alice --email alice@example.com --role doctor
    python -m scripts.create_user --username root --email root@example.com --role admin --password secret123
"""

import argparse
import asyncio
import getpass
import sys
from app.database import engine, async_session
from app.exceptions import DuplicateError, ValidationError
from app.models.user import Role
from app.services.user_store import UserStore


async def create_user(username: str, email: str, password: str, role: str) -> bool:
    async with async_session() as session:
        store = UserStore(session)
        try:
            user = await store.create(username, email, password, role)
            await session.commit()
        except DuplicateError as e:
            print(f"Error: {e.message}")
            return False
        except ValidationError as e:
            print(f"Error: {e.message}")
            for msg in e.errors or []:
                print(f"  - {msg}")
            return False

    print("User created successfully.")
    print(f"  ID: {user.id}")
    print(f"  Username: {user.username}")
    print(f"  Email: {user.email}")
    print(f"  Role: {user.role.value}")
    return True


async def main(args) -> int:
    password = args.password or getpass.getpass("Password: ")
    try:
        ok = await create_user(args.username, args.email, password, args.role)
    finally:
        await engine.dispose()
    return 0 if ok else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a user account")
    parser.add_argument("--username", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--role", default=Role.STAFF.value, choices=[r.value for r in Role])
    parser.add_argument("--password", help="Prompted for if omitted")
    sys.exit(asyncio.run(main(parser.parse_args())))
