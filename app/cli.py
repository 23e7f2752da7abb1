#!/usr/bin/env python3
"""
Operator commands.

  python -m app.cli create-user alice --avatar https://example.com/a.png --admin
  python -m app.cli token 1

`create-user` inserts a user and prints an auth token for it; `token`
issues a fresh token for an existing user id. Tokens go in the
`Authorization: Bearer <token>` header.
"""
import argparse
import asyncio
import sys
from typing import Optional

from sqlalchemy import select

from app.auth import issue_token
from app.database import AsyncSessionLocal, engine, init_db
from app.models import User


async def create_user(username: str, avatar: Optional[str], admin: bool) -> User:
    await init_db()
    async with AsyncSessionLocal() as session:
        existing = await session.execute(select(User).where(User.username == username))
        if existing.scalar_one_or_none():
            raise SystemExit(f"Username '{username}' already taken")
        user = User(username=username, avatar=avatar, permission=1 if admin else 0)
        session.add(user)
        await session.commit()
    await engine.dispose()
    return user


async def user_exists(uid: int) -> bool:
    async with AsyncSessionLocal() as session:
        found = await session.get(User, uid) is not None
    await engine.dispose()
    return found


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="app.cli", description="Blog API operator commands")
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-user", help="Create a user and print its token")
    create.add_argument("username")
    create.add_argument("--avatar", default=None)
    create.add_argument("--admin", action="store_true", help="Grant admin permission")

    token = sub.add_parser("token", help="Issue a token for an existing user id")
    token.add_argument("uid", type=int)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "create-user":
        user = asyncio.run(create_user(args.username, args.avatar, args.admin))
        print(f"  ✓ user {user.username} (id={user.id}, admin={bool(user.permission)})")
        print(issue_token(user.id))
        return 0

    if not asyncio.run(user_exists(args.uid)):
        print(f"  ✗ no user with id {args.uid}", file=sys.stderr)
        return 1
    print(issue_token(args.uid))
    return 0


if __name__ == "__main__":
    sys.exit(main())
