import asyncio
import os
import tempfile
from pathlib import Path

# Settings are read at import time; point them at a throwaway SQLite file first.
_DB_DIR = tempfile.mkdtemp(prefix="blog-api-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{Path(_DB_DIR) / 'test.db'}"
os.environ["OTEL_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ.pop("WEBHOOK_URL", None)
for name in ("S3_ENDPOINT", "S3_BUCKET", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY"):
    os.environ.pop(name, None)

import pytest
from fastapi.testclient import TestClient

from app.auth import issue_token
from app.clients.webhook_client import webhook_client
from app.database import AsyncSessionLocal, Base, engine
from app.main import app
from app.models import Feed, Friend, User


async def _reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def _insert(obj):
    async with AsyncSessionLocal() as session:
        session.add(obj)
        await session.commit()
    return obj


async def _fetch(model, pk):
    async with AsyncSessionLocal() as session:
        return await session.get(model, pk)


class Seeder:
    """Inserts rows directly so tests can arrange state without the API."""

    def user(self, username, admin=False, avatar=None):
        user = asyncio.run(_insert(User(username=username, avatar=avatar, permission=1 if admin else 0)))
        return user.id, {"Authorization": f"Bearer {issue_token(user.id)}"}

    def feed(self, uid, title="Hello", content="# Hello\n\nworld", draft=0, listed=1):
        feed = asyncio.run(_insert(Feed(title=title, content=content, uid=uid, draft=draft, listed=listed)))
        return feed.id

    def friend(self, uid, name="site", url="https://example.com", accepted=1, health=""):
        friend = asyncio.run(
            _insert(
                Friend(
                    name=name,
                    desc="a friendly site",
                    avatar="https://example.com/a.png",
                    url=url,
                    uid=uid,
                    accepted=accepted,
                    health=health,
                )
            )
        )
        return friend.id

    def get(self, model, pk):
        return asyncio.run(_fetch(model, pk))


@pytest.fixture()
def seed():
    return Seeder()


@pytest.fixture()
def notifications(monkeypatch):
    sent = []

    async def fake_notify(message, url=None):
        sent.append(message)
        return True

    monkeypatch.setattr(webhook_client, "notify", fake_notify)
    return sent


@pytest.fixture()
def fresh_db():
    asyncio.run(_reset_schema())


@pytest.fixture()
def client(fresh_db, notifications):
    with TestClient(app) as test_client:
        yield test_client
