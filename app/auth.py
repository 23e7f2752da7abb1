"""
Request identity.

Every request resolves to an Identity carrying the caller's uid (None when
anonymous) and an admin flag. The token is a HS256 JWT in the
`Authorization: Bearer ...` header with payload {"id": <user id>}.
A missing, malformed or expired token is simply anonymous; handlers decide
whether anonymous callers get a 401.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.models import User

logger = logging.getLogger(__name__)


@dataclass
class Identity:
    uid: Optional[int] = None
    admin: bool = False
    user: Optional[User] = None


def issue_token(uid: int) -> str:
    payload = {
        "id": uid,
        "exp": datetime.now(timezone.utc) + timedelta(days=settings.jwt_expire_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[int]:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as exc:
        logger.debug("Rejected auth token: %s", exc)
        return None
    uid = payload.get("id")
    try:
        return int(uid)
    except (TypeError, ValueError):
        return None


async def get_identity(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Identity:
    """FastAPI dependency resolving the caller's uid/admin flags."""
    if not authorization:
        return Identity()
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return Identity()

    uid = decode_token(token.strip())
    if uid is None:
        return Identity()

    user = await db.get(User, uid)
    if not user:
        # Token outlived its account; keep the uid so handlers can report it
        return Identity(uid=uid)
    return Identity(uid=user.id, admin=user.permission == 1, user=user)
