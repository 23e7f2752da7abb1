"""
Friend-link directory endpoints:
  GET    /friend      — accepted links (all links for the admin) + caller's own application
  POST   /friend      — apply for a link (admin entries are accepted at once)
  PUT    /friend/{id} — edit a link (owner or admin)
  DELETE /friend/{id} — remove a link (owner or admin)
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import Identity, get_identity
from app.database import get_db
from app.models import Friend
from app.schemas import FriendCreate, FriendListResponse, FriendUpdate

logger = logging.getLogger(__name__)
router = APIRouter()

# Column limits — name / desc / avatar / url
MAX_LENGTHS = {"name": 20, "desc": 100, "avatar": 100, "url": 100}


def _too_long(**fields: Optional[str]) -> bool:
    return any(value is not None and len(value) > MAX_LENGTHS[key] for key, value in fields.items())


def _non_empty(value: Optional[str]) -> Optional[str]:
    return value if value else None


async def _get_owned_friend(friend_id: int, identity: Identity, db: AsyncSession) -> Friend:
    if identity.uid is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    friend = await db.get(Friend, friend_id)
    if not friend:
        raise HTTPException(status_code=404, detail="Not found")
    if not identity.admin and friend.uid != identity.uid:
        raise HTTPException(status_code=403, detail="Permission denied")
    return friend


@router.get("", response_model=FriendListResponse)
async def list_friends(
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    query = select(Friend).order_by(Friend.id)
    if not identity.admin:
        query = query.where(Friend.accepted == 1)
    friend_list = (await db.execute(query)).scalars().all()

    apply_list = None
    if identity.uid is not None:
        rows = await db.execute(select(Friend).where(Friend.uid == identity.uid).limit(1))
        apply_list = rows.scalar_one_or_none()
    return {"friend_list": friend_list, "apply_list": apply_list}


@router.post("", response_class=PlainTextResponse)
async def create_friend(
    body: FriendCreate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    fields = body.model_dump()
    if _too_long(**fields) or not all(fields.values()):
        raise HTTPException(status_code=400, detail="Invalid input")
    if identity.uid is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    if not identity.admin:
        existing = await db.execute(select(Friend).where(Friend.uid == identity.uid).limit(1))
        if existing.scalar_one_or_none():
            raise HTTPException(status_code=400, detail="Already sent")

    db.add(Friend(**fields, uid=identity.uid, accepted=1 if identity.admin else 0))
    await db.flush()
    logger.info("Friend link %r added by user %s", body.name, identity.uid)
    return "OK"


@router.put("/{friend_id}", response_class=PlainTextResponse)
async def update_friend(
    friend_id: int,
    body: FriendUpdate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """
    Empty strings leave the stored value untouched. Edits by anyone but the
    admin send the link back to the review queue (accepted = 0).
    """
    friend = await _get_owned_friend(friend_id, identity, db)
    if _too_long(name=body.name, desc=body.desc, avatar=body.avatar, url=body.url):
        raise HTTPException(status_code=400, detail="Invalid input")

    for key in ("name", "desc", "avatar", "url"):
        value = _non_empty(getattr(body, key))
        if value is not None:
            setattr(friend, key, value)

    accepted = body.accepted if identity.admin else 0
    if accepted is not None:
        friend.accepted = accepted
    logger.info("Friend link %s updated by user %s", friend_id, identity.uid)
    return "OK"


@router.delete("/{friend_id}", response_class=PlainTextResponse)
async def delete_friend(
    friend_id: int,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    friend = await _get_owned_friend(friend_id, identity, db)
    await db.delete(friend)
    logger.info("Friend link %s deleted by user %s", friend_id, identity.uid)
    return "OK"
