"""
Blog post ("feed") endpoints:
  GET    /feed       — paginated listing (drafts/unlisted only for the admin)
  GET    /feed/{id}  — one post with hashtags, author and table of contents
  POST   /feed       — publish a post (admin)
  PUT    /feed/{id}  — edit a post (author or admin)
  DELETE /feed/{id}  — delete a post and its comments (author or admin)
"""
import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse
from opentelemetry import trace
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import Identity, get_identity
from app.content import DESCRIPTION_LENGTH, extract_toc, first_image, summarize
from app.database import get_db
from app.models import Comment, Feed, Hashtag
from app.schemas import FeedCreate, FeedDetail, FeedListResponse, FeedUpdate

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


def _require_signed_in(identity: Identity) -> None:
    if identity.uid is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


async def _resolve_hashtags(db: AsyncSession, names: list[str]) -> list[Hashtag]:
    """
    Look up hashtags by name, creating the missing ones. Names match
    case-insensitively (MySQL's default collation treats them as equal);
    the first spelling seen is the one stored for a new tag.
    """
    wanted: dict[str, str] = {}
    for name in names:
        name = name.strip()
        if name and name.lower() not in wanted:
            wanted[name.lower()] = name
    if not wanted:
        return []

    rows = await db.execute(select(Hashtag).where(func.lower(Hashtag.name).in_(list(wanted))))
    existing = {tag.name.lower(): tag for tag in rows.scalars().all()}
    hashtags = []
    for key, name in wanted.items():
        tag = existing.get(key)
        if tag is None:
            tag = Hashtag(name=name)
            db.add(tag)
        hashtags.append(tag)
    return hashtags


def _list_item(feed: Feed) -> dict:
    return {
        "id": feed.id,
        "title": feed.title,
        "summary": feed.summary or summarize(feed.content),
        "avatar": first_image(feed.content),
        "draft": bool(feed.draft),
        "listed": bool(feed.listed),
        "hashtags": feed.hashtags,
        "user": feed.user,
        "created_at": feed.created_at,
        "updated_at": feed.updated_at,
    }


@router.get("", response_model=FeedListResponse)
async def list_feeds(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    type: Literal["normal", "draft", "unlisted"] = "normal",
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    if type != "normal" and not identity.admin:
        raise HTTPException(status_code=403, detail="Permission denied")

    if type == "draft":
        where = [Feed.draft == 1]
    elif type == "unlisted":
        where = [Feed.draft == 0, Feed.listed == 0]
    else:
        where = [Feed.draft == 0, Feed.listed == 1]

    total = (await db.execute(select(func.count(Feed.id)).where(*where))).scalar_one()
    rows = await db.execute(
        select(Feed)
        .where(*where)
        .order_by(Feed.created_at.desc(), Feed.id.desc())
        .offset((page - 1) * limit)
        .limit(limit + 1)
    )
    feeds = rows.scalars().all()
    return {
        "size": total,
        "data": [_list_item(feed) for feed in feeds[:limit]],
        "has_next": len(feeds) > limit,
    }


@router.get("/{feed_id}", response_model=FeedDetail)
async def get_feed(
    feed_id: int,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    feed = await db.get(Feed, feed_id)
    if not feed:
        raise HTTPException(status_code=404, detail="Not found")
    if feed.draft and not identity.admin and feed.uid != identity.uid:
        raise HTTPException(status_code=403, detail="Permission denied")

    return {
        "id": feed.id,
        "title": feed.title,
        "content": feed.content,
        "summary": feed.summary,
        "uid": feed.uid,
        "draft": bool(feed.draft),
        "listed": bool(feed.listed),
        "hashtags": feed.hashtags,
        "user": feed.user,
        "toc": extract_toc(feed.content),
        "head_image": first_image(feed.content),
        "description": summarize(feed.content, DESCRIPTION_LENGTH),
        "created_at": feed.created_at,
        "updated_at": feed.updated_at,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_feed(
    body: FeedCreate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    with tracer.start_as_current_span("create_feed") as span:
        _require_signed_in(identity)
        if not identity.admin:
            raise HTTPException(status_code=403, detail="Permission denied")
        if not body.title:
            raise HTTPException(status_code=400, detail="Title is required")
        if not body.content:
            raise HTTPException(status_code=400, detail="Content is required")

        feed = Feed(
            title=body.title,
            content=body.content,
            summary=body.summary,
            uid=identity.uid,
            draft=int(body.draft),
            listed=int(body.listed),
            hashtags=await _resolve_hashtags(db, body.tags),
        )
        db.add(feed)
        await db.flush()     # materialise feed.id

        span.set_attribute("feed.id", feed.id)
        logger.info("Feed %s created by user %s", feed.id, identity.uid)
        return {"insertedId": feed.id}


@router.put("/{feed_id}", response_class=PlainTextResponse)
async def update_feed(
    feed_id: int,
    body: FeedUpdate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    _require_signed_in(identity)
    feed = await db.get(Feed, feed_id)
    if not feed:
        raise HTTPException(status_code=404, detail="Not found")
    if not identity.admin and feed.uid != identity.uid:
        raise HTTPException(status_code=403, detail="Permission denied")

    if body.title:
        feed.title = body.title
    if body.content:
        feed.content = body.content
    if body.summary:
        feed.summary = body.summary
    if body.draft is not None:
        feed.draft = int(body.draft)
    if body.listed is not None:
        feed.listed = int(body.listed)
    if body.tags is not None:
        feed.hashtags = await _resolve_hashtags(db, body.tags)

    logger.info("Feed %s updated by user %s", feed_id, identity.uid)
    return "OK"


@router.delete("/{feed_id}", response_class=PlainTextResponse)
async def delete_feed(
    feed_id: int,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    _require_signed_in(identity)
    feed = await db.get(Feed, feed_id)
    if not feed:
        raise HTTPException(status_code=404, detail="Not found")
    if not identity.admin and feed.uid != identity.uid:
        raise HTTPException(status_code=403, detail="Permission denied")

    await db.execute(delete(Comment).where(Comment.feed_id == feed_id))
    # Hashtag links go with the loaded collection
    await db.delete(feed)
    logger.info("Feed %s deleted by user %s", feed_id, identity.uid)
    return "OK"
