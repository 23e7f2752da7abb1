"""
Comment endpoints:
  GET    /feed/comment/{feed} — list a feed's comments, newest first
  POST   /feed/comment/{feed} — comment on a feed (signed-in users)
  DELETE /comment/{id}        — delete a comment (author or admin)
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse
from opentelemetry import trace
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import Identity, get_identity
from app.clients.webhook_client import webhook_client
from app.config import settings
from app.database import get_db
from app.models import Comment, Feed, User
from app.schemas import CommentCreate, CommentResponse
from app.telemetry import COMMENTS_CREATED_TOTAL

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.get("/feed/comment/{feed_id}", response_model=list[CommentResponse])
async def list_comments(feed_id: int, db: AsyncSession = Depends(get_db)):
    rows = await db.execute(
        select(Comment)
        .where(Comment.feed_id == feed_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    return rows.scalars().all()


@router.post("/feed/comment/{feed_id}", response_class=PlainTextResponse)
async def create_comment(
    feed_id: int,
    body: CommentCreate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """
    1. Require a signed-in caller and non-empty content.
    2. Check the author and the feed still exist.
    3. Insert the comment and notify the site owner via webhook.
    """
    with tracer.start_as_current_span("create_comment") as span:
        if identity.uid is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
        if not body.content:
            raise HTTPException(status_code=400, detail="Content is required")

        user = await db.get(User, identity.uid)
        if not user:
            raise HTTPException(status_code=400, detail="User not found")
        feed = await db.get(Feed, feed_id)
        if not feed:
            raise HTTPException(status_code=400, detail="Feed not found")

        db.add(Comment(feed_id=feed_id, user_id=user.id, content=body.content))
        await db.flush()
        span.set_attribute("comment.feed_id", feed_id)

        COMMENTS_CREATED_TOTAL.inc()
        logger.info("Comment on feed %s by user %s", feed_id, user.id)

        await webhook_client.notify(
            f"{settings.frontend_url}/feed/{feed_id}\n"
            f"{user.username} commented on: {feed.title}\n"
            f"{body.content}"
        )
        return "OK"


@router.delete("/comment/{comment_id}", response_class=PlainTextResponse)
async def delete_comment(
    comment_id: int,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    if identity.uid is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    comment = await db.get(Comment, comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="Not found")
    if not identity.admin and comment.user_id != identity.uid:
        raise HTTPException(status_code=403, detail="Permission denied")

    await db.delete(comment)
    logger.info("Comment %s deleted by user %s", comment_id, identity.uid)
    return "OK"
