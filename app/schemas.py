"""
Pydantic request / response schemas for the API layer.
Kept separate from ORM models to avoid coupling transport to storage.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Response model serialised with camelCase keys (createdAt, headImage, ...)."""

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


# ──────────────────────────── Users ───────────────────────────────────────

class UserBrief(BaseModel):
    id: int
    username: str
    avatar: Optional[str]

    class Config:
        from_attributes = True


class UserProfile(UserBrief):
    permission: int


# ──────────────────────────── Feeds ───────────────────────────────────────

class HashtagResponse(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class FeedCreate(BaseModel):
    title: str
    content: str
    summary: str = ""
    tags: list[str] = Field(default_factory=list)
    draft: bool = False
    listed: bool = True


class FeedUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    summary: Optional[str] = None
    tags: Optional[list[str]] = None
    draft: Optional[bool] = None
    listed: Optional[bool] = None


class TocEntry(BaseModel):
    level: int
    text: str
    anchor: str


class FeedListItem(CamelModel):
    id: int
    title: Optional[str]
    summary: str
    avatar: Optional[str]      # first image in the Markdown body
    draft: bool
    listed: bool
    hashtags: list[HashtagResponse]
    user: UserBrief
    created_at: datetime
    updated_at: datetime


class FeedListResponse(CamelModel):
    size: int
    data: list[FeedListItem]
    has_next: bool


class FeedDetail(CamelModel):
    id: int
    title: Optional[str]
    content: str
    summary: str
    uid: int
    draft: bool
    listed: bool
    hashtags: list[HashtagResponse]
    user: UserBrief
    toc: list[TocEntry]
    head_image: Optional[str]
    description: str
    created_at: datetime
    updated_at: datetime


# ──────────────────────────── Comments ────────────────────────────────────

class CommentCreate(BaseModel):
    content: str


class CommentResponse(CamelModel):
    id: int
    content: str
    user: UserProfile
    created_at: datetime
    updated_at: datetime


# ──────────────────────────── Friends ─────────────────────────────────────

class FriendCreate(BaseModel):
    name: str
    desc: str
    avatar: str
    url: str


class FriendUpdate(BaseModel):
    name: str
    desc: str
    avatar: Optional[str] = None
    url: str
    accepted: Optional[int] = None


class FriendResponse(CamelModel):
    id: int
    name: str
    desc: str
    avatar: str
    url: str
    uid: int
    accepted: int
    health: str
    created_at: datetime
    updated_at: datetime


class FriendListResponse(BaseModel):
    friend_list: list[FriendResponse]
    apply_list: Optional[FriendResponse]
