"""Club, checkpoint and discussion schemas."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field

from bookmarkd.models.club import ClubPrivacy
from bookmarkd.models.discussion import ThreadType


class ClubCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    privacy: ClubPrivacy = ClubPrivacy.PUBLIC
    member_limit: Optional[int] = Field(None, ge=1)


class ClubUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    privacy: Optional[ClubPrivacy] = None
    member_limit: Optional[int] = Field(None, ge=1)


class CheckpointCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    date: dt.date
    chapters: Optional[str] = Field(None, max_length=100)


class CheckpointUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    date: Optional[dt.date] = None
    chapters: Optional[str] = Field(None, max_length=100)
    completed: Optional[bool] = None


class ThreadCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    thread_type: ThreadType = ThreadType.GENERAL
    chapter_range: Optional[str] = Field(None, max_length=100)


class ReplyCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)


class JoinRequestCreate(BaseModel):
    message: Optional[str] = Field(None, max_length=500)
