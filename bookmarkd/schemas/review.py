"""Review and comment schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    stars: float = Field(..., ge=0, le=5)
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None


class ReviewUpdate(BaseModel):
    stars: Optional[float] = Field(None, ge=0, le=5)
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None


class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)
