"""User schemas for sign-up, login, profile edits and the reading collection."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from bookmarkd.models.user import ReadingStatus


class UserRegister(BaseModel):
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9_]+$")
    password: str = Field(..., min_length=8, max_length=72)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class ProfileUpdate(BaseModel):
    bio: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = Field(None, max_length=255)
    fav_book: Optional[str] = Field(None, max_length=255)
    fav_author: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = Field(None, min_length=8, max_length=72)


class BookStatusInput(BaseModel):
    status: ReadingStatus
    favorite: bool = False
