"""Imports every model module so ``Base.metadata`` knows all tables."""

from bookmarkd.models.book import Book
from bookmarkd.models.club import Club, club_members, club_moderators
from bookmarkd.models.club_access import ClubInvitation, ClubJoinRequest
from bookmarkd.models.contact import Contact
from bookmarkd.models.discussion import DiscussionThread
from bookmarkd.models.follow import Follow
from bookmarkd.models.notification import Notification
from bookmarkd.models.review import Comment, Like, Review
from bookmarkd.models.user import User

__all__ = [
    "Book",
    "Club",
    "ClubInvitation",
    "ClubJoinRequest",
    "Comment",
    "Contact",
    "DiscussionThread",
    "Follow",
    "Like",
    "Notification",
    "Review",
    "User",
    "club_members",
    "club_moderators",
]
