"""
GraphQL object types.

Each type wraps the ORM row it was built from in a private ``model`` field.
Scalar fields are copied eagerly; relations and viewer-relative fields
(``isLiked``, ``isFollowing``, club roles) are resolved on demand so they are
always computed from the latest stored state for the current viewer.
"""

import datetime as dt
from typing import Optional

import strawberry

from bookmarkd.models.book import Book
from bookmarkd.models.club import Club
from bookmarkd.models.club_access import ClubInvitation, ClubJoinRequest
from bookmarkd.models.contact import Contact
from bookmarkd.models.discussion import DiscussionThread
from bookmarkd.models.notification import Notification
from bookmarkd.models.review import Comment, Like, Review
from bookmarkd.models.user import User
from bookmarkd.services.book_metadata import get_book_metadata
from bookmarkd.services.books import BookService
from bookmarkd.services.clubs import ClubService
from bookmarkd.services.discussions import DiscussionService
from bookmarkd.services.feed import Activity
from bookmarkd.services.membership import can_join, member_count, resolve_roles
from bookmarkd.services.reviews import ReviewService
from bookmarkd.services.social import SocialGraphService
from bookmarkd.services.users import UserService


def _viewer_id(info: strawberry.Info) -> Optional[int]:
    viewer = info.context.viewer
    return viewer.id if viewer is not None else None


async def _user(info: strawberry.Info, user_id: Optional[int]) -> Optional["UserType"]:
    async with info.context.using(UserService) as users:
        user = await users.find(user_id)
    return UserType.from_model(user) if user is not None else None


async def _book(info: strawberry.Info, book_id: Optional[int]) -> Optional["BookType"]:
    async with info.context.using(BookService) as books:
        book = await books.find(book_id)
    return BookType.from_model(book) if book is not None else None


async def _club(info: strawberry.Info, club_id: Optional[int]) -> Optional["ClubType"]:
    if club_id is None:
        return None
    async with info.context.using(ClubService) as clubs:
        club = await clubs.clubs.get(club_id)
    return ClubType.from_model(club) if club is not None else None


async def _review(info: strawberry.Info, review_id: Optional[int]) -> Optional["ReviewType"]:
    if review_id is None:
        return None
    async with info.context.using(ReviewService) as reviews:
        review = await reviews.reviews.get(review_id)
    return ReviewType.from_model(review) if review is not None else None


@strawberry.type(name="BookMetadata")
class BookMetadataType:
    title: Optional[str] = None
    subtitle: Optional[str] = None
    authors: list[str] = strawberry.field(default_factory=list)
    description: Optional[str] = None
    published_date: Optional[str] = None
    page_count: Optional[int] = None
    categories: list[str] = strawberry.field(default_factory=list)
    thumbnail: Optional[str] = None


@strawberry.type(name="Book")
class BookType:
    id: strawberry.ID
    google_id: str
    created_at: Optional[dt.datetime]
    model: strawberry.Private[Book]

    @classmethod
    def from_model(cls, book: Book) -> "BookType":
        return cls(
            id=strawberry.ID(str(book.id)),
            google_id=book.google_id,
            created_at=book.created_at,
            model=book,
        )

    @strawberry.field
    async def reviews(self, info: strawberry.Info) -> list["ReviewType"]:
        async with info.context.using(ReviewService) as reviews:
            rows = await reviews.for_book(self.model.id)
        return [ReviewType.from_model(r) for r in rows]

    @strawberry.field(description="Title, authors and cover from the external catalogue.")
    async def metadata(self) -> Optional[BookMetadataType]:
        data = await get_book_metadata(self.google_id)
        if data is None:
            return None
        return BookMetadataType(
            title=data.get("title"),
            subtitle=data.get("subtitle"),
            authors=data.get("authors") or [],
            description=data.get("description"),
            published_date=data.get("published_date"),
            page_count=data.get("page_count"),
            categories=data.get("categories") or [],
            thumbnail=data.get("thumbnail"),
        )


@strawberry.type(name="BookStatus")
class BookStatusType:
    google_id: Optional[str]
    status: str
    favorite: bool
    book_id: strawberry.Private[int]

    @strawberry.field
    async def book(self, info: strawberry.Info) -> Optional[BookType]:
        return await _book(info, self.book_id)


@strawberry.type(name="User")
class UserType:
    id: strawberry.ID
    username: str
    email: str
    bio: Optional[str]
    location: Optional[str]
    fav_book: Optional[str]
    fav_author: Optional[str]
    created_at: Optional[dt.datetime]
    model: strawberry.Private[User]

    @classmethod
    def from_model(cls, user: User) -> "UserType":
        return cls(
            id=strawberry.ID(str(user.id)),
            username=user.username,
            email=user.email,
            bio=user.bio,
            location=user.location,
            fav_book=user.fav_book,
            fav_author=user.fav_author,
            created_at=user.created_at,
            model=user,
        )

    @strawberry.field
    def books(self) -> list[BookStatusType]:
        return [
            BookStatusType(
                google_id=entry.get("google_id"),
                status=entry["status"],
                favorite=bool(entry.get("favorite")),
                book_id=entry["book_id"],
            )
            for entry in self.model.books or []
        ]

    @strawberry.field
    async def reviews(self, info: strawberry.Info) -> list["ReviewType"]:
        async with info.context.using(ReviewService) as reviews:
            rows = await reviews.for_user(self.model.id)
        return [ReviewType.from_model(r) for r in rows]

    @strawberry.field(description="Clubs the user owns or belongs to.")
    async def clubs(self, info: strawberry.Info) -> list["ClubType"]:
        async with info.context.using(UserService) as users:
            rows = await users.clubs_for(self.model.id)
        return [ClubType.from_model(c) for c in rows]

    @strawberry.field
    async def followers(self, info: strawberry.Info) -> list["UserType"]:
        async with info.context.using(SocialGraphService) as social:
            rows = await social.followers_of(self.model.id)
        return [UserType.from_model(u) for u in rows]

    @strawberry.field
    async def following(self, info: strawberry.Info) -> list["UserType"]:
        async with info.context.using(SocialGraphService) as social:
            rows = await social.following_of(self.model.id)
        return [UserType.from_model(u) for u in rows]

    @strawberry.field
    async def follower_count(self, info: strawberry.Info) -> int:
        async with info.context.using(SocialGraphService) as social:
            return await social.follower_count(self.model.id)

    @strawberry.field
    async def following_count(self, info: strawberry.Info) -> int:
        async with info.context.using(SocialGraphService) as social:
            return await social.following_count(self.model.id)

    @strawberry.field
    async def is_following(self, info: strawberry.Info) -> bool:
        async with info.context.using(SocialGraphService) as social:
            return await social.is_following(info.context.viewer, self.model.id)


@strawberry.type(name="Auth")
class AuthType:
    token: strawberry.ID
    user: UserType


@strawberry.type(name="Like")
class LikeType:
    id: strawberry.ID
    created_at: Optional[dt.datetime]
    model: strawberry.Private[Like]

    @classmethod
    def from_model(cls, like: Like) -> "LikeType":
        return cls(id=strawberry.ID(str(like.id)), created_at=like.created_at, model=like)

    @strawberry.field
    async def user(self, info: strawberry.Info) -> Optional[UserType]:
        return await _user(info, self.model.user_id)

    @strawberry.field
    async def review(self, info: strawberry.Info) -> Optional["ReviewType"]:
        return await _review(info, self.model.review_id)


@strawberry.type(name="Comment")
class CommentType:
    id: strawberry.ID
    text: str
    created_at: Optional[dt.datetime]
    model: strawberry.Private[Comment]

    @classmethod
    def from_model(cls, comment: Comment) -> "CommentType":
        return cls(
            id=strawberry.ID(str(comment.id)),
            text=comment.text,
            created_at=comment.created_at,
            model=comment,
        )

    @strawberry.field
    async def user(self, info: strawberry.Info) -> Optional[UserType]:
        return await _user(info, self.model.user_id)

    @strawberry.field
    async def review(self, info: strawberry.Info) -> Optional["ReviewType"]:
        return await _review(info, self.model.review_id)


@strawberry.type(name="Review")
class ReviewType:
    id: strawberry.ID
    stars: float
    title: Optional[str]
    description: Optional[str]
    created_at: Optional[dt.datetime]
    model: strawberry.Private[Review]

    @classmethod
    def from_model(cls, review: Review) -> "ReviewType":
        return cls(
            id=strawberry.ID(str(review.id)),
            stars=review.stars,
            title=review.title,
            description=review.description,
            created_at=review.created_at,
            model=review,
        )

    @strawberry.field
    async def user(self, info: strawberry.Info) -> Optional[UserType]:
        return await _user(info, self.model.user_id)

    @strawberry.field
    async def book(self, info: strawberry.Info) -> Optional[BookType]:
        return await _book(info, self.model.book_id)

    @strawberry.field
    async def likes(self, info: strawberry.Info) -> list[LikeType]:
        async with info.context.using(SocialGraphService) as social:
            rows = await social.likes_for(self.model.id)
        return [LikeType.from_model(like) for like in rows]

    @strawberry.field
    async def comments(self, info: strawberry.Info) -> list[CommentType]:
        async with info.context.using(SocialGraphService) as social:
            rows = await social.comments_for(self.model.id)
        return [CommentType.from_model(c) for c in rows]

    @strawberry.field
    async def like_count(self, info: strawberry.Info) -> int:
        async with info.context.using(SocialGraphService) as social:
            return await social.like_count(self.model.id)

    @strawberry.field
    async def comment_count(self, info: strawberry.Info) -> int:
        async with info.context.using(SocialGraphService) as social:
            return await social.comment_count(self.model.id)

    @strawberry.field
    async def is_liked(self, info: strawberry.Info) -> bool:
        async with info.context.using(SocialGraphService) as social:
            return await social.is_liked(info.context.viewer, self.model.id)


@strawberry.type(name="ReadingCheckpoint")
class ReadingCheckpointType:
    index: int
    title: str
    date: Optional[dt.date]
    chapters: Optional[str]
    completed: bool


@strawberry.type(name="Club")
class ClubType:
    id: strawberry.ID
    name: str
    description: Optional[str]
    privacy: str
    member_limit: Optional[int]
    current_book_google_id: Optional[str]
    current_book_start_date: Optional[dt.datetime]
    next_book_google_id: Optional[str]
    created_at: Optional[dt.datetime]
    model: strawberry.Private[Club]

    @classmethod
    def from_model(cls, club: Club) -> "ClubType":
        return cls(
            id=strawberry.ID(str(club.id)),
            name=club.name,
            description=club.description,
            privacy=club.privacy.value,
            member_limit=club.member_limit,
            current_book_google_id=club.current_book_google_id,
            current_book_start_date=club.current_book_start_date,
            next_book_google_id=club.next_book_google_id,
            created_at=club.created_at,
            model=club,
        )

    @strawberry.field
    async def owner(self, info: strawberry.Info) -> Optional[UserType]:
        return await _user(info, self.model.owner_id)

    @strawberry.field
    def members(self) -> list[UserType]:
        return [UserType.from_model(u) for u in self.model.members]

    @strawberry.field
    def moderators(self) -> list[UserType]:
        return [UserType.from_model(u) for u in self.model.moderators]

    @strawberry.field
    def member_count(self) -> int:
        return member_count(self.model)

    @strawberry.field
    def is_member(self, info: strawberry.Info) -> bool:
        return resolve_roles(self.model, _viewer_id(info)).is_member

    @strawberry.field
    def is_owner(self, info: strawberry.Info) -> bool:
        return resolve_roles(self.model, _viewer_id(info)).is_owner

    @strawberry.field
    def is_moderator(self, info: strawberry.Info) -> bool:
        return resolve_roles(self.model, _viewer_id(info)).is_moderator

    @strawberry.field
    def can_join(self, info: strawberry.Info) -> bool:
        return can_join(self.model, _viewer_id(info))

    @strawberry.field
    async def current_book(self, info: strawberry.Info) -> Optional[BookType]:
        return await _book(info, self.model.current_book_id)

    @strawberry.field
    async def next_book(self, info: strawberry.Info) -> Optional[BookType]:
        return await _book(info, self.model.next_book_id)

    @strawberry.field
    def reading_checkpoints(self) -> list[ReadingCheckpointType]:
        return [
            ReadingCheckpointType(
                index=index,
                title=entry.get("title", ""),
                date=dt.date.fromisoformat(entry["date"]) if entry.get("date") else None,
                chapters=entry.get("chapters"),
                completed=bool(entry.get("completed")),
            )
            for index, entry in enumerate(self.model.reading_checkpoints or [])
        ]

    @strawberry.field
    async def discussion_threads(self, info: strawberry.Info) -> list["DiscussionThreadType"]:
        async with info.context.using(DiscussionService) as discussions:
            rows = await discussions.threads_for_club(self.model)
        return [DiscussionThreadType.from_model(t) for t in rows]


@strawberry.type(name="ThreadReply")
class ThreadReplyType:
    id: strawberry.ID
    text: str
    created_at: Optional[dt.datetime]
    user_id: strawberry.Private[int]

    @strawberry.field
    async def user(self, info: strawberry.Info) -> Optional[UserType]:
        return await _user(info, self.user_id)


@strawberry.type(name="DiscussionThread")
class DiscussionThreadType:
    id: strawberry.ID
    book_google_id: str
    title: str
    content: str
    thread_type: str
    chapter_range: Optional[str]
    is_pinned: bool
    is_locked: bool
    reply_count: int
    created_at: Optional[dt.datetime]
    updated_at: Optional[dt.datetime]
    model: strawberry.Private[DiscussionThread]

    @classmethod
    def from_model(cls, thread: DiscussionThread) -> "DiscussionThreadType":
        return cls(
            id=strawberry.ID(str(thread.id)),
            book_google_id=thread.book_google_id,
            title=thread.title,
            content=thread.content,
            thread_type=thread.thread_type.value,
            chapter_range=thread.chapter_range,
            is_pinned=thread.is_pinned,
            is_locked=thread.is_locked,
            reply_count=thread.reply_count,
            created_at=thread.created_at,
            updated_at=thread.updated_at,
            model=thread,
        )

    @strawberry.field
    async def club(self, info: strawberry.Info) -> Optional[ClubType]:
        return await _club(info, self.model.club_id)

    @strawberry.field
    async def book(self, info: strawberry.Info) -> Optional[BookType]:
        return await _book(info, self.model.book_id)

    @strawberry.field
    async def author(self, info: strawberry.Info) -> Optional[UserType]:
        return await _user(info, self.model.author_id)

    @strawberry.field
    def replies(self) -> list[ThreadReplyType]:
        return [
            ThreadReplyType(
                id=strawberry.ID(reply["id"]),
                text=reply["text"],
                created_at=dt.datetime.fromisoformat(reply["created_at"])
                if reply.get("created_at")
                else None,
                user_id=reply["user_id"],
            )
            for reply in self.model.replies or []
        ]


@strawberry.type(name="ClubInvitation")
class ClubInvitationType:
    id: strawberry.ID
    status: str
    created_at: Optional[dt.datetime]
    responded_at: Optional[dt.datetime]
    model: strawberry.Private[ClubInvitation]

    @classmethod
    def from_model(cls, invitation: ClubInvitation) -> "ClubInvitationType":
        return cls(
            id=strawberry.ID(str(invitation.id)),
            status=invitation.status.value,
            created_at=invitation.created_at,
            responded_at=invitation.responded_at,
            model=invitation,
        )

    @strawberry.field
    async def club(self, info: strawberry.Info) -> Optional[ClubType]:
        return await _club(info, self.model.club_id)

    @strawberry.field
    async def inviter(self, info: strawberry.Info) -> Optional[UserType]:
        return await _user(info, self.model.inviter_id)

    @strawberry.field
    async def invitee(self, info: strawberry.Info) -> Optional[UserType]:
        return await _user(info, self.model.invitee_id)


@strawberry.type(name="ClubJoinRequest")
class ClubJoinRequestType:
    id: strawberry.ID
    status: str
    message: Optional[str]
    created_at: Optional[dt.datetime]
    reviewed_at: Optional[dt.datetime]
    model: strawberry.Private[ClubJoinRequest]

    @classmethod
    def from_model(cls, join_request: ClubJoinRequest) -> "ClubJoinRequestType":
        return cls(
            id=strawberry.ID(str(join_request.id)),
            status=join_request.status.value,
            message=join_request.message,
            created_at=join_request.created_at,
            reviewed_at=join_request.reviewed_at,
            model=join_request,
        )

    @strawberry.field
    async def club(self, info: strawberry.Info) -> Optional[ClubType]:
        return await _club(info, self.model.club_id)

    @strawberry.field
    async def user(self, info: strawberry.Info) -> Optional[UserType]:
        return await _user(info, self.model.user_id)

    @strawberry.field
    async def reviewed_by(self, info: strawberry.Info) -> Optional[UserType]:
        return await _user(info, self.model.reviewed_by_id)


@strawberry.type(name="Contact")
class ContactType:
    id: strawberry.ID
    name: str
    email: str
    message: str
    created_at: Optional[dt.datetime]

    @classmethod
    def from_model(cls, contact: Contact) -> "ContactType":
        return cls(
            id=strawberry.ID(str(contact.id)),
            name=contact.name,
            email=contact.email,
            message=contact.message,
            created_at=contact.created_at,
        )


@strawberry.type(name="Activity")
class ActivityType:
    id: strawberry.ID
    type: str
    created_at: dt.datetime
    activity: strawberry.Private[Activity]

    @classmethod
    def from_activity(cls, activity: Activity) -> "ActivityType":
        source_id = activity.review.id if activity.review is not None else 0
        return cls(
            id=strawberry.ID(f"{activity.type}:{source_id}"),
            type=activity.type,
            created_at=activity.created_at,
            activity=activity,
        )

    @strawberry.field
    async def user(self, info: strawberry.Info) -> Optional[UserType]:
        return await _user(info, self.activity.user_id)

    @strawberry.field
    def review(self) -> Optional[ReviewType]:
        review = self.activity.review
        return ReviewType.from_model(review) if review is not None else None

    @strawberry.field
    async def book(self, info: strawberry.Info) -> Optional[BookType]:
        review = self.activity.review
        return await _book(info, review.book_id if review is not None else None)


@strawberry.type(name="Notification")
class NotificationItemType:
    id: strawberry.ID
    type: str
    read: bool
    created_at: Optional[dt.datetime]
    model: strawberry.Private[Notification]

    @classmethod
    def from_model(cls, notification: Notification) -> "NotificationItemType":
        return cls(
            id=strawberry.ID(str(notification.id)),
            type=notification.type.value,
            read=notification.read,
            created_at=notification.created_at,
            model=notification,
        )

    @strawberry.field
    async def user(self, info: strawberry.Info) -> Optional[UserType]:
        return await _user(info, self.model.user_id)

    @strawberry.field
    async def from_user(self, info: strawberry.Info) -> Optional[UserType]:
        return await _user(info, self.model.from_user_id)

    @strawberry.field
    async def review(self, info: strawberry.Info) -> Optional[ReviewType]:
        return await _review(info, self.model.review_id)

    @strawberry.field
    async def comment(self, info: strawberry.Info) -> Optional[CommentType]:
        if self.model.comment_id is None:
            return None
        async with info.context.using(SocialGraphService) as social:
            comment = await social.comments.get(self.model.comment_id)
        return CommentType.from_model(comment) if comment is not None else None

    @strawberry.field
    async def club(self, info: strawberry.Info) -> Optional[ClubType]:
        return await _club(info, self.model.club_id)

    @strawberry.field
    async def book(self, info: strawberry.Info) -> Optional[BookType]:
        return await _book(info, self.model.book_id)

    @strawberry.field
    async def discussion_thread(self, info: strawberry.Info) -> Optional[DiscussionThreadType]:
        if self.model.discussion_thread_id is None:
            return None
        async with info.context.using(DiscussionService) as discussions:
            thread = await discussions.threads.get(self.model.discussion_thread_id)
        return DiscussionThreadType.from_model(thread) if thread is not None else None
