"""Root mutation type.

Mutations that act on behalf of a user take that user's id explicitly; the
services check it against the authenticated viewer unless a club role
supersedes the identity match.
"""

import datetime as dt
from typing import Optional

import strawberry

from bookmarkd.api.context import to_int
from bookmarkd.api.types import (
    AuthType,
    BookType,
    ClubInvitationType,
    ClubJoinRequestType,
    ClubType,
    CommentType,
    ContactType,
    DiscussionThreadType,
    NotificationItemType,
    ReviewType,
    UserType,
)
from bookmarkd.services.books import BookService
from bookmarkd.services.club_access import ClubAccessService
from bookmarkd.services.club_lifecycle import ClubLifecycleService
from bookmarkd.services.clubs import ClubService
from bookmarkd.services.contact import ContactService
from bookmarkd.services.discussions import DiscussionService
from bookmarkd.services.notifications import NotificationService
from bookmarkd.services.reviews import ReviewService
from bookmarkd.services.social import SocialGraphService
from bookmarkd.services.users import UserService


@strawberry.type
class Mutation:
    # ── Accounts ──

    @strawberry.mutation
    async def add_user(self, info: strawberry.Info, username: str, email: str, password: str) -> AuthType:
        async with info.context.using(UserService) as users:
            result = await users.sign_up(username, email, password)
        return AuthType(token=strawberry.ID(result.token), user=UserType.from_model(result.user))

    @strawberry.mutation
    async def login(self, info: strawberry.Info, email: str, password: str) -> AuthType:
        async with info.context.using(UserService) as users:
            result = await users.login(email, password)
        return AuthType(token=strawberry.ID(result.token), user=UserType.from_model(result.user))

    @strawberry.mutation
    async def update_user(
        self,
        info: strawberry.Info,
        id: strawberry.ID,
        bio: Optional[str] = None,
        location: Optional[str] = None,
        fav_book: Optional[str] = None,
        fav_author: Optional[str] = None,
        password: Optional[str] = None,
    ) -> UserType:
        async with info.context.using(UserService) as users:
            user = await users.update_profile(
                info.context.viewer,
                to_int(id, "User"),
                bio=bio,
                location=location,
                fav_book=fav_book,
                fav_author=fav_author,
                password=password,
            )
        return UserType.from_model(user)

    # ── Reading collection ──

    @strawberry.mutation
    async def add_book_status(
        self,
        info: strawberry.Info,
        book: strawberry.ID,
        user: strawberry.ID,
        status: str,
        favorite: bool,
    ) -> UserType:
        async with info.context.using(UserService) as users:
            row = await users.add_book_status(
                info.context.viewer, to_int(user, "User"), to_int(book, "Book"), status, favorite
            )
        return UserType.from_model(row)

    @strawberry.mutation
    async def edit_user_book_status(
        self, info: strawberry.Info, book_id: strawberry.ID, user_id: strawberry.ID, status: str
    ) -> UserType:
        async with info.context.using(UserService) as users:
            row = await users.edit_book_status(
                info.context.viewer, to_int(user_id, "User"), to_int(book_id, "Book"), status
            )
        return UserType.from_model(row)

    @strawberry.mutation
    async def edit_user_book_favorite(
        self, info: strawberry.Info, book_id: strawberry.ID, user_id: strawberry.ID, favorite: bool
    ) -> UserType:
        async with info.context.using(UserService) as users:
            row = await users.edit_book_favorite(
                info.context.viewer, to_int(user_id, "User"), to_int(book_id, "Book"), favorite
            )
        return UserType.from_model(row)

    @strawberry.mutation
    async def remove_user_book(
        self, info: strawberry.Info, book_id: strawberry.ID, user_id: strawberry.ID
    ) -> UserType:
        async with info.context.using(UserService) as users:
            row = await users.remove_book(
                info.context.viewer, to_int(user_id, "User"), to_int(book_id, "Book")
            )
        return UserType.from_model(row)

    # ── Books & reviews ──

    @strawberry.mutation
    async def add_book(self, info: strawberry.Info, google_id: str) -> BookType:
        async with info.context.using(BookService) as books:
            return BookType.from_model(await books.add_book(google_id))

    @strawberry.mutation
    async def add_review(
        self,
        info: strawberry.Info,
        book_google_id: str,
        user: strawberry.ID,
        stars: float,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> ReviewType:
        async with info.context.using(ReviewService) as reviews:
            review = await reviews.add_review(
                info.context.viewer, to_int(user, "User"), book_google_id, stars, title, description
            )
        return ReviewType.from_model(review)

    @strawberry.mutation
    async def update_review(
        self,
        info: strawberry.Info,
        review_id: strawberry.ID,
        stars: Optional[float] = None,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> ReviewType:
        async with info.context.using(ReviewService) as reviews:
            review = await reviews.update_review(
                info.context.viewer,
                to_int(review_id, "Review"),
                stars=stars,
                title=title,
                description=description,
            )
        return ReviewType.from_model(review)

    @strawberry.mutation
    async def delete_review(self, info: strawberry.Info, review_id: strawberry.ID) -> ReviewType:
        async with info.context.using(ReviewService) as reviews:
            review = await reviews.delete_review(info.context.viewer, to_int(review_id, "Review"))
        return ReviewType.from_model(review)

    # ── Social graph ──

    @strawberry.mutation
    async def like_review(
        self, info: strawberry.Info, review_id: strawberry.ID, user_id: strawberry.ID
    ) -> ReviewType:
        async with info.context.using(SocialGraphService) as social:
            review = await social.like(
                info.context.viewer, to_int(review_id, "Review"), to_int(user_id, "User")
            )
        return ReviewType.from_model(review)

    @strawberry.mutation
    async def unlike_review(
        self, info: strawberry.Info, review_id: strawberry.ID, user_id: strawberry.ID
    ) -> ReviewType:
        async with info.context.using(SocialGraphService) as social:
            review = await social.unlike(
                info.context.viewer, to_int(review_id, "Review"), to_int(user_id, "User")
            )
        return ReviewType.from_model(review)

    @strawberry.mutation
    async def add_comment(
        self, info: strawberry.Info, review_id: strawberry.ID, user_id: strawberry.ID, text: str
    ) -> CommentType:
        async with info.context.using(SocialGraphService) as social:
            comment = await social.add_comment(
                info.context.viewer, to_int(review_id, "Review"), to_int(user_id, "User"), text
            )
        return CommentType.from_model(comment)

    @strawberry.mutation
    async def delete_comment(self, info: strawberry.Info, comment_id: strawberry.ID) -> CommentType:
        async with info.context.using(SocialGraphService) as social:
            comment = await social.delete_comment(info.context.viewer, to_int(comment_id, "Comment"))
        return CommentType.from_model(comment)

    @strawberry.mutation
    async def follow_user(
        self, info: strawberry.Info, follower_id: strawberry.ID, following_id: strawberry.ID
    ) -> UserType:
        async with info.context.using(SocialGraphService) as social:
            user = await social.follow(
                info.context.viewer, to_int(follower_id, "User"), to_int(following_id, "User")
            )
        return UserType.from_model(user)

    @strawberry.mutation
    async def unfollow_user(
        self, info: strawberry.Info, follower_id: strawberry.ID, following_id: strawberry.ID
    ) -> UserType:
        async with info.context.using(SocialGraphService) as social:
            user = await social.unfollow(
                info.context.viewer, to_int(follower_id, "User"), to_int(following_id, "User")
            )
        return UserType.from_model(user)

    # ── Clubs ──

    @strawberry.mutation
    async def add_club(
        self,
        info: strawberry.Info,
        name: str,
        owner: strawberry.ID,
        description: Optional[str] = None,
        privacy: Optional[str] = None,
        member_limit: Optional[int] = None,
    ) -> ClubType:
        async with info.context.using(ClubService) as clubs:
            club = await clubs.create_club(
                info.context.viewer, to_int(owner, "User"), name, description, privacy, member_limit
            )
        return ClubType.from_model(club)

    @strawberry.mutation
    async def update_club(
        self,
        info: strawberry.Info,
        club_id: strawberry.ID,
        name: Optional[str] = None,
        description: Optional[str] = None,
        privacy: Optional[str] = None,
        member_limit: Optional[int] = None,
    ) -> ClubType:
        async with info.context.using(ClubService) as clubs:
            club = await clubs.update_club(
                info.context.viewer,
                to_int(club_id, "Club"),
                name=name,
                description=description,
                privacy=privacy,
                member_limit=member_limit,
            )
        return ClubType.from_model(club)

    @strawberry.mutation
    async def delete_club(self, info: strawberry.Info, club_id: strawberry.ID) -> ClubType:
        async with info.context.using(ClubService) as clubs:
            club = await clubs.delete_club(info.context.viewer, to_int(club_id, "Club"))
        return ClubType.from_model(club)

    @strawberry.mutation
    async def add_club_member(
        self, info: strawberry.Info, club_id: strawberry.ID, user_id: strawberry.ID
    ) -> ClubType:
        async with info.context.using(ClubService) as clubs:
            club = await clubs.add_member(
                info.context.viewer, to_int(club_id, "Club"), to_int(user_id, "User")
            )
        return ClubType.from_model(club)

    @strawberry.mutation
    async def remove_club_member(
        self, info: strawberry.Info, club_id: strawberry.ID, user_id: strawberry.ID
    ) -> ClubType:
        async with info.context.using(ClubService) as clubs:
            club = await clubs.remove_member(
                info.context.viewer, to_int(club_id, "Club"), to_int(user_id, "User")
            )
        return ClubType.from_model(club)

    @strawberry.mutation
    async def add_club_moderator(
        self, info: strawberry.Info, club_id: strawberry.ID, user_id: strawberry.ID
    ) -> ClubType:
        async with info.context.using(ClubService) as clubs:
            club = await clubs.add_moderator(
                info.context.viewer, to_int(club_id, "Club"), to_int(user_id, "User")
            )
        return ClubType.from_model(club)

    @strawberry.mutation
    async def remove_club_moderator(
        self, info: strawberry.Info, club_id: strawberry.ID, user_id: strawberry.ID
    ) -> ClubType:
        async with info.context.using(ClubService) as clubs:
            club = await clubs.remove_moderator(
                info.context.viewer, to_int(club_id, "Club"), to_int(user_id, "User")
            )
        return ClubType.from_model(club)

    # ── Club reading schedule ──

    @strawberry.mutation
    async def assign_club_book(
        self,
        info: strawberry.Info,
        club_id: strawberry.ID,
        book_google_id: str,
        start_date: Optional[dt.datetime] = None,
    ) -> ClubType:
        async with info.context.using(ClubLifecycleService) as lifecycle:
            club = await lifecycle.assign_book(
                info.context.viewer, to_int(club_id, "Club"), book_google_id, start_date
            )
        return ClubType.from_model(club)

    @strawberry.mutation
    async def set_next_book(
        self, info: strawberry.Info, club_id: strawberry.ID, book_google_id: str
    ) -> ClubType:
        async with info.context.using(ClubLifecycleService) as lifecycle:
            club = await lifecycle.set_next_book(
                info.context.viewer, to_int(club_id, "Club"), book_google_id
            )
        return ClubType.from_model(club)

    @strawberry.mutation
    async def rotate_club_book(self, info: strawberry.Info, club_id: strawberry.ID) -> ClubType:
        async with info.context.using(ClubLifecycleService) as lifecycle:
            club = await lifecycle.rotate_book(info.context.viewer, to_int(club_id, "Club"))
        return ClubType.from_model(club)

    @strawberry.mutation
    async def add_reading_checkpoint(
        self,
        info: strawberry.Info,
        club_id: strawberry.ID,
        title: str,
        date: dt.date,
        chapters: Optional[str] = None,
    ) -> ClubType:
        async with info.context.using(ClubLifecycleService) as lifecycle:
            club = await lifecycle.add_checkpoint(
                info.context.viewer, to_int(club_id, "Club"), title, date, chapters
            )
        return ClubType.from_model(club)

    @strawberry.mutation
    async def update_reading_checkpoint(
        self,
        info: strawberry.Info,
        club_id: strawberry.ID,
        checkpoint_index: int,
        title: Optional[str] = None,
        date: Optional[dt.date] = None,
        chapters: Optional[str] = None,
        completed: Optional[bool] = None,
    ) -> ClubType:
        async with info.context.using(ClubLifecycleService) as lifecycle:
            club = await lifecycle.update_checkpoint(
                info.context.viewer,
                to_int(club_id, "Club"),
                checkpoint_index,
                title=title,
                date=date,
                chapters=chapters,
                completed=completed,
            )
        return ClubType.from_model(club)

    # ── Discussion ──

    @strawberry.mutation
    async def create_discussion_thread(
        self,
        info: strawberry.Info,
        club_id: strawberry.ID,
        title: str,
        content: str,
        thread_type: Optional[str] = None,
        chapter_range: Optional[str] = None,
        book_google_id: Optional[str] = None,
    ) -> DiscussionThreadType:
        async with info.context.using(DiscussionService) as discussions:
            thread = await discussions.create_thread(
                info.context.viewer,
                to_int(club_id, "Club"),
                title,
                content,
                thread_type=thread_type,
                chapter_range=chapter_range,
                book_google_id=book_google_id,
            )
        return DiscussionThreadType.from_model(thread)

    @strawberry.mutation
    async def add_thread_reply(
        self, info: strawberry.Info, thread_id: strawberry.ID, user_id: strawberry.ID, text: str
    ) -> DiscussionThreadType:
        async with info.context.using(DiscussionService) as discussions:
            thread = await discussions.add_reply(
                info.context.viewer,
                to_int(thread_id, "Discussion thread"),
                to_int(user_id, "User"),
                text,
            )
        return DiscussionThreadType.from_model(thread)

    @strawberry.mutation
    async def delete_thread_reply(
        self, info: strawberry.Info, thread_id: strawberry.ID, reply_id: strawberry.ID
    ) -> DiscussionThreadType:
        async with info.context.using(DiscussionService) as discussions:
            thread = await discussions.delete_reply(
                info.context.viewer, to_int(thread_id, "Discussion thread"), str(reply_id)
            )
        return DiscussionThreadType.from_model(thread)

    @strawberry.mutation
    async def delete_thread(self, info: strawberry.Info, thread_id: strawberry.ID) -> DiscussionThreadType:
        async with info.context.using(DiscussionService) as discussions:
            thread = await discussions.delete_thread(
                info.context.viewer, to_int(thread_id, "Discussion thread")
            )
        return DiscussionThreadType.from_model(thread)

    @strawberry.mutation
    async def pin_thread(self, info: strawberry.Info, thread_id: strawberry.ID) -> DiscussionThreadType:
        async with info.context.using(DiscussionService) as discussions:
            thread = await discussions.pin(info.context.viewer, to_int(thread_id, "Discussion thread"))
        return DiscussionThreadType.from_model(thread)

    @strawberry.mutation
    async def unpin_thread(self, info: strawberry.Info, thread_id: strawberry.ID) -> DiscussionThreadType:
        async with info.context.using(DiscussionService) as discussions:
            thread = await discussions.unpin(info.context.viewer, to_int(thread_id, "Discussion thread"))
        return DiscussionThreadType.from_model(thread)

    @strawberry.mutation
    async def lock_thread(self, info: strawberry.Info, thread_id: strawberry.ID) -> DiscussionThreadType:
        async with info.context.using(DiscussionService) as discussions:
            thread = await discussions.lock(info.context.viewer, to_int(thread_id, "Discussion thread"))
        return DiscussionThreadType.from_model(thread)

    @strawberry.mutation
    async def unlock_thread(self, info: strawberry.Info, thread_id: strawberry.ID) -> DiscussionThreadType:
        async with info.context.using(DiscussionService) as discussions:
            thread = await discussions.unlock(info.context.viewer, to_int(thread_id, "Discussion thread"))
        return DiscussionThreadType.from_model(thread)

    # ── Invitations & join requests ──

    @strawberry.mutation
    async def invite_club_member(
        self, info: strawberry.Info, club_id: strawberry.ID, invitee_id: strawberry.ID
    ) -> ClubInvitationType:
        async with info.context.using(ClubAccessService) as access:
            invitation = await access.invite(
                info.context.viewer, to_int(club_id, "Club"), to_int(invitee_id, "User")
            )
        return ClubInvitationType.from_model(invitation)

    @strawberry.mutation
    async def accept_club_invitation(
        self, info: strawberry.Info, invitation_id: strawberry.ID
    ) -> ClubInvitationType:
        async with info.context.using(ClubAccessService) as access:
            invitation = await access.accept_invitation(
                info.context.viewer, to_int(invitation_id, "Invitation")
            )
        return ClubInvitationType.from_model(invitation)

    @strawberry.mutation
    async def decline_club_invitation(
        self, info: strawberry.Info, invitation_id: strawberry.ID
    ) -> ClubInvitationType:
        async with info.context.using(ClubAccessService) as access:
            invitation = await access.decline_invitation(
                info.context.viewer, to_int(invitation_id, "Invitation")
            )
        return ClubInvitationType.from_model(invitation)

    @strawberry.mutation
    async def cancel_club_invitation(
        self, info: strawberry.Info, invitation_id: strawberry.ID
    ) -> ClubInvitationType:
        async with info.context.using(ClubAccessService) as access:
            invitation = await access.cancel_invitation(
                info.context.viewer, to_int(invitation_id, "Invitation")
            )
        return ClubInvitationType.from_model(invitation)

    @strawberry.mutation
    async def request_club_join(
        self,
        info: strawberry.Info,
        club_id: strawberry.ID,
        user_id: strawberry.ID,
        message: Optional[str] = None,
    ) -> ClubJoinRequestType:
        async with info.context.using(ClubAccessService) as access:
            join_request = await access.request_join(
                info.context.viewer, to_int(club_id, "Club"), to_int(user_id, "User"), message
            )
        return ClubJoinRequestType.from_model(join_request)

    @strawberry.mutation
    async def approve_club_join_request(
        self, info: strawberry.Info, request_id: strawberry.ID, reviewer_id: strawberry.ID
    ) -> ClubJoinRequestType:
        async with info.context.using(ClubAccessService) as access:
            join_request = await access.approve_request(
                info.context.viewer, to_int(request_id, "Join request"), to_int(reviewer_id, "User")
            )
        return ClubJoinRequestType.from_model(join_request)

    @strawberry.mutation
    async def reject_club_join_request(
        self, info: strawberry.Info, request_id: strawberry.ID, reviewer_id: strawberry.ID
    ) -> ClubJoinRequestType:
        async with info.context.using(ClubAccessService) as access:
            join_request = await access.reject_request(
                info.context.viewer, to_int(request_id, "Join request"), to_int(reviewer_id, "User")
            )
        return ClubJoinRequestType.from_model(join_request)

    @strawberry.mutation
    async def cancel_club_join_request(
        self, info: strawberry.Info, request_id: strawberry.ID
    ) -> ClubJoinRequestType:
        async with info.context.using(ClubAccessService) as access:
            join_request = await access.cancel_request(
                info.context.viewer, to_int(request_id, "Join request")
            )
        return ClubJoinRequestType.from_model(join_request)

    # ── Notifications ──

    @strawberry.mutation
    async def mark_notification_as_read(
        self, info: strawberry.Info, notification_id: strawberry.ID
    ) -> NotificationItemType:
        async with info.context.using(NotificationService) as notifications:
            row = await notifications.mark_read(
                info.context.viewer, to_int(notification_id, "Notification")
            )
        return NotificationItemType.from_model(row)

    @strawberry.mutation
    async def mark_all_notifications_as_read(self, info: strawberry.Info, user_id: strawberry.ID) -> bool:
        async with info.context.using(NotificationService) as notifications:
            return await notifications.mark_all_read(info.context.viewer, to_int(user_id, "User"))

    @strawberry.mutation
    async def delete_notification(
        self, info: strawberry.Info, notification_id: strawberry.ID
    ) -> NotificationItemType:
        async with info.context.using(NotificationService) as notifications:
            row = await notifications.delete(
                info.context.viewer, to_int(notification_id, "Notification")
            )
        return NotificationItemType.from_model(row)

    # ── Contact ──

    @strawberry.mutation
    async def submit_contact(
        self, info: strawberry.Info, name: str, email: str, message: str
    ) -> ContactType:
        async with info.context.using(ContactService) as contacts:
            return ContactType.from_model(await contacts.submit(name, email, message))
