"""Notification side effects and the viewer's notification inbox."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import structlog

from bookmarkd.auth.context import Viewer
from bookmarkd.auth.guard import require_viewer, require_viewer_is
from bookmarkd.database import utcnow
from bookmarkd.exceptions import Forbidden, NotFound
from bookmarkd.models.club import Club
from bookmarkd.models.notification import Notification, NotificationType
from bookmarkd.repositories.notifications import NotificationRepository
from bookmarkd.services.base import Service

logger = structlog.get_logger()


class NotificationService(Service):
    def __init__(self, session):
        super().__init__(session)
        self.notifications = NotificationRepository(session)

    async def notify(
        self,
        *,
        recipient_id: int,
        actor_id: int,
        type: NotificationType,
        review_id: Optional[int] = None,
        comment_id: Optional[int] = None,
        club_id: Optional[int] = None,
        book_id: Optional[int] = None,
        thread_id: Optional[int] = None,
    ) -> Optional[Notification]:
        """Record a notification; self-directed actions never notify."""
        if recipient_id == actor_id:
            return None

        notification = Notification(
            user_id=recipient_id,
            from_user_id=actor_id,
            type=type,
            review_id=review_id,
            comment_id=comment_id,
            club_id=club_id,
            book_id=book_id,
            discussion_thread_id=thread_id,
            read=False,
            created_at=utcnow(),
        )
        await self.notifications.add(notification)
        logger.debug("notification_created", user_id=recipient_id, type=type.value)
        return notification

    async def notify_once(
        self, *, recipient_id: int, actor_id: int, type: NotificationType
    ) -> Optional[Notification]:
        """Like ``notify``, unless the actor already sent this recipient one of this type."""
        if await self.notifications.exists(recipient_id, actor_id, type):
            return None
        return await self.notify(recipient_id=recipient_id, actor_id=actor_id, type=type)

    async def notify_many(
        self,
        recipient_ids: Iterable[int],
        *,
        actor_id: int,
        type: NotificationType,
        **refs: Optional[int],
    ) -> int:
        created = 0
        for recipient_id in sorted(set(recipient_ids)):
            if await self.notify(recipient_id=recipient_id, actor_id=actor_id, type=type, **refs):
                created += 1
        return created

    async def notify_club(
        self,
        club: Club,
        *,
        actor_id: int,
        type: NotificationType,
        **refs: Optional[int],
    ) -> int:
        """Fan a club event out to the owner and every member except the actor."""
        recipients = club.member_ids | {club.owner_id}
        return await self.notify_many(
            recipients, actor_id=actor_id, type=type, club_id=club.id, **refs
        )

    # ── Inbox ──

    async def list_for_user(self, viewer: Optional[Viewer], user_id: int) -> Sequence[Notification]:
        require_viewer_is(viewer, user_id)
        return await self.notifications.list_for_user(user_id)

    async def unread_count(self, viewer: Optional[Viewer], user_id: int) -> int:
        require_viewer_is(viewer, user_id)
        return await self.notifications.count_unread(user_id)

    async def _owned(self, viewer: Optional[Viewer], notification_id: int) -> Notification:
        viewer = require_viewer(viewer)
        notification = await self.notifications.get(notification_id)
        if notification is None:
            raise NotFound.entity("Notification", notification_id)
        if notification.user_id != viewer.id:
            raise Forbidden()
        return notification

    async def mark_read(self, viewer: Optional[Viewer], notification_id: int) -> Notification:
        notification = await self._owned(viewer, notification_id)
        if not notification.read:
            notification.read = True
            await self.commit()
        return notification

    async def mark_all_read(self, viewer: Optional[Viewer], user_id: int) -> bool:
        require_viewer_is(viewer, user_id)
        updated = await self.notifications.mark_all_read(user_id)
        await self.commit()
        logger.info("notifications_marked_read", user_id=user_id, count=updated)
        return True

    async def delete(self, viewer: Optional[Viewer], notification_id: int) -> Notification:
        notification = await self._owned(viewer, notification_id)
        await self.notifications.delete(notification)
        await self.commit()
        return notification
