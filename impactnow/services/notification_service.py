"""
Notification rows for volunteers.

Every notification references an event. When the sender does not name one,
the earliest event on record is used so the row still satisfies the
foreign key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from impactnow.forms.notification import notification_form_from_payload
from impactnow.models import ROLE_VOLUNTEER, Event, Notification, User, db

logger = logging.getLogger(__name__)

# Per-recipient failure text returned to clients; the SQL error is only logged
FAILED_NOTIFICATION = "Failed to create notification"


class NotificationError(Exception):
    """Base exception for notification failures. ``status`` is the HTTP status to report."""

    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotificationValidationError(NotificationError):
    status = 400

    def __init__(self, errors):
        super().__init__("Notification failed validation.")
        self.errors: list[str] = list(errors)


class NotificationNotFoundError(NotificationError):
    status = 404


class NotificationForbiddenError(NotificationError):
    status = 403


@dataclass(slots=True)
class BroadcastResult:
    total: int
    delivered: int = 0
    failures: list[dict[str, Any]] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.failures)

    def to_dict(self) -> dict[str, Any]:
        if not self.partial:
            return {
                "message": f"Notification successfully added to database for all {self.total} volunteers.",
                "success": True,
                "count": self.total,
            }
        return {
            "message": "Notification sent with some failures",
            "success": True,
            "successCount": {"database": self.delivered},
            "totalVolunteers": self.total,
            "failedNotifications": list(self.failures),
        }


class NotificationService:
    def __init__(self, session: Session | None = None):
        self.session = session or db.session

    @staticmethod
    def _validated(payload: Mapping[str, Any] | None, *, single_recipient: bool):
        form = notification_form_from_payload(payload, single_recipient=single_recipient)
        if not form.validate():
            raise NotificationValidationError(form.error_messages())
        return form

    def _resolve_event_id(self, event_id: int | None) -> int:
        if event_id:
            if self.session.get(Event, event_id) is None:
                raise NotificationNotFoundError("Event not found")
            return event_id

        default_id = self.session.scalar(select(Event.id).order_by(Event.id).limit(1))
        if default_id is None:
            raise NotificationNotFoundError(
                "No events found in the system to associate with the notification"
            )
        return default_id

    def _volunteer(self, user: User | None, *, missing: str, forbidden: str) -> User:
        if user is None:
            raise NotificationNotFoundError(missing)
        if not user.is_volunteer:
            raise NotificationForbiddenError(forbidden)
        return user

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def send_to_volunteer(self, payload: Mapping[str, Any] | None) -> Notification:
        form = self._validated(payload, single_recipient=True)
        user = self._volunteer(
            User.find_by_email(form.to_email.data.strip()),
            missing="User not found with this email",
            forbidden="Notifications can only be sent to volunteers",
        )
        try:
            event_id = self._resolve_event_id(form.event_id.data)
            notification = Notification(event_id=event_id, user_id=user.id, message=form.message.data.strip())
            self.session.add(notification)
            self.session.commit()
        except (NotificationError, SQLAlchemyError):
            self.session.rollback()
            raise

        logger.info("Notification %s sent to %s", notification.id, user.username)
        return notification

    def send_to_all(self, payload: Mapping[str, Any] | None) -> BroadcastResult:
        """
        Insert one notification per volunteer in a single transaction.

        Each insert runs in a savepoint so a failing row is recorded in
        ``failures`` without discarding the rows that succeeded.
        """
        form = self._validated(payload, single_recipient=False)
        volunteers = self.session.execute(
            select(User).where(User.role == ROLE_VOLUNTEER).order_by(User.username)
        ).scalars().all()
        if not volunteers:
            raise NotificationNotFoundError("No volunteers found in the system")

        message = form.message.data.strip()
        result = BroadcastResult(total=len(volunteers))
        try:
            event_id = self._resolve_event_id(form.event_id.data)
            for volunteer in volunteers:
                try:
                    with self.session.begin_nested():
                        self.session.add(Notification(event_id=event_id, user_id=volunteer.id, message=message))
                    result.delivered += 1
                except SQLAlchemyError as exc:
                    logger.error(
                        "Error sending notification to volunteer %s: %s", volunteer.username, exc, exc_info=True
                    )
                    result.failures.append(
                        {"username": volunteer.username, "email": volunteer.email, "error": FAILED_NOTIFICATION}
                    )
            self.session.commit()
        except (NotificationError, SQLAlchemyError):
            self.session.rollback()
            raise

        logger.info("Broadcast notification to %s of %s volunteers", result.delivered, result.total)
        return result

    def delete(self, notification_id: Any) -> None:
        try:
            notification_id = int(notification_id)
        except (TypeError, ValueError):
            raise NotificationNotFoundError("Notification not found") from None
        notification = self.session.get(Notification, notification_id)
        if notification is None:
            raise NotificationNotFoundError("Notification not found")
        self.session.delete(notification)
        self.session.commit()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def notifications_for(self, username: str) -> list[dict[str, Any]]:
        user = self._volunteer(
            User.find_by_username(username),
            missing="User not found",
            forbidden="This endpoint is only for volunteer notifications",
        )
        notifications = self.session.execute(
            select(Notification)
            .where(Notification.user_id == user.id)
            .order_by(Notification.sent_at.desc(), Notification.id.desc())
        ).scalars().all()
        return [notification.to_dict() for notification in notifications]

    def list_all(self) -> list[dict[str, Any]]:
        notifications = self.session.execute(
            select(Notification)
            .join(User, Notification.user_id == User.id)
            .where(User.role == ROLE_VOLUNTEER)
            .order_by(Notification.sent_at.desc(), Notification.id.desc())
        ).scalars().all()
        return [notification.to_dict() for notification in notifications]
