"""
Per-volunteer read models: the dashboard, the volunteer's own events and
their volunteering history statistics.

All reads run on one session and never write.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import and_, case, distinct, exists, func, or_, select
from sqlalchemy.orm import Session

from impactnow.models import Event, EventSkill, Location, Notification, Skill, User, UserSkill, VolunteeringHistory, db

from .event_repository import EventRepository
from .report_service import HistoryRow

logger = logging.getLogger(__name__)

DASHBOARD_NOTIFICATION_LIMIT = 5
DASHBOARD_SUGGESTION_LIMIT = 3
RECENT_EVENT_LIMIT = 5


class DashboardError(Exception):
    """Base exception for dashboard reads. ``status`` is the HTTP status to report."""

    status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DashboardNotFoundError(DashboardError):
    status = 404


def time_ago(sent_at: datetime | None, now: datetime | None = None) -> str | None:
    """Render a timestamp as "5 min ago", "1 hour ago" or "3 days ago"."""
    if sent_at is None:
        return None
    now = now or datetime.now(timezone.utc)
    # SQLite hands back naive values; they were stored as UTC
    if sent_at.tzinfo is None:
        sent_at = sent_at.replace(tzinfo=timezone.utc)
    minutes = max(int((now - sent_at).total_seconds() // 60), 0)
    if minutes < 60:
        return f"{minutes} min ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours} hour{'' if hours == 1 else 's'} ago"
    days = hours // 24
    return f"{days} day{'' if days == 1 else 's'} ago"


def _status(checked_in: bool) -> str:
    return "Completed" if checked_in else "Pending"


class VolunteerDashboardService:
    def __init__(self, session: Session | None = None):
        self.session = session or db.session

    def _require_user(self, username: str, message: str = "User not found") -> User:
        user = self.session.execute(select(User).where(User.username == username)).scalars().first()
        if user is None:
            raise DashboardNotFoundError(message)
        return user

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------
    def dashboard(self, username: str) -> dict[str, Any]:
        user = self._require_user(username, "User profile not found")
        profile = user.to_dict()
        profile["firstName"] = user.first_name
        profile["lastName"] = user.last_name

        data = {
            "profile": profile,
            "notifications": self.recent_notifications(user),
            "eventSuggestions": [record.to_dict() for record in self.event_suggestions(user)],
        }
        logger.info(
            "Dashboard for %s: %s notification(s), %s suggestion(s)",
            username,
            len(data["notifications"]),
            len(data["eventSuggestions"]),
        )
        return data

    def recent_notifications(self, user: User, limit: int = DASHBOARD_NOTIFICATION_LIMIT) -> list[dict[str, Any]]:
        rows = self.session.execute(
            select(Notification.id, Notification.message, Notification.sent_at, Event.name)
            .join(Event, Notification.event_id == Event.id)
            .where(Notification.user_id == user.id)
            .order_by(Notification.sent_at.desc(), Notification.id.desc())
            .limit(limit)
        ).all()
        now = datetime.now(timezone.utc)
        return [
            {
                "id": row.id,
                "message": row.message,
                "eventName": row.name,
                "sentAt": row.sent_at.isoformat() if row.sent_at else None,
                "time": time_ago(row.sent_at, now),
            }
            for row in rows
        ]

    def event_suggestions(self, user: User, limit: int = DASHBOARD_SUGGESTION_LIMIT):
        """
        Upcoming events near the volunteer or needing one of their skills.

        "Near" means the venue or address contains the first part of the
        volunteer's location. A volunteer without a location gets the next
        upcoming events.
        """
        shares_skill = exists().where(
            and_(
                EventSkill.event_id == Event.id,
                EventSkill.skill_id == UserSkill.skill_id,
                UserSkill.user_id == user.id,
            )
        )
        query = (
            select(Event.id)
            .join(Location, Event.location_id == Location.id)
            .where(Event.date >= date.today())
            .order_by(Event.date.asc(), Event.id.asc())
            .limit(limit)
        )
        area = (user.location or "").split(",", 1)[0].strip()
        if area:
            query = query.where(
                or_(
                    Location.address.contains(area, autoescape=True),
                    Location.venue_name.contains(area, autoescape=True),
                    shares_skill,
                )
            )

        ids = list(self.session.execute(query).scalars())
        return EventRepository(self.session).list_events(event_ids=ids)

    # ------------------------------------------------------------------
    # Events a volunteer is registered for
    # ------------------------------------------------------------------
    def user_events(self, username: str) -> list[dict[str, Any]]:
        user = self._require_user(username)
        checkins = dict(
            self.session.execute(
                select(VolunteeringHistory.event_id, VolunteeringHistory.checkin).where(
                    VolunteeringHistory.user_id == user.id
                )
            ).all()
        )
        records = EventRepository(self.session).list_events(event_ids=checkins.keys())
        events = []
        for record in records:
            payload = record.to_dict()
            payload["checkedIn"] = bool(checkins.get(record.id))
            payload["status"] = _status(payload["checkedIn"])
            events.append(payload)
        return events

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def history_stats(self, username: str) -> dict[str, Any]:
        user = self._require_user(username)
        history = VolunteeringHistory.user_id == user.id

        summary = self.session.execute(
            select(
                func.count(VolunteeringHistory.id),
                func.sum(case((VolunteeringHistory.checkin.is_(True), 1), else_=0)),
                func.count(distinct(VolunteeringHistory.event_id)),
            ).where(history)
        ).one()

        by_urgency = self.session.execute(
            select(Event.urgency, func.count(VolunteeringHistory.id))
            .select_from(VolunteeringHistory)
            .join(Event, VolunteeringHistory.event_id == Event.id)
            .where(history)
            .group_by(Event.urgency)
            .order_by(Event.urgency)
        ).all()

        recent = self.session.execute(
            select(Event.name, Event.date, VolunteeringHistory.checkin)
            .select_from(VolunteeringHistory)
            .join(Event, VolunteeringHistory.event_id == Event.id)
            .where(history)
            .order_by(Event.date.desc(), VolunteeringHistory.id.desc())
            .limit(RECENT_EVENT_LIMIT)
        ).all()

        # A skill counts as used when the volunteer offers it and the event required it
        times_used = func.count(VolunteeringHistory.id)
        skills_used = self.session.execute(
            select(Skill.name, times_used)
            .select_from(VolunteeringHistory)
            .join(EventSkill, EventSkill.event_id == VolunteeringHistory.event_id)
            .join(
                UserSkill,
                and_(UserSkill.skill_id == EventSkill.skill_id, UserSkill.user_id == VolunteeringHistory.user_id),
            )
            .join(Skill, Skill.id == EventSkill.skill_id)
            .where(history)
            .group_by(Skill.name)
            .order_by(times_used.desc(), Skill.name)
        ).all()

        return {
            "summary": {
                "totalEvents": summary[0] or 0,
                "completedEvents": summary[1] or 0,
                "uniqueEvents": summary[2] or 0,
            },
            "byUrgency": [{"urgency": urgency, "count": count} for urgency, count in by_urgency],
            "recentEvents": [
                {
                    "eventName": row.name,
                    "eventDate": row.date.isoformat() if row.date else None,
                    "status": _status(row.checkin),
                }
                for row in recent
            ],
            "skillsUsed": [{"skillName": name, "timesUsed": count} for name, count in skills_used],
        }

    def history_record(self, record_id: Any) -> tuple[str, HistoryRow]:
        """Return the owner's username and the history row for ``record_id``."""
        try:
            record_id = int(record_id)
        except (TypeError, ValueError):
            raise DashboardError("Invalid ID parameter") from None

        history = self.session.get(VolunteeringHistory, record_id)
        if history is None or history.event is None or history.user is None:
            raise DashboardNotFoundError("Record not found")

        event, user = history.event, history.user
        location = event.location
        return user.username, HistoryRow(
            id=history.id,
            volunteer_name=user.get_full_name(),
            event_name=event.name,
            event_date=event.date.isoformat() if event.date else None,
            location=", ".join(part for part in (location.venue_name, location.address) if part) if location else "",
            checked_in=bool(history.checkin),
            role=user.role,
            urgency=event.urgency,
            description=event.description,
            skills=user.skill_names(),
        )
