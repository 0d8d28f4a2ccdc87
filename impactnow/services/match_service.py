"""
Volunteer lookup and volunteer-to-event matching.

Match creation checks the volunteer, the event, duplicates and capacity with
separate reads before inserting the history row. Unlike event writes these
checks are not wrapped in one transaction with the insert, so two concurrent
matches can both pass the capacity check. The unique (event, user)
constraint still stops a duplicate row and is reported as a duplicate match.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from impactnow.models import (
    ROLE_VOLUNTEER,
    Event,
    EventSkill,
    Location,
    Notification,
    Skill,
    User,
    UserSkill,
    VolunteeringHistory,
    db,
)

from .event_repository import EventRecord, EventRepository

logger = logging.getLogger(__name__)

VOLUNTEER_SEARCH_TYPES = ("username", "email", "phone", "name")


class MatchError(Exception):
    """Base exception for matching failures. ``status`` is the HTTP status to report."""

    status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MatchValidationError(MatchError):
    status = 400


class MatchNotFoundError(MatchError):
    status = 404


class MatchConflictError(MatchError):
    """Duplicate match or full event."""

    status = 400


@dataclass(slots=True)
class MatchResult:
    id: int
    username: str
    volunteer_name: str
    event_id: int
    event_name: str
    event_date: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "message": f"Successfully matched {self.volunteer_name} to {self.event_name}",
            "eventId": self.event_id,
            "username": self.username,
            "eventName": self.event_name,
            "eventDate": self.event_date,
            "volunteerName": self.volunteer_name,
        }


def _signup_message(event_name: str) -> str:
    return f"You have successfully signed up for {event_name}. Thank you!"


class MatchService:
    def __init__(self, session: Session | None = None):
        self.session = session or db.session

    # ------------------------------------------------------------------
    # Volunteers
    # ------------------------------------------------------------------
    def _volunteer_query(self):
        return select(User).where(User.role == ROLE_VOLUNTEER).order_by(User.username)

    def list_volunteers(self) -> list[dict[str, Any]]:
        volunteers = self.session.execute(self._volunteer_query()).scalars().all()
        return [volunteer.to_dict() for volunteer in volunteers]

    def search_volunteers(self, term: str | None) -> list[dict[str, Any]]:
        term = (term or "").strip()
        if not term:
            raise MatchValidationError("Search term is required")
        query = self._volunteer_query().where(
            or_(
                User.username.contains(term, autoescape=True),
                User.email.contains(term, autoescape=True),
                User.first_name.contains(term, autoescape=True),
                User.last_name.contains(term, autoescape=True),
            )
        )
        return [volunteer.to_dict() for volunteer in self.session.execute(query).scalars().all()]

    def find_volunteer(self, search_type: str | None, term: str | None) -> dict[str, Any]:
        """Return the first volunteer matching ``term`` on one attribute."""
        term = (term or "").strip()
        if not term or not search_type:
            raise MatchValidationError("Search type and search term are required")
        if search_type not in VOLUNTEER_SEARCH_TYPES:
            raise MatchValidationError("Invalid search type")

        if search_type == "username":
            condition = User.username.contains(term, autoescape=True)
        elif search_type == "email":
            condition = User.email.contains(term, autoescape=True)
        elif search_type == "phone":
            condition = User.phone_number.contains(term, autoescape=True)
        else:
            full_name = func.coalesce(User.first_name, "") + " " + func.coalesce(User.last_name, "")
            condition = full_name.contains(term, autoescape=True)

        volunteer = self.session.execute(self._volunteer_query().where(condition).limit(1)).scalars().first()
        if volunteer is None:
            raise MatchNotFoundError("No volunteers found")
        return volunteer.to_dict()

    def _require_volunteer(self, username: str) -> User:
        user = self.session.execute(
            select(User).where(User.username == username, User.role == ROLE_VOLUNTEER)
        ).scalars().first()
        if user is None:
            raise MatchNotFoundError("Volunteer not found")
        return user

    def volunteer_skills(self, username: str) -> list[str]:
        user = self._require_volunteer(username)
        rows = self.session.execute(
            select(Skill.name)
            .join(UserSkill, UserSkill.skill_id == Skill.id)
            .where(UserSkill.user_id == user.id)
            .order_by(Skill.name)
        ).scalars()
        return list(rows)

    def volunteer_history(self, username: str) -> list[dict[str, Any]]:
        user = self._require_volunteer(username)
        rows = self.session.execute(
            select(
                VolunteeringHistory.id,
                VolunteeringHistory.checkin,
                Event.id.label("event_id"),
                Event.name,
                Event.date,
                Event.urgency,
                Location.venue_name,
                Location.address,
            )
            .join(Event, VolunteeringHistory.event_id == Event.id)
            .join(Location, Event.location_id == Location.id)
            .where(VolunteeringHistory.user_id == user.id)
            .order_by(Event.date.desc(), VolunteeringHistory.id.desc())
        ).all()
        return [
            {
                "id": row.id,
                "eventId": row.event_id,
                "eventName": row.name,
                "eventDate": row.date.isoformat() if row.date else None,
                "urgency": row.urgency,
                "location": ", ".join(part for part in (row.venue_name, row.address) if part),
                "status": "Completed" if row.checkin else "Pending",
            }
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Events offered on the matching screen
    # ------------------------------------------------------------------
    def list_match_events(self, term: str | None = None, *, future_only: bool = True) -> list[EventRecord]:
        repository = EventRepository(self.session)
        term = (term or "").strip()
        if not term:
            return repository.list_events(future_only=future_only)

        query = (
            select(Event.id)
            .join(Location, Event.location_id == Location.id)
            .where(
                or_(
                    Event.name.contains(term, autoescape=True),
                    Event.description.contains(term, autoescape=True),
                    Location.venue_name.contains(term, autoescape=True),
                    Location.address.contains(term, autoescape=True),
                )
            )
        )
        ids = list(self.session.execute(query).scalars())
        return repository.list_events(future_only=future_only, event_ids=ids)

    def events_for_skill(self, skill_name: str, *, future_only: bool = True) -> list[EventRecord]:
        ids = list(
            self.session.execute(
                select(EventSkill.event_id)
                .join(Skill, EventSkill.skill_id == Skill.id)
                .where(Skill.name == skill_name)
            ).scalars()
        )
        return EventRepository(self.session).list_events(future_only=future_only, event_ids=ids)

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------
    def create_match(self, username: Any, event_id: Any, *, notify: bool = False) -> MatchResult:
        if not username or not event_id:
            raise MatchValidationError("Username and event ID are required")
        try:
            event_id = int(event_id)
        except (TypeError, ValueError):
            raise MatchValidationError("Invalid event ID") from None

        user = self._require_volunteer(str(username))
        event = self.session.get(Event, event_id)
        if event is None:
            raise MatchNotFoundError("Event not found")

        existing = self.session.scalar(
            select(VolunteeringHistory.id).where(
                VolunteeringHistory.user_id == user.id, VolunteeringHistory.event_id == event_id
            )
        )
        if existing is not None:
            raise MatchConflictError("Volunteer is already matched to this event")

        registered = self.session.scalar(
            select(func.count(VolunteeringHistory.id)).where(VolunteeringHistory.event_id == event_id)
        )
        if (registered or 0) >= (event.max_volunteers or 0):
            raise MatchConflictError("Event has reached maximum volunteer capacity")

        match = VolunteeringHistory(event_id=event_id, user_id=user.id, checkin=False)
        self.session.add(match)
        if notify:
            self.session.add(Notification(event_id=event_id, user_id=user.id, message=_signup_message(event.name)))
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise MatchConflictError("Volunteer is already matched to this event") from None

        logger.info("Matched volunteer %s to event %s", user.username, event_id)
        return MatchResult(
            id=match.id,
            username=user.username,
            volunteer_name=user.get_full_name(),
            event_id=event.id,
            event_name=event.name,
            event_date=event.date.isoformat() if isinstance(event.date, date) else None,
        )

    def list_matches(self) -> list[dict[str, Any]]:
        rows = self.session.execute(
            select(
                VolunteeringHistory.id,
                VolunteeringHistory.checkin,
                User.username,
                User.first_name,
                User.last_name,
                Event.id.label("event_id"),
                Event.name.label("event_name"),
                Event.date.label("event_date"),
            )
            .join(Event, VolunteeringHistory.event_id == Event.id)
            .join(User, VolunteeringHistory.user_id == User.id)
            .order_by(Event.date.desc(), VolunteeringHistory.id.desc())
        ).all()
        return [
            {
                "id": row.id,
                "username": row.username,
                "volunteerName": " ".join(p for p in (row.first_name, row.last_name) if p) or row.username,
                "eventId": row.event_id,
                "eventName": row.event_name,
                "eventDate": row.event_date.isoformat() if row.event_date else None,
                "checkin": bool(row.checkin),
            }
            for row in rows
        ]

    def delete_match(self, match_id: Any) -> None:
        try:
            match_id = int(match_id)
        except (TypeError, ValueError):
            raise MatchNotFoundError("Match not found") from None
        match = self.session.get(VolunteeringHistory, match_id)
        if match is None:
            raise MatchNotFoundError("Match not found")
        self.session.delete(match)
        self.session.commit()
        logger.info("Removed match %s", match_id)
