"""
Read-side queries for events.

Every read returns ``EventRecord`` projections: the event row joined with its
location, registered and confirmed volunteer counts taken from the
volunteering history, and the names of the skills it requires. Reads never
modify state, so the same repository can run on the request session or on a
write transaction's session.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from impactnow.models import Event, EventSkill, Location, Skill, VolunteeringHistory, db

logger = logging.getLogger(__name__)

SEARCH_TYPES = ("name", "location", "category", "date", "skill")
DEFAULT_SEARCH_TYPE = "name"
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class InvalidEventId(ValueError):
    """Raised when an event identifier is not a positive integer."""


class EventStorageError(Exception):
    """Raised when storage returns something that is not a row list."""


@dataclass(slots=True)
class EventRecord:
    id: int
    name: str
    description: str
    date: str | None
    volunteers_needed: int
    urgency: str
    location_id: int
    venue: str | None
    address: str | None
    volunteers_registered: int = 0
    volunteers_confirmed: int = 0
    skills: list[str] = field(default_factory=list)

    @property
    def location(self) -> str:
        parts = [part for part in (self.venue, self.address) if part]
        return ", ".join(parts)

    @property
    def slots_remaining(self) -> int:
        return max(self.volunteers_needed - self.volunteers_registered, 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "date": self.date,
            "volunteersNeeded": self.volunteers_needed,
            "urgency": self.urgency,
            "locationId": self.location_id,
            "venue": self.venue,
            "address": self.address,
            "location": self.location,
            "volunteersRegistered": self.volunteers_registered,
            "volunteersConfirmed": self.volunteers_confirmed,
            "slotsRemaining": self.slots_remaining,
            "skills": list(self.skills),
        }


@dataclass(slots=True)
class EventPage:
    items: list[EventRecord]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit

    def to_dict(self) -> dict[str, Any]:
        return {
            "events": [record.to_dict() for record in self.items],
            "pagination": {
                "total": self.total,
                "page": self.page,
                "limit": self.limit,
                "totalPages": self.total_pages,
                "hasNextPage": self.page < self.total_pages,
                "hasPrevPage": self.page > 1,
            },
        }


def parse_event_id(raw: Any) -> int:
    """Parse a path or body identifier into a positive integer."""
    if isinstance(raw, bool):
        raise InvalidEventId("Invalid event ID")
    if isinstance(raw, int):
        value = raw
    else:
        text = str(raw).strip() if raw is not None else ""
        if not text.isdigit():
            raise InvalidEventId("Invalid event ID")
        value = int(text)
    if value <= 0:
        raise InvalidEventId("Invalid event ID")
    return value


def _coerce_int(value: Any) -> int:
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _format_date(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def _parse_date(value: str) -> date | None:
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


class EventRepository:
    """Event projections joined with location, volunteer counts and skills."""

    def __init__(self, session: Session | None = None):
        self.session = session or db.session

    # ------------------------------------------------------------------
    # Query building
    # ------------------------------------------------------------------
    def _base_query(self):
        registered = (
            select(func.count(VolunteeringHistory.id))
            .where(VolunteeringHistory.event_id == Event.id)
            .correlate(Event)
            .scalar_subquery()
        )
        confirmed = (
            select(func.count(VolunteeringHistory.id))
            .where(VolunteeringHistory.event_id == Event.id, VolunteeringHistory.checkin.is_(True))
            .correlate(Event)
            .scalar_subquery()
        )
        return select(
            Event.id,
            Event.name,
            Event.description,
            Event.date,
            Event.max_volunteers,
            Event.urgency,
            Event.location_id,
            Location.venue_name,
            Location.address,
            registered.label("registered"),
            confirmed.label("confirmed"),
        ).join(Location, Event.location_id == Location.id)

    def _skills_by_event(self, event_ids: Sequence[int]) -> dict[int, list[str]]:
        if not event_ids:
            return {}
        rows = self.session.execute(
            select(EventSkill.event_id, Skill.name)
            .join(Skill, EventSkill.skill_id == Skill.id)
            .where(EventSkill.event_id.in_(event_ids))
            .order_by(EventSkill.event_id, Skill.name)
        ).all()
        grouped: dict[int, list[str]] = defaultdict(list)
        for event_id, skill_name in rows:
            grouped[event_id].append(skill_name)
        return grouped

    def _fetch(self, query) -> list[EventRecord]:
        rows = self.session.execute(query).all()
        if not isinstance(rows, list):
            logger.warning("Event query returned %s instead of a row list", type(rows).__name__)
            return []

        records: list[EventRecord] = []
        for row in rows:
            try:
                records.append(
                    EventRecord(
                        id=int(row.id),
                        name=row.name,
                        description=row.description,
                        date=_format_date(row.date),
                        volunteers_needed=_coerce_int(row.max_volunteers),
                        urgency=row.urgency,
                        location_id=_coerce_int(row.location_id),
                        venue=row.venue_name,
                        address=row.address,
                        volunteers_registered=_coerce_int(row.registered),
                        volunteers_confirmed=_coerce_int(row.confirmed),
                    )
                )
            except (AttributeError, TypeError, ValueError) as exc:
                logger.warning("Malformed event row from storage: %s", exc)
                return []

        skills = self._skills_by_event([record.id for record in records])
        for record in records:
            record.skills = skills.get(record.id, [])
        return records

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def list_events(
        self,
        *,
        future_only: bool = False,
        urgency: str | None = None,
        event_ids: Iterable[int] | None = None,
    ) -> list[EventRecord]:
        query = self._base_query()
        if future_only:
            query = query.where(Event.date >= date.today())
        if urgency:
            query = query.where(Event.urgency == urgency)
        if event_ids is not None:
            ids = list(event_ids)
            if not ids:
                return []
            query = query.where(Event.id.in_(ids))
        return self._fetch(query.order_by(Event.date.asc(), Event.id.asc()))

    def get_event(self, event_id: int) -> EventRecord | None:
        records = self._fetch(self._base_query().where(Event.id == event_id))
        return records[0] if records else None

    def browse_events(self, *, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> EventPage:
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        total = _coerce_int(self.session.scalar(select(func.count(Event.id))))
        query = (
            self._base_query()
            .order_by(Event.date.asc(), Event.id.asc())
            .limit(limit)
            .offset((page - 1) * limit)
        )
        return EventPage(items=self._fetch(query), total=total, page=page, limit=limit)

    def search_events_by_skills(self, skill_names: Iterable[str]) -> list[EventRecord]:
        lowered = sorted({name.strip().lower() for name in skill_names if name and name.strip()})
        if not lowered:
            return []
        matching = (
            select(EventSkill.event_id)
            .join(Skill, EventSkill.skill_id == Skill.id)
            .where(func.lower(Skill.name).in_(lowered))
        )
        query = self._base_query().where(Event.id.in_(matching))
        return self._fetch(query.order_by(Event.date.asc(), Event.id.asc()))

    def search_events(self, search_type: str | None, term: str | None) -> list[EventRecord]:
        """Search by name, location, category (urgency), exact date or skill name."""
        query = self._base_query()
        term = (term or "").strip()
        if term:
            if search_type not in SEARCH_TYPES:
                search_type = DEFAULT_SEARCH_TYPE

            if search_type == "name":
                query = query.where(Event.name.contains(term, autoescape=True))
            elif search_type == "location":
                query = query.where(
                    or_(
                        Location.venue_name.contains(term, autoescape=True),
                        Location.address.contains(term, autoescape=True),
                    )
                )
            elif search_type == "category":
                query = query.where(Event.urgency.contains(term, autoescape=True))
            elif search_type == "date":
                parsed = _parse_date(term)
                if parsed is None:
                    return []
                query = query.where(Event.date == parsed)
            elif search_type == "skill":
                matching = (
                    select(EventSkill.event_id)
                    .join(Skill, EventSkill.skill_id == Skill.id)
                    .where(Skill.name.contains(term, autoescape=True))
                )
                query = query.where(Event.id.in_(matching))
        return self._fetch(query.order_by(Event.date.asc(), Event.id.asc()))

    def search_events_by_location(self, term: str) -> list[EventRecord]:
        return self.search_events("location", term)

    # ------------------------------------------------------------------
    # Reference data
    # ------------------------------------------------------------------
    def list_locations(self) -> list[dict[str, Any]]:
        rows = self.session.execute(select(Location).order_by(Location.venue_name)).scalars().all()
        if not isinstance(rows, list):
            raise EventStorageError("Location lookup returned an invalid result")
        return [location.to_dict() for location in rows]

    def list_skills(self) -> list[dict[str, Any]]:
        rows = self.session.execute(select(Skill).order_by(Skill.name)).scalars().all()
        if not isinstance(rows, list):
            raise EventStorageError("Skill lookup returned an invalid result")
        return [skill.to_dict() for skill in rows]
