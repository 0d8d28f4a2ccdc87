"""
Transactional create, update and delete of events.

Each write follows the same sequence: validate the payload, then open a
dedicated session (one pooled connection) and resolve the location, write the
event, associate its skills and read back the response projection before
committing. The request session is never touched, so a write holds exactly one
connection. Any storage failure inside the transaction rolls everything back
and surfaces as ``EventWriteError`` with a generic message; the SQL error is
only logged. The dedicated session is always closed, which returns its
connection to the pool even when commit or rollback raised.

Nothing is retried.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config.monitoring import EventMonitoring
from impactnow.forms.event import event_form_from_payload
from impactnow.models import DEFAULT_URGENCY, Event, EventSkill, Notification, VolunteeringHistory, db

from .event_repository import EventRecord, EventRepository, parse_event_id
from .location_resolver import LocationResolver
from .skill_associator import normalize_skill_names, replace_event_skills

logger = logging.getLogger(__name__)


class EventWorkflowError(Exception):
    """Base exception for event write failures."""


class EventValidationError(EventWorkflowError):
    """Raised when the payload breaks one or more field rules."""

    def __init__(self, errors):
        super().__init__("Event failed validation.")
        self.errors: list[str] = list(errors)


class LocationNotFoundError(EventWorkflowError):
    """Raised when the location text matches no catalog venue."""

    def __init__(self, location_text):
        super().__init__("No matching location found")
        self.location_text = location_text


class EventNotFoundError(EventWorkflowError):
    """Raised when an update or delete targets a missing event."""

    def __init__(self, event_id):
        super().__init__("Event not found")
        self.event_id = event_id


class EventWriteError(EventWorkflowError):
    """Raised when the transaction failed and was rolled back."""


@dataclass(slots=True)
class EventWriteResult:
    event: EventRecord
    skipped_skills: list[str] = field(default_factory=list)
    time: Any = None

    def to_dict(self) -> dict[str, Any]:
        payload = self.event.to_dict()
        payload["skippedSkills"] = list(self.skipped_skills)
        if self.time is not None:
            payload["time"] = self.time
        return payload


@dataclass(slots=True)
class _ValidatedEvent:
    name: str
    description: str
    date: Any
    volunteers_needed: int
    urgency: str | None
    location_text: str


class EventWorkflowService:
    """Create, update and delete events atomically with their skill links."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or (lambda: Session(bind=db.engine))

    # ------------------------------------------------------------------
    # Validation and lookups
    # ------------------------------------------------------------------
    @staticmethod
    def _validate(payload: Mapping[str, Any] | None) -> _ValidatedEvent:
        form = event_form_from_payload(payload)
        if not form.validate():
            raise EventValidationError(form.error_messages())
        return _ValidatedEvent(
            name=form.name.data.strip(),
            description=form.description.data.strip(),
            date=form.date.data,
            volunteers_needed=form.volunteers_needed.data,
            urgency=(form.urgency.data or "").strip() or None,
            location_text=form.location.data,
        )

    @staticmethod
    def _resolve_location(session: Session, location_text: str) -> int:
        location_id = LocationResolver(session).resolve(location_text)
        if location_id is None:
            raise LocationNotFoundError(location_text)
        return location_id

    # ------------------------------------------------------------------
    # Transaction envelope
    # ------------------------------------------------------------------
    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Session]:
        session = self._session_factory()
        started = time.perf_counter()
        status = "error"
        try:
            try:
                yield session
                session.commit()
                status = "success"
            except EventNotFoundError:
                status = "not_found"
                self._rollback(session, operation)
                raise
            except LocationNotFoundError:
                status = "invalid"
                self._rollback(session, operation)
                raise
            except EventWriteError:
                self._rollback(session, operation)
                raise
            except Exception as exc:
                logger.error("Event %s failed, rolling back: %s", operation, exc, exc_info=True)
                self._rollback(session, operation)
                raise EventWriteError(f"Failed to {operation} event") from exc
        finally:
            try:
                session.close()
            except SQLAlchemyError as exc:
                logger.error("Failed to release connection after event %s: %s", operation, exc)
            EventMonitoring.record_write(
                operation=operation,
                status=status,
                duration_seconds=time.perf_counter() - started,
            )

    @staticmethod
    def _rollback(session: Session, operation: str) -> None:
        try:
            session.rollback()
        except SQLAlchemyError as exc:
            logger.error("Rollback failed during event %s: %s", operation, exc, exc_info=True)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------
    def create_event(self, payload: Mapping[str, Any] | None) -> EventWriteResult:
        fields = self._validate(payload)
        skill_names = normalize_skill_names((payload or {}).get("skills")) or []

        with self._transaction("create") as session:
            location_id = self._resolve_location(session, fields.location_text)
            event = Event(
                name=fields.name,
                description=fields.description,
                date=fields.date,
                max_volunteers=fields.volunteers_needed,
                urgency=fields.urgency or DEFAULT_URGENCY,
                location_id=location_id,
            )
            session.add(event)
            session.flush()

            association = replace_event_skills(event.id, skill_names, session)
            record = EventRepository(session).get_event(event.id)
            if record is None:
                raise EventWriteError("Failed to create event")

        EventMonitoring.record_skipped_skills(len(association.skipped))
        logger.info("Created event %s (%s)", record.id, record.name)
        return EventWriteResult(event=record, skipped_skills=association.skipped, time=(payload or {}).get("time"))

    def update_event(self, raw_event_id: Any, payload: Mapping[str, Any] | None) -> EventWriteResult:
        event_id = parse_event_id(raw_event_id)
        fields = self._validate(payload)
        # None means the caller did not send a skill list: keep what is stored
        skill_names = normalize_skill_names((payload or {}).get("skills"))

        skipped: list[str] = []
        with self._transaction("update") as session:
            location_id = self._resolve_location(session, fields.location_text)
            event = session.get(Event, event_id)
            if event is None:
                raise EventNotFoundError(event_id)

            event.name = fields.name
            event.description = fields.description
            event.date = fields.date
            event.max_volunteers = fields.volunteers_needed
            if fields.urgency:
                event.urgency = fields.urgency
            event.location_id = location_id
            session.flush()

            if skill_names is not None:
                association = replace_event_skills(event_id, skill_names, session, clear_existing=True)
                skipped = association.skipped

            record = EventRepository(session).get_event(event_id)
            if record is None:
                raise EventWriteError("Failed to update event")

        EventMonitoring.record_skipped_skills(len(skipped))
        logger.info("Updated event %s (%s)", record.id, record.name)
        return EventWriteResult(event=record, skipped_skills=skipped, time=(payload or {}).get("time"))

    def delete_event(self, raw_event_id: Any) -> EventRecord:
        """Delete an event and its skill links, notifications and history rows."""
        event_id = parse_event_id(raw_event_id)

        with self._transaction("delete") as session:
            snapshot = EventRepository(session).get_event(event_id)
            if snapshot is None:
                raise EventNotFoundError(event_id)

            session.execute(delete(EventSkill).where(EventSkill.event_id == event_id))
            session.execute(delete(Notification).where(Notification.event_id == event_id))
            session.execute(delete(VolunteeringHistory).where(VolunteeringHistory.event_id == event_id))
            session.execute(delete(Event).where(Event.id == event_id))

        logger.info("Deleted event %s (%s)", snapshot.id, snapshot.name)
        return snapshot
