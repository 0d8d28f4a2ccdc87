"""
Volunteer history report as JSON rows or a CSV download.
"""

from __future__ import annotations

import csv
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from io import StringIO
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from impactnow.models import Event, Location, Skill, User, UserSkill, VolunteeringHistory, db

LEADING_FORMULA_CHARACTERS = ("=", "+", "-", "@")

CSV_HEADER = ["Volunteer", "Event", "Date", "Location", "Status", "Skills", "Role", "Urgency", "Description"]


@dataclass(slots=True)
class HistoryRow:
    id: int
    volunteer_name: str
    event_name: str
    event_date: str | None
    location: str
    checked_in: bool
    role: str
    urgency: str
    description: str
    skills: list[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        return "Completed" if self.checked_in else "Pending"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "volunteerName": self.volunteer_name,
            "eventName": self.event_name,
            "eventDate": self.event_date,
            "location": self.location,
            "status": self.status,
            "checkedIn": self.checked_in,
            "skills": list(self.skills),
            "role": self.role,
            "urgency": self.urgency,
            "description": self.description,
        }


class VolunteerHistoryReportService:
    def __init__(self, session: Session | None = None, *, limit: int = 5000):
        self.session = session or db.session
        self.limit = limit

    def _skills_by_user(self, user_ids: list[int]) -> dict[int, list[str]]:
        if not user_ids:
            return {}
        rows = self.session.execute(
            select(UserSkill.user_id, Skill.name)
            .join(Skill, UserSkill.skill_id == Skill.id)
            .where(UserSkill.user_id.in_(user_ids))
            .order_by(UserSkill.user_id, Skill.name)
        ).all()
        grouped: dict[int, list[str]] = defaultdict(list)
        for user_id, name in rows:
            grouped[user_id].append(name)
        return grouped

    def history_rows(self) -> list[HistoryRow]:
        rows = self.session.execute(
            select(
                VolunteeringHistory.id,
                VolunteeringHistory.checkin,
                User.id.label("user_id"),
                User.username,
                User.first_name,
                User.last_name,
                User.role,
                Event.name.label("event_name"),
                Event.date.label("event_date"),
                Event.urgency,
                Event.description,
                Location.venue_name,
            )
            .join(Event, VolunteeringHistory.event_id == Event.id)
            .join(Location, Event.location_id == Location.id)
            .join(User, VolunteeringHistory.user_id == User.id)
            .order_by(Event.date.desc(), VolunteeringHistory.id.asc())
            .limit(self.limit)
        ).all()

        skills = self._skills_by_user(sorted({row.user_id for row in rows}))
        return [
            HistoryRow(
                id=row.id,
                volunteer_name=" ".join(p for p in (row.first_name, row.last_name) if p) or row.username,
                event_name=row.event_name,
                event_date=row.event_date.isoformat() if row.event_date else None,
                location=row.venue_name,
                checked_in=bool(row.checkin),
                role=row.role,
                urgency=row.urgency,
                description=row.description,
                skills=skills.get(row.user_id, []),
            )
            for row in rows
        ]

    def export_csv(self) -> tuple[str, str]:
        buffer = StringIO()
        writer = csv.writer(buffer)
        writer.writerow(CSV_HEADER)
        for row in self.history_rows():
            writer.writerow(
                [
                    _sanitize_csv(row.volunteer_name),
                    _sanitize_csv(row.event_name),
                    row.event_date or "",
                    _sanitize_csv(row.location),
                    row.status,
                    _sanitize_csv(", ".join(row.skills)),
                    _sanitize_csv(row.role),
                    _sanitize_csv(row.urgency),
                    _sanitize_csv(row.description),
                ]
            )
        filename = f"volunteer_history_{datetime.now(timezone.utc).strftime('%Y%m%dT%H%M%SZ')}.csv"
        return filename, buffer.getvalue()


def _sanitize_csv(value: object) -> str:
    if value is None:
        return ""
    text = str(value)
    if text and text[0] in LEADING_FORMULA_CHARACTERS:
        return f"'{text}"
    return text
