# impactnow/models/__init__.py
"""
Database models package
"""

from .base import BaseModel, db, enable_sqlite_pragmas
from .event import DEFAULT_URGENCY, Event, EventSkill, VolunteeringHistory
from .location import Location
from .notification import Notification
from .skill import Skill, UserSkill
from .user import ROLE_ADMIN, ROLE_VOLUNTEER, User

__all__ = [
    "db",
    "BaseModel",
    "enable_sqlite_pragmas",
    "Event",
    "EventSkill",
    "VolunteeringHistory",
    "DEFAULT_URGENCY",
    "Location",
    "Notification",
    "Skill",
    "UserSkill",
    "User",
    "ROLE_ADMIN",
    "ROLE_VOLUNTEER",
]
