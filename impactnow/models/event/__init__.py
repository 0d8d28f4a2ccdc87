# impactnow/models/event/__init__.py
"""
Event models package
"""

from .models import DEFAULT_URGENCY, Event, EventSkill, VolunteeringHistory

__all__ = ["DEFAULT_URGENCY", "Event", "EventSkill", "VolunteeringHistory"]
