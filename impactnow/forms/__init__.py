# impactnow/forms/__init__.py
"""
Input validation forms for JSON payloads
"""

from .event import EventForm, event_form_from_payload, validate_event_input
from .notification import NotificationForm, VolunteerNotificationForm, notification_form_from_payload

__all__ = [
    "EventForm",
    "NotificationForm",
    "VolunteerNotificationForm",
    "event_form_from_payload",
    "notification_form_from_payload",
    "validate_event_input",
]
