# impactnow/forms/event.py
"""
Forms for event management
"""

import math

from wtforms import DateField, Form, IntegerField, StringField, TextAreaField
from wtforms.validators import DataRequired, InputRequired, Length, Optional, ValidationError

from .payload import payload_to_formdata

EVENT_DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M:%S.%fZ"]

# JSON key -> form field
EVENT_FIELD_MAP = {
    "name": "name",
    "description": "description",
    "location": "location",
    "date": "date",
    "volunteersNeeded": "volunteers_needed",
    "urgency": "urgency",
}


class VolunteerCountField(IntegerField):
    """Integer field that accepts any numeric text and truncates it"""

    def process_formdata(self, valuelist):
        if not valuelist:
            return
        raw = valuelist[0].strip()
        try:
            number = float(raw)
        except ValueError:
            self.data = None
            raise ValueError(self.gettext("Volunteers needed must be a number.")) from None
        if not math.isfinite(number):
            self.data = None
            raise ValueError(self.gettext("Volunteers needed must be a number."))
        self.data = int(number)


def at_least_one_volunteer(form, field):
    # Unparseable input already carries its own error
    if field.data is not None and field.data < 1:
        raise ValidationError("Volunteers needed must be at least 1.")


class EventDateField(DateField):
    """Calendar date accepting plain dates and ISO timestamps"""

    def process_formdata(self, valuelist):
        try:
            super().process_formdata(valuelist)
        except ValueError:
            raise ValueError(self.gettext("Date must be a valid date.")) from None


class EventForm(Form):
    """Validation for event create and update payloads"""

    name = StringField(
        "Event Name",
        validators=[
            DataRequired(message="Event name is required."),
            Length(max=100, message="Event name must be 100 characters or less."),
        ],
    )
    description = TextAreaField(
        "Description",
        validators=[
            DataRequired(message="Description is required."),
            Length(max=200, message="Description must be 200 characters or less."),
        ],
    )
    location = StringField(
        "Location",
        validators=[DataRequired(message="Location is required.")],
    )
    date = EventDateField(
        "Date",
        validators=[InputRequired(message="Date is required.")],
        format=EVENT_DATE_FORMATS,
    )
    volunteers_needed = VolunteerCountField(
        "Volunteers Needed",
        validators=[InputRequired(message="Volunteers needed is required."), at_least_one_volunteer],
    )
    urgency = StringField(
        "Urgency",
        validators=[Optional(), Length(max=50, message="Urgency must be 50 characters or less.")],
    )

    def error_messages(self):
        """Flatten field errors into a list, in field declaration order"""
        messages = []
        for field in self:
            messages.extend(field.errors)
        return messages


def event_form_from_payload(payload):
    return EventForm(formdata=payload_to_formdata(payload, EVENT_FIELD_MAP))


def validate_event_input(payload):
    """Return every validation message for an event payload (empty when valid)."""
    form = event_form_from_payload(payload)
    if form.validate():
        return []
    return form.error_messages()
