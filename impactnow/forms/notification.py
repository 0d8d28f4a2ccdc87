# impactnow/forms/notification.py
"""
Forms for volunteer notifications
"""

from wtforms import Form, IntegerField, StringField, TextAreaField
from wtforms.validators import DataRequired, Email, Length, Optional

from .payload import payload_to_formdata

NOTIFICATION_FIELD_MAP = {
    "toEmail": "to_email",
    "message": "message",
    "eventId": "event_id",
}


class EventIdField(IntegerField):
    def process_formdata(self, valuelist):
        if not valuelist:
            return
        try:
            self.data = int(valuelist[0])
        except ValueError:
            self.data = None
            raise ValueError(self.gettext("Invalid event ID")) from None


class NotificationForm(Form):
    """Broadcast notification: message plus an optional event"""

    message = TextAreaField(
        "Message",
        validators=[
            DataRequired(message="Message is required"),
            Length(max=200, message="Message must be less than 200 characters"),
        ],
    )
    event_id = EventIdField("Event", validators=[Optional()])

    def error_messages(self):
        messages = []
        for field in self:
            messages.extend(field.errors)
        return messages


class VolunteerNotificationForm(NotificationForm):
    """Notification addressed to a single volunteer by email"""

    to_email = StringField(
        "Recipient Email",
        validators=[DataRequired(message="Invalid email address"), Email(message="Invalid email address")],
    )


def notification_form_from_payload(payload, *, single_recipient=True):
    form_class = VolunteerNotificationForm if single_recipient else NotificationForm
    return form_class(formdata=payload_to_formdata(payload, NOTIFICATION_FIELD_MAP))
