from datetime import date

import pytest

from impactnow.forms import (
    EventForm,
    NotificationForm,
    VolunteerNotificationForm,
    event_form_from_payload,
    notification_form_from_payload,
    validate_event_input,
)
from impactnow.forms.payload import payload_to_formdata


def _valid_event(**overrides):
    payload = {
        "name": "Community Food Drive",
        "description": "Collect and sort donations",
        "location": "Community Center, 123 Main St",
        "date": "2030-05-01",
        "volunteersNeeded": 10,
    }
    payload.update(overrides)
    return payload


class TestPayloadToFormdata:
    """Test JSON to form data conversion"""

    def test_maps_keys_and_stringifies(self):
        formdata = payload_to_formdata({"volunteersNeeded": 5, "name": "Drive"}, {"name": "name", "volunteersNeeded": "count"})
        assert formdata.get("name") == "Drive"
        assert formdata.get("count") == "5"

    def test_skips_none_lists_and_objects(self):
        formdata = payload_to_formdata(
            {"a": None, "b": ["x"], "c": {"y": 1}}, {"a": "a", "b": "b", "c": "c"}
        )
        assert len(formdata) == 0

    def test_integral_float_and_bool(self):
        formdata = payload_to_formdata({"n": 3.0, "flag": True}, {"n": "n", "flag": "flag"})
        assert formdata.get("n") == "3"
        assert formdata.get("flag") == "true"

    def test_non_object_payload(self):
        assert len(payload_to_formdata(["name"], {"name": "name"})) == 0


class TestEventForm:
    """Test EventForm validation"""

    def test_event_form_creation(self):
        form = EventForm()
        assert form.name.data is None
        assert form.volunteers_needed.data is None

    def test_valid_payload(self):
        form = event_form_from_payload(_valid_event())
        assert form.validate() is True
        assert form.date.data == date(2030, 5, 1)
        assert form.volunteers_needed.data == 10

    def test_iso_timestamp_date(self):
        form = event_form_from_payload(_valid_event(date="2030-05-01T09:30"))
        assert form.validate() is True
        assert form.date.data == date(2030, 5, 1)

    def test_numeric_text_is_truncated(self):
        form = event_form_from_payload(_valid_event(volunteersNeeded="7.9"))
        assert form.validate() is True
        assert form.volunteers_needed.data == 7

    @pytest.mark.parametrize("value", [0, -5, "0.5"])
    def test_volunteer_count_below_one(self, value):
        assert validate_event_input(_valid_event(volunteersNeeded=value)) == ["Volunteers needed must be at least 1."]

    def test_empty_payload_reports_every_required_field(self):
        assert validate_event_input({}) == [
            "Event name is required.",
            "Description is required.",
            "Location is required.",
            "Date is required.",
            "Volunteers needed is required.",
        ]

    def test_whitespace_name_is_missing(self):
        assert validate_event_input(_valid_event(name="   ")) == ["Event name is required."]

    def test_name_too_long(self):
        errors = validate_event_input(_valid_event(name="x" * 101))
        assert errors == ["Event name must be 100 characters or less."]

    def test_description_too_long(self):
        errors = validate_event_input(_valid_event(description="x" * 201))
        assert errors == ["Description must be 200 characters or less."]

    def test_invalid_date(self):
        assert validate_event_input(_valid_event(date="someday")) == ["Date must be a valid date."]

    @pytest.mark.parametrize("value", ["lots", "nan", "inf"])
    def test_non_numeric_volunteers(self, value):
        assert validate_event_input(_valid_event(volunteersNeeded=value)) == ["Volunteers needed must be a number."]

    def test_urgency_is_optional(self):
        assert validate_event_input(_valid_event(urgency="")) == []

    def test_urgency_too_long(self):
        assert validate_event_input(_valid_event(urgency="x" * 51)) == ["Urgency must be 50 characters or less."]


class TestNotificationForms:
    """Test notification form validation"""

    def test_broadcast_form_valid(self):
        form = notification_form_from_payload({"message": "Thanks!"}, single_recipient=False)
        assert isinstance(form, NotificationForm)
        assert form.validate() is True
        assert form.event_id.data is None

    def test_message_required(self):
        form = notification_form_from_payload({"message": " "}, single_recipient=False)
        assert form.validate() is False
        assert form.error_messages() == ["Message is required"]

    def test_message_length(self):
        form = notification_form_from_payload({"message": "x" * 201}, single_recipient=False)
        assert form.validate() is False
        assert form.error_messages() == ["Message must be less than 200 characters"]

    def test_invalid_event_id(self):
        form = notification_form_from_payload({"message": "Hi", "eventId": "abc"}, single_recipient=False)
        assert form.validate() is False
        assert form.error_messages() == ["Invalid event ID"]

    def test_event_id_is_parsed(self):
        form = notification_form_from_payload({"message": "Hi", "eventId": "12"}, single_recipient=False)
        assert form.validate() is True
        assert form.event_id.data == 12

    def test_single_recipient_requires_email(self):
        form = notification_form_from_payload({"message": "Hi"})
        assert isinstance(form, VolunteerNotificationForm)
        assert form.validate() is False
        assert "Invalid email address" in form.error_messages()

    def test_single_recipient_rejects_bad_email(self):
        form = notification_form_from_payload({"message": "Hi", "toEmail": "not-an-email"})
        assert form.validate() is False
        assert form.error_messages() == ["Invalid email address"]

    def test_single_recipient_valid(self):
        form = notification_form_from_payload({"message": "Hi", "toEmail": "alice@impactnow.org"})
        assert form.validate() is True
