from datetime import datetime, timedelta, timezone

from flask import json
from sqlalchemy import select

from conftest import make_event, volunteer_headers
from impactnow.models import Notification, User, VolunteeringHistory, db
from impactnow.services.volunteer_dashboard_service import time_ago


def _history_id(user_id):
    return db.session.scalar(select(VolunteeringHistory.id).where(VolunteeringHistory.user_id == user_id))


class TestTimeAgo:
    """Test relative notification timestamps"""

    def test_minutes_hours_and_days(self):
        now = datetime(2030, 5, 10, 12, 0, tzinfo=timezone.utc)
        assert time_ago(now - timedelta(minutes=5), now) == "5 min ago"
        assert time_ago(now - timedelta(hours=1), now) == "1 hour ago"
        assert time_ago(now - timedelta(hours=5), now) == "5 hours ago"
        assert time_ago(now - timedelta(days=1), now) == "1 day ago"
        assert time_ago(now - timedelta(days=3), now) == "3 days ago"

    def test_naive_timestamp_is_utc(self):
        now = datetime(2030, 5, 10, 12, 0, tzinfo=timezone.utc)
        assert time_ago(datetime(2030, 5, 10, 11, 30), now) == "30 min ago"

    def test_missing_timestamp(self):
        assert time_ago(None) is None


class TestDashboardAPI:
    """Test GET /api/dashboard/<username>"""

    def test_own_dashboard(self, client, reference_data, volunteers, event_with_dependents):
        make_event(
            reference_data["locations"]["City Park"],
            name="Delivery Run",
            skill_ids=[reference_data["skills"]["driving"]],
        )
        make_event(
            reference_data["locations"]["Public Library"],
            name="Past Book Sale",
            days_ahead=-5,
            skill_ids=[reference_data["skills"]["organizing"]],
        )

        response = client.get("/api/dashboard/alice", headers=volunteer_headers("alice"))

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["profile"]["username"] == "alice"
        assert data["profile"]["firstName"] == "Alice"
        assert data["profile"]["skills"] == ["cooking", "organizing"]
        assert [n["message"] for n in data["notifications"]] == ["See you there"]
        assert data["notifications"][0]["eventName"] == "Community Food Drive"
        assert data["notifications"][0]["time"].endswith("min ago")
        assert [event["name"] for event in data["eventSuggestions"]] == ["Community Food Drive"]

    def test_suggestions_match_location(self, client, reference_data, volunteers):
        db.session.get(User, volunteers["bob"]).location = "Oak Ave, Springfield"
        db.session.commit()
        make_event(reference_data["locations"]["City Park"], name="Park Cleanup")
        make_event(reference_data["locations"]["Public Library"], name="Book Sale")

        data = json.loads(client.get("/api/dashboard/bob", headers=volunteer_headers("bob")).data)

        assert [event["name"] for event in data["eventSuggestions"]] == ["Park Cleanup"]

    def test_no_location_gets_next_three_events(self, client, reference_data, volunteers):
        for days in (9, 3, 6, 12):
            make_event(reference_data["locations"]["City Park"], name=f"Event in {days} days", days_ahead=days)

        data = json.loads(client.get("/api/dashboard/bob", headers=volunteer_headers("bob")).data)

        assert [event["name"] for event in data["eventSuggestions"]] == [
            "Event in 3 days",
            "Event in 6 days",
            "Event in 9 days",
        ]

    def test_only_five_latest_notifications(self, client, volunteers, sample_event):
        sent = datetime(2030, 1, 1, tzinfo=timezone.utc)
        db.session.add_all(
            [
                Notification(
                    event_id=sample_event,
                    user_id=volunteers["alice"],
                    message=f"Update {i}",
                    sent_at=sent + timedelta(hours=i),
                )
                for i in range(6)
            ]
        )
        db.session.commit()

        data = json.loads(client.get("/api/dashboard/alice", headers=volunteer_headers("alice")).data)

        assert [n["message"] for n in data["notifications"]] == [f"Update {i}" for i in (5, 4, 3, 2, 1)]

    def test_volunteer_cannot_view_another(self, client, volunteers):
        response = client.get("/api/dashboard/alice", headers=volunteer_headers("bob"))
        assert response.status_code == 403
        assert json.loads(response.data) == {"error": "Access denied"}

    def test_admin_views_any(self, client, admin_headers, volunteers):
        response = client.get("/api/dashboard/bob", headers=admin_headers)
        assert response.status_code == 200
        assert json.loads(response.data)["profile"]["fullName"] == "Bob Smith"

    def test_unknown_user(self, client, admin_headers, volunteers):
        response = client.get("/api/dashboard/nobody", headers=admin_headers)
        assert response.status_code == 404
        assert json.loads(response.data) == {"error": "User profile not found"}

    def test_requires_authentication(self, client, volunteers):
        assert client.get("/api/dashboard/alice").status_code == 401


class TestUserEventsAPI:
    """Test GET /api/events/user/<username>"""

    def test_events_with_status(self, client, volunteers, event_with_dependents):
        alice = json.loads(client.get("/api/events/user/alice", headers=volunteer_headers("alice")).data)
        bob = json.loads(client.get("/api/events/user/bob", headers=volunteer_headers("bob")).data)

        assert [event["id"] for event in alice] == [event_with_dependents]
        assert alice[0]["status"] == "Completed"
        assert alice[0]["checkedIn"] is True
        assert alice[0]["skills"] == ["cooking", "organizing"]
        assert alice[0]["location"] == "Community Center, 123 Main St"
        assert bob[0]["status"] == "Pending"

    def test_no_events(self, client, admin_headers, volunteers):
        response = client.get("/api/events/user/bob", headers=admin_headers)
        assert response.status_code == 200
        assert json.loads(response.data) == []

    def test_unknown_user(self, client, admin_headers, volunteers):
        response = client.get("/api/events/user/nobody", headers=admin_headers)
        assert response.status_code == 404
        assert json.loads(response.data) == {"error": "User not found"}

    def test_volunteer_cannot_view_another(self, client, volunteers):
        response = client.get("/api/events/user/bob", headers=volunteer_headers("alice"))
        assert response.status_code == 403


class TestVolunteerHistoryStatsAPI:
    """Test GET /api/volunteer-history/stats"""

    def test_own_stats(self, client, reference_data, volunteers, event_with_dependents):
        past_event = make_event(
            reference_data["locations"]["City Park"],
            name="Spring Cleanup",
            days_ahead=-10,
            urgency="Low",
            skill_ids=[reference_data["skills"]["organizing"]],
        )
        db.session.add(VolunteeringHistory(event_id=past_event, user_id=volunteers["alice"], checkin=False))
        db.session.commit()

        response = client.get("/api/volunteer-history/stats", headers=volunteer_headers("alice"))

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["summary"] == {"totalEvents": 2, "completedEvents": 1, "uniqueEvents": 2}
        assert data["byUrgency"] == [{"urgency": "High", "count": 1}, {"urgency": "Low", "count": 1}]
        assert [event["eventName"] for event in data["recentEvents"]] == ["Community Food Drive", "Spring Cleanup"]
        assert [event["status"] for event in data["recentEvents"]] == ["Completed", "Pending"]
        assert data["skillsUsed"] == [
            {"skillName": "organizing", "timesUsed": 2},
            {"skillName": "cooking", "timesUsed": 1},
        ]

    def test_admin_asks_about_volunteer(self, client, volunteers, event_with_dependents):
        headers = {"Authorization": "Bearer admin-token", "X-User-Role": "admin", "X-Username": "admin"}

        response = client.get("/api/volunteer-history/stats?username=bob", headers=headers)

        data = json.loads(response.data)
        assert data["summary"] == {"totalEvents": 1, "completedEvents": 0, "uniqueEvents": 1}
        assert data["skillsUsed"] == []

    def test_no_history(self, client, volunteers):
        data = json.loads(client.get("/api/volunteer-history/stats", headers=volunteer_headers("bob")).data)
        assert data == {
            "summary": {"totalEvents": 0, "completedEvents": 0, "uniqueEvents": 0},
            "byUrgency": [],
            "recentEvents": [],
            "skillsUsed": [],
        }

    def test_volunteer_cannot_ask_about_another(self, client, volunteers):
        response = client.get("/api/volunteer-history/stats?username=alice", headers=volunteer_headers("bob"))
        assert response.status_code == 403

    def test_username_required(self, client, admin_headers):
        response = client.get("/api/volunteer-history/stats", headers=admin_headers)
        assert response.status_code == 400
        assert json.loads(response.data) == {"error": "Username is required"}


class TestVolunteerHistoryRecordAPI:
    """Test GET /api/volunteer-history/record/<id>"""

    def test_owner_reads_record(self, client, volunteers, event_with_dependents):
        record_id = _history_id(volunteers["alice"])

        response = client.get(f"/api/volunteer-history/record/{record_id}", headers=volunteer_headers("alice"))

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["id"] == record_id
        assert data["volunteerName"] == "Alice Jones"
        assert data["eventName"] == "Community Food Drive"
        assert data["status"] == "Completed"
        assert data["location"] == "Community Center, 123 Main St"
        assert data["skills"] == ["cooking", "organizing"]
        assert "username" not in data

    def test_other_volunteer_is_refused(self, client, volunteers, event_with_dependents):
        record_id = _history_id(volunteers["alice"])

        response = client.get(f"/api/volunteer-history/record/{record_id}", headers=volunteer_headers("bob"))

        assert response.status_code == 403
        assert json.loads(response.data) == {"error": "You do not have permission to access this record"}

    def test_admin_reads_any(self, client, admin_headers, volunteers, event_with_dependents):
        record_id = _history_id(volunteers["bob"])
        response = client.get(f"/api/volunteer-history/record/{record_id}", headers=admin_headers)
        assert json.loads(response.data)["status"] == "Pending"

    def test_missing_record(self, client, admin_headers, volunteers):
        response = client.get("/api/volunteer-history/record/9999", headers=admin_headers)
        assert response.status_code == 404
        assert json.loads(response.data) == {"error": "Record not found"}

    def test_invalid_id(self, client, admin_headers):
        response = client.get("/api/volunteer-history/record/abc", headers=admin_headers)
        assert response.status_code == 400
        assert json.loads(response.data) == {"error": "Invalid ID parameter"}
