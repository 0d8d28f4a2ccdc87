# conftest.py

import os
import tempfile
from datetime import date, timedelta

import pytest
from flask import g
from flask.testing import FlaskClient

# Set testing environment BEFORE importing app so app.py picks TestingConfig.
# Event writes open their own connection, so tests need a file database
# rather than a private in-memory one.
os.environ["FLASK_ENV"] = "testing"
_db_fd, _TEST_DB_PATH = tempfile.mkstemp(suffix="_impactnow_test.db")
os.close(_db_fd)
os.environ["TEST_DATABASE_URL"] = f"sqlite:///{_TEST_DB_PATH}"

# Now import app and other modules after environment is set
from app import app as flask_app  # noqa: E402
from impactnow.models import (  # noqa: E402
    ROLE_ADMIN,
    ROLE_VOLUNTEER,
    Event,
    EventSkill,
    Location,
    Notification,
    Skill,
    User,
    UserSkill,
    VolunteeringHistory,
    db,
)

ADMIN_HEADERS = {"Authorization": "Bearer test-token"}


def volunteer_headers(username):
    return {
        "Authorization": "Bearer volunteer-token",
        "X-User-Role": ROLE_VOLUNTEER,
        "X-Username": username,
    }


@pytest.fixture(scope="function")
def app():
    """Create and configure a test Flask application with empty tables"""
    flask_app.config.update(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret-key-for-testing-only",
            "MONITORING_ENABLED": False,
            "MATCH_EVENTS_FUTURE_ONLY": True,
        }
    )

    with flask_app.app_context():
        # Drop any existing tables to ensure clean state
        db.drop_all()
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="session", autouse=True)
def _remove_test_database():
    yield
    with flask_app.app_context():
        db.engine.dispose()
    for suffix in ("", "-wal", "-shm"):
        try:
            os.unlink(_TEST_DB_PATH + suffix)
        except OSError:
            pass


@pytest.fixture(autouse=True)
def app_context(app):
    """Automatically provide app context for all tests"""
    with app.app_context():
        yield


class _FreshPrincipalClient(FlaskClient):
    """Test client that drops Flask-Login's cached principal before each request.

    The autouse app context is shared by every request in a test, so ``g`` would
    otherwise carry the previous request's user into the next one.
    """

    def open(self, *args, **kwargs):
        g.pop("_login_user", None)
        return super().open(*args, **kwargs)


@pytest.fixture
def client(app):
    """Create a test client for the Flask application"""
    app.test_client_class = _FreshPrincipalClient
    return app.test_client()


@pytest.fixture
def runner(app):
    """Create a test CLI runner for the Flask application"""
    return app.test_cli_runner()


@pytest.fixture
def admin_headers():
    return dict(ADMIN_HEADERS)


@pytest.fixture
def reference_data(app):
    """Catalog locations and skills used by most event tests"""
    locations = [
        Location(venue_name="Community Center", address="123 Main St"),
        Location(venue_name="City Park", address="456 Oak Ave"),
        Location(venue_name="Public Library", address="789 Elm St"),
    ]
    skills = [
        Skill(name="organizing", description="Planning and coordinating"),
        Skill(name="cooking", description="Preparing meals"),
        Skill(name="first aid", description="Basic first aid"),
        Skill(name="driving", description="Transporting people or goods"),
    ]
    db.session.add_all(locations + skills)
    db.session.commit()
    return {
        "locations": {location.venue_name: location.id for location in locations},
        "skills": {skill.name: skill.id for skill in skills},
    }


@pytest.fixture
def volunteers(app, reference_data):
    """Two volunteers with skills and one admin account"""
    alice = User(
        username="alice",
        email="alice@impactnow.org",
        phone_number="555-0101",
        role=ROLE_VOLUNTEER,
        first_name="Alice",
        last_name="Jones",
        location="Springfield",
    )
    bob = User(
        username="bob",
        email="bob@impactnow.org",
        phone_number="555-0102",
        role=ROLE_VOLUNTEER,
        first_name="Bob",
        last_name="Smith",
    )
    admin = User(username="admin", email="admin@impactnow.org", role=ROLE_ADMIN)
    db.session.add_all([alice, bob, admin])
    db.session.flush()
    db.session.add_all(
        [
            UserSkill(user_id=alice.id, skill_id=reference_data["skills"]["organizing"], proficiency_level="advanced"),
            UserSkill(user_id=alice.id, skill_id=reference_data["skills"]["cooking"]),
            UserSkill(user_id=bob.id, skill_id=reference_data["skills"]["driving"]),
        ]
    )
    db.session.commit()
    return {"alice": alice.id, "bob": bob.id, "admin": admin.id}


def make_event(location_id, *, name="Community Food Drive", days_ahead=7, max_volunteers=10, urgency="High",
               skill_ids=(), description="Collect and sort donations"):
    event = Event(
        name=name,
        description=description,
        date=date.today() + timedelta(days=days_ahead),
        max_volunteers=max_volunteers,
        urgency=urgency,
        location_id=location_id,
    )
    db.session.add(event)
    db.session.flush()
    for skill_id in skill_ids:
        db.session.add(EventSkill(event_id=event.id, skill_id=skill_id))
    db.session.commit()
    return event.id


@pytest.fixture
def sample_event(app, reference_data):
    """A future event at the Community Center requiring organizing"""
    return make_event(
        reference_data["locations"]["Community Center"],
        skill_ids=[reference_data["skills"]["organizing"]],
    )


@pytest.fixture
def event_with_dependents(app, reference_data, volunteers, sample_event):
    """The sample event with a second skill, one notification and two history rows"""
    db.session.add_all(
        [
            EventSkill(event_id=sample_event, skill_id=reference_data["skills"]["cooking"]),
            Notification(event_id=sample_event, user_id=volunteers["alice"], message="See you there"),
            VolunteeringHistory(event_id=sample_event, user_id=volunteers["alice"], checkin=True),
            VolunteeringHistory(event_id=sample_event, user_id=volunteers["bob"], checkin=False),
        ]
    )
    db.session.commit()
    return sample_event


def pytest_configure(config):
    """Configure pytest with custom markers and ensure testing environment"""
    os.environ["FLASK_ENV"] = "testing"

    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers"""
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(pytest.mark.slow)
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
