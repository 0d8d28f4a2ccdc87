from unittest.mock import MagicMock

from sqlalchemy import create_engine, text

from impactnow.models import Location, Notification, User, db, enable_sqlite_pragmas


class TestUserModel:
    """Test User helpers"""

    def test_full_name_falls_back_to_username(self):
        assert User(username="sam", first_name="Sam", last_name="Lee").get_full_name() == "Sam Lee"
        assert User(username="sam").get_full_name() == "sam"

    def test_to_dict_includes_skills(self, volunteers):
        data = db.session.get(User, volunteers["alice"]).to_dict()
        assert data["fullName"] == "Alice Jones"
        assert data["phone"] == "555-0101"
        assert data["skills"] == ["cooking", "organizing"]

    def test_role_flags(self, volunteers):
        assert User.find_by_username("alice").is_volunteer
        assert not User.find_by_email("admin@impactnow.org").is_volunteer

    def test_safe_create_reports_duplicate(self, volunteers):
        user, error = User.safe_create(username="alice", email="other@impactnow.org")
        assert user is None
        assert error


class TestLocationModel:
    """Test Location helpers"""

    def test_display_name(self):
        assert Location(venue_name="City Park", address="456 Oak Ave").display_name == "City Park, 456 Oak Ave"
        assert Location(venue_name="City Park").display_name == "City Park"

    def test_find_by_venue(self, reference_data):
        assert Location.find_by_venue("City Park").id == reference_data["locations"]["City Park"]
        assert Location.find_by_venue("Nowhere") is None


class TestNotificationModel:
    def test_to_dict(self, event_with_dependents):
        notification = Notification.query.one()
        data = notification.to_dict()
        assert data["eventName"] == "Community Food Drive"
        assert data["username"] == "alice"
        assert data["message"] == "See you there"


class TestSqlitePragmas:
    """Test SQLite connection setup"""

    def test_pragmas_applied_once(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'pragmas.db'}")
        try:
            assert enable_sqlite_pragmas(engine) is True
            assert enable_sqlite_pragmas(engine) is False
            with engine.connect() as connection:
                assert connection.execute(text("PRAGMA journal_mode")).scalar() == "wal"
                assert connection.execute(text("PRAGMA foreign_keys")).scalar() == 1
        finally:
            engine.dispose()

    def test_other_backends_untouched(self):
        engine = MagicMock()
        engine.url.drivername = "postgresql+psycopg2"
        assert enable_sqlite_pragmas(engine) is False
