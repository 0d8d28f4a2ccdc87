from impactnow.cli import DEFAULT_LOCATIONS, DEFAULT_SKILLS, seed_reference_data
from impactnow.models import Location, Skill


class TestSeedReferenceData:
    """Test catalog seeding"""

    def test_seed_defaults(self):
        assert seed_reference_data() == (len(DEFAULT_LOCATIONS), len(DEFAULT_SKILLS))
        assert Location.find_by_venue("Community Center").address == "123 Main St"

    def test_seed_is_idempotent(self):
        seed_reference_data()
        assert seed_reference_data() == (0, 0)
        assert Skill.query.count() == len(DEFAULT_SKILLS)

    def test_custom_catalog(self):
        created = seed_reference_data(
            locations=[{"venue_name": "Gym", "address": "1 Court St"}], skills=[{"name": "coaching"}]
        )
        assert created == (1, 1)


class TestCliCommands:
    """Test flask CLI commands"""

    def test_seed_command(self, runner):
        result = runner.invoke(args=["seed-reference-data"])
        assert result.exit_code == 0
        assert f"Added {len(DEFAULT_LOCATIONS)} location(s) and {len(DEFAULT_SKILLS)} skill(s)." in result.output

    def test_init_db_command(self, runner):
        result = runner.invoke(args=["init-db"])
        assert result.exit_code == 0
        assert "Database tables created." in result.output
