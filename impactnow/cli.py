# impactnow/cli.py
"""
Flask CLI commands for database setup.
"""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from impactnow.models import Location, Skill, db

DEFAULT_LOCATIONS = [
    {"venue_name": "Community Center", "address": "123 Main St"},
    {"venue_name": "City Park", "address": "456 Oak Ave"},
    {"venue_name": "Public Library", "address": "789 Elm St"},
    {"venue_name": "Downtown Food Bank", "address": "12 Market St"},
    {"venue_name": "Riverside Shelter", "address": "300 River Rd"},
]

DEFAULT_SKILLS = [
    {"name": "organizing", "description": "Planning and coordinating people and supplies"},
    {"name": "cooking", "description": "Preparing and serving meals"},
    {"name": "teaching", "description": "Tutoring and leading workshops"},
    {"name": "first aid", "description": "Basic first aid and CPR"},
    {"name": "driving", "description": "Transporting people or goods"},
    {"name": "communication", "description": "Outreach, greeting and phone banking"},
    {"name": "heavy lifting", "description": "Moving boxes, furniture and equipment"},
]


def seed_reference_data(locations=None, skills=None) -> tuple[int, int]:
    """
    Insert catalog locations and skills that are not present yet.

    Returns ``(locations_created, skills_created)``.
    """
    locations_created = 0
    for location_data in locations if locations is not None else DEFAULT_LOCATIONS:
        if Location.find_by_venue(location_data["venue_name"]) is None:
            db.session.add(Location(**location_data))
            locations_created += 1

    skills_created = 0
    for skill_data in skills if skills is not None else DEFAULT_SKILLS:
        if Skill.query.filter_by(name=skill_data["name"]).first() is None:
            db.session.add(Skill(**skill_data))
            skills_created += 1

    db.session.commit()
    return locations_created, skills_created


@click.command("init-db")
@click.option("--drop", is_flag=True, help="Drop existing tables before creating them.")
@with_appcontext
def init_db_command(drop):
    """Create database tables."""
    if drop:
        click.confirm("This deletes all data. Continue?", abort=True)
        db.drop_all()
    db.create_all()
    click.echo("Database tables created.")


@click.command("seed-reference-data")
@with_appcontext
def seed_reference_data_command():
    """Load the default location and skill catalogs."""
    locations_created, skills_created = seed_reference_data()
    click.echo(f"Added {locations_created} location(s) and {skills_created} skill(s).")


def register_cli(app):
    app.cli.add_command(init_db_command)
    app.cli.add_command(seed_reference_data_command)
