# scripts/init_database.py

"""
Database initialization script.
This script creates all tables and seeds the reference catalogs:
- Default locations (venue name and street address)
- Default skills that events can require and volunteers can list
"""

import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import app
from impactnow.cli import DEFAULT_LOCATIONS, DEFAULT_SKILLS, seed_reference_data
from impactnow.models import db


def init_database(drop=False):
    with app.app_context():
        if drop:
            print("Dropping existing tables...")
            db.drop_all()

        print("Creating database tables...")
        db.create_all()
        print("Database tables created")

        print("Creating default locations and skills...")
        locations_created, skills_created = seed_reference_data()
        print(f"Created {locations_created} location(s) and {skills_created} skill(s)")

        print("\nDatabase initialization complete!")
        print("\nCatalog locations:")
        for location in DEFAULT_LOCATIONS:
            print(f"  - {location['venue_name']}, {location['address']}")
        print("\nCatalog skills:")
        for skill in DEFAULT_SKILLS:
            print(f"  - {skill['name']}")

        print("\nNext steps:")
        print("  1. Load sample volunteers and events: python scripts/seed_database.py")
        print("  2. Start the API: flask --app app run")


def main():
    parser = argparse.ArgumentParser(description="Create tables and load reference data")
    parser.add_argument("--drop", action="store_true", help="Drop existing tables first")
    args = parser.parse_args()
    init_database(drop=args.drop)


if __name__ == "__main__":
    main()
