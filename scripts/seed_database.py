# scripts/seed_database.py
"""
Database seeding script.
Populates the database with sample volunteers, events, matches and
notifications for development and manual testing.
"""

import argparse
import os
import random
import sys
from datetime import date, timedelta

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from faker import Faker

from app import app

fake = Faker()
from impactnow.cli import seed_reference_data
from impactnow.models import (
    ROLE_ADMIN,
    ROLE_VOLUNTEER,
    Event,
    EventSkill,
    Notification,
    Skill,
    User,
    UserSkill,
    VolunteeringHistory,
    db,
)
from impactnow.services.event_workflow import EventWorkflowError, EventWorkflowService
from impactnow.services.match_service import MatchError, MatchService

PROFICIENCY_LEVELS = ["beginner", "intermediate", "advanced"]

# Statistics tracking
stats = {
    "admin_users": 0,
    "volunteers": 0,
    "events": 0,
    "matches": 0,
    "notifications": 0,
    "errors": [],
}

EVENTS_DATA = [
    {
        "name": "Community Food Drive",
        "description": "Collect, sort and pack donated food for local families.",
        "location": "Downtown Food Bank",
        "days_from_today": 7,
        "volunteersNeeded": 12,
        "urgency": "High",
        "skills": ["organizing", "heavy lifting"],
    },
    {
        "name": "Park Cleanup Day",
        "description": "Pick up litter and clear trails along the river path.",
        "location": "City Park",
        "days_from_today": 14,
        "volunteersNeeded": 20,
        "urgency": "Medium",
        "skills": ["heavy lifting"],
    },
    {
        "name": "After School Reading Hour",
        "description": "Read with elementary students and help with homework.",
        "location": "Public Library",
        "days_from_today": 3,
        "volunteersNeeded": 6,
        "urgency": "Low",
        "skills": ["teaching", "communication"],
    },
    {
        "name": "Shelter Dinner Service",
        "description": "Prepare and serve an evening meal for shelter guests.",
        "location": "Riverside Shelter",
        "days_from_today": 5,
        "volunteersNeeded": 8,
        "urgency": "High",
        "skills": ["cooking", "first aid"],
    },
    {
        "name": "Neighborhood Health Fair",
        "description": "Staff information tables and help visitors find services.",
        "location": "Community Center",
        "days_from_today": -10,
        "volunteersNeeded": 10,
        "urgency": "Medium",
        "skills": ["communication", "first aid", "organizing"],
    },
    {
        "name": "Senior Grocery Delivery",
        "description": "Deliver grocery orders to homebound seniors.",
        "location": "Downtown Food Bank",
        "days_from_today": -3,
        "volunteersNeeded": 5,
        "urgency": "Critical",
        "skills": ["driving"],
    },
]


def clear_database():
    """Clear all seeded data from the database"""
    print("Clearing existing data...")
    try:
        # Delete in reverse order of dependencies
        Notification.query.delete()
        VolunteeringHistory.query.delete()
        EventSkill.query.delete()
        Event.query.delete()
        UserSkill.query.delete()
        User.query.delete()
        db.session.commit()
        print("✅ Database cleared")
    except Exception as e:
        db.session.rollback()
        print(f"❌ Error clearing database: {str(e)}")
        sys.exit(1)


def seed_admin_user(username, email, dry_run=False):
    """Create the admin account if it does not exist"""
    print("\n📝 Seeding admin user...")
    if User.find_by_username(username):
        print(f"  ⏭️  Admin user '{username}' already exists")
        return
    if dry_run:
        print(f"  Would create admin user: {username} ({email})")
        return

    admin, error = User.safe_create(
        username=username,
        email=email,
        role=ROLE_ADMIN,
        first_name="Site",
        last_name="Administrator",
    )
    if error:
        stats["errors"].append(f"Admin user {username}: {error}")
        print(f"  ❌ Error creating admin user: {error}")
        return
    stats["admin_users"] += 1
    print(f"  ✅ Created admin user: {admin.username}")


def seed_volunteers(count, dry_run=False):
    """Create volunteers with Faker profiles and two to three catalog skills each"""
    print(f"\n📝 Seeding {count} volunteers...")
    skills = Skill.query.order_by(Skill.name).all()
    volunteers = []

    for _ in range(count):
        first_name = fake.first_name()
        last_name = fake.last_name()
        username = f"{first_name}.{last_name}{fake.random_int(1, 999)}".lower()
        email = f"{username}@example.org"

        if dry_run:
            print(f"  Would create volunteer: {first_name} {last_name} ({email})")
            continue
        if User.find_by_username(username) or User.find_by_email(email):
            continue

        try:
            volunteer = User(
                username=username,
                email=email,
                phone_number=fake.numerify("555-####"),
                role=ROLE_VOLUNTEER,
                first_name=first_name,
                last_name=last_name,
                location=fake.city(),
            )
            db.session.add(volunteer)
            db.session.flush()
            for skill in random.sample(skills, k=min(len(skills), random.randint(2, 3))):
                db.session.add(
                    UserSkill(
                        user_id=volunteer.id,
                        skill_id=skill.id,
                        proficiency_level=random.choice(PROFICIENCY_LEVELS),
                    )
                )
            db.session.commit()
            volunteers.append(volunteer)
            stats["volunteers"] += 1
        except Exception as e:
            db.session.rollback()
            stats["errors"].append(f"Volunteer {username}: {str(e)}")
            print(f"  ❌ Error creating volunteer {username}: {str(e)}")

    print(f"  ✅ Created {stats['volunteers']} volunteers")
    return volunteers


def seed_events(dry_run=False):
    """Create events through the event workflow so skills are linked the same way the API links them"""
    print("\n📝 Seeding events...")
    service = EventWorkflowService()
    event_ids = []

    for event_data in EVENTS_DATA:
        payload = {key: value for key, value in event_data.items() if key != "days_from_today"}
        payload["date"] = (date.today() + timedelta(days=event_data["days_from_today"])).isoformat()

        if dry_run:
            print(f"  Would create event: {payload['name']} on {payload['date']} at {payload['location']}")
            continue

        try:
            result = service.create_event(payload)
            event_ids.append(result.event.id)
            stats["events"] += 1
            print(f"  ✅ Created event: {result.event.name} ({', '.join(result.event.skills) or 'no skills'})")
            if result.skipped_skills:
                print(f"  ⚠️  Skipped unknown skills: {', '.join(result.skipped_skills)}")
        except EventWorkflowError as e:
            stats["errors"].append(f"Event {payload['name']}: {str(e)}")
            print(f"  ❌ Error creating event {payload['name']}: {str(e)}")

    return event_ids


def seed_matches(volunteers, event_ids, dry_run=False):
    """Sign volunteers up for events and mark past events as checked in"""
    print("\n📝 Seeding matches...")
    if dry_run or not volunteers or not event_ids:
        print("  Skipping matches")
        return

    service = MatchService()
    for volunteer in volunteers:
        for event_id in random.sample(event_ids, k=min(len(event_ids), random.randint(1, 3))):
            try:
                service.create_match(volunteer.username, event_id, notify=True)
                stats["matches"] += 1
                stats["notifications"] += 1
            except MatchError as e:
                # Full events and duplicates are expected with random picks
                print(f"  ⏭️  {volunteer.username} -> event {event_id}: {e.message}")

    past_event_ids = [event.id for event in Event.query.filter(Event.date < date.today()).all()]
    if past_event_ids:
        VolunteeringHistory.query.filter(VolunteeringHistory.event_id.in_(past_event_ids)).update(
            {VolunteeringHistory.checkin: True}, synchronize_session=False
        )
        db.session.commit()

    print(f"  ✅ Created {stats['matches']} matches")


def seed_database(clear=False, volunteer_count=25, admin_username="admin", admin_email="admin@example.org", dry_run=False):
    """Main function to seed the database"""
    print("=" * 60)
    print("Database Seeding Script")
    print("=" * 60)

    if dry_run:
        print("\n⚠️  DRY RUN MODE - No changes will be made to the database\n")

    with app.app_context():
        db.create_all()

        if clear and not dry_run:
            clear_database()

        if not dry_run:
            seed_reference_data()

        seed_admin_user(admin_username, admin_email, dry_run)
        volunteers = seed_volunteers(volunteer_count, dry_run)
        event_ids = seed_events(dry_run)
        seed_matches(volunteers, event_ids, dry_run)

        # Print summary
        print("\n" + "=" * 60)
        print("Seeding Summary")
        print("=" * 60)
        print(f"Admin Users: {stats['admin_users']}")
        print(f"Volunteers: {stats['volunteers']}")
        print(f"Events: {stats['events']}")
        print(f"Matches: {stats['matches']}")
        print(f"Notifications: {stats['notifications']}")

        if stats["errors"]:
            print(f"\n⚠️  Errors encountered: {len(stats['errors'])}")
            for error in stats["errors"][:10]:  # Show first 10 errors
                print(f"  - {error}")
            if len(stats["errors"]) > 10:
                print(f"  ... and {len(stats['errors']) - 10} more errors")
        else:
            print("\n✅ Seeding completed successfully!")


def main():
    """Command-line interface"""
    parser = argparse.ArgumentParser(description="Seed the database with sample data")
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Clear existing data before seeding",
    )
    parser.add_argument(
        "--volunteers",
        type=int,
        default=25,
        help="Number of volunteers to generate (default: 25)",
    )
    parser.add_argument(
        "--admin-username",
        default="admin",
        help="Admin username (default: admin)",
    )
    parser.add_argument(
        "--admin-email",
        default="admin@example.org",
        help="Admin email (default: admin@example.org)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be created without actually creating",
    )

    args = parser.parse_args()

    seed_database(
        clear=args.clear,
        volunteer_count=args.volunteers,
        admin_username=args.admin_username,
        admin_email=args.admin_email,
        dry_run=args.dry_run,
    )


if __name__ == "__main__":
    main()
