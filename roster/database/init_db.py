"""
Database initialization and seeding.

This script:
- Creates all database tables
- Optionally seeds sample teams and members
- Can reset the database (drop and recreate)

Usage:
    # Create tables
    python -m roster.database.init_db

    # Reset database (drops all tables and recreates)
    python -m roster.database.init_db --reset

    # Add sample data for testing
    python -m roster.database.init_db --sample-data
"""

import argparse
import logging

from roster.core.exceptions import ConstraintViolationError
from roster.core.logging import configure_logging
from roster.database.session import engine, get_db_context, create_all_tables, drop_all_tables
from roster.models import Member, Team
from roster.repositories import AuditHook, MemberRepository, TeamRepository, Sort

logger = logging.getLogger(__name__)

SEED_ACTOR = "init_db"

SAMPLE_TEAMS = ["teamA", "teamB"]

# (username, age, team name)
SAMPLE_MEMBERS = [
    ("member1", 10, "teamA"),
    ("member2", 20, "teamA"),
    ("member3", 30, "teamB"),
    ("member4", 40, "teamB"),
]


def create_tables(reset: bool = False) -> None:
    """
    Create all database tables.

    Args:
        reset: If True, drop existing tables first
    """
    if reset:
        print("🗑️  Dropping existing tables...")
        drop_all_tables(engine)
        print("✅ Tables dropped")

    print("📊 Creating database tables...")
    create_all_tables(engine)
    print("✅ Tables created")


def seed_sample_data() -> None:
    """
    Seed two teams and four members.

    Rows that already exist (matched by name) are skipped, so running
    this twice is harmless.
    """
    print("\n🌱 Seeding sample data...")
    hooks = [AuditHook(actor=SEED_ACTOR)]

    with get_db_context() as db:
        teams = TeamRepository(db, hooks=hooks)
        members = MemberRepository(db, hooks=hooks)

        by_name = {}
        for name in SAMPLE_TEAMS:
            team = teams.find_one_by_name(name)
            if team:
                print(f"  ⏭️  Team '{name}' already exists (skipping)")
            else:
                team = teams.save(Team(name=name))
                print(f"  ✅ Created team: {team!r}")
            by_name[name] = team

        for username, age, team_name in SAMPLE_MEMBERS:
            if members.find_by_username(username):
                print(f"  ⏭️  Member '{username}' already exists (skipping)")
                continue
            try:
                member = members.save(Member(username, age, by_name[team_name]))
            except ConstraintViolationError:
                logger.exception("Could not seed member %s", username)
                raise
            print(f"  ✅ Created member: {member!r}")

    print("✅ Sample data seeded")


def print_database_status() -> None:
    """Print current database status and counts."""
    print("\n" + "=" * 60)
    print("📊 Database Status")
    print("=" * 60)

    with get_db_context() as db:
        teams = TeamRepository(db)
        members = MemberRepository(db)

        print(f"  Teams:   {teams.count()}")
        print(f"  Members: {members.count()}")

        listed = members.find_all(sort=Sort.by("username"), with_relations=("team",))
        if listed:
            print("\n  Members:")
            for member in listed:
                team_name = member.team.name if member.team else "-"
                print(f"    • {member} [{team_name}]")

    print("=" * 60)


def initialize_database(reset: bool = False, sample_data: bool = False) -> None:
    """
    Initialize the database.

    Args:
        reset: Drop existing tables before creating
        sample_data: Add sample data for testing
    """
    print("=" * 60)
    print("🗄️  Database Initialization")
    print("=" * 60)

    create_tables(reset=reset)

    if sample_data:
        seed_sample_data()

    print_database_status()

    print("\n✅ Database initialization complete!")


def main(argv=None):
    """Main entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description="Initialize and seed the roster database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create tables
  python -m roster.database.init_db

  # Reset database (drop all tables and recreate)
  python -m roster.database.init_db --reset

  # Full reset with sample data
  python -m roster.database.init_db --reset --sample-data
        """
    )

    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop existing tables before creating (WARNING: deletes all data!)"
    )

    parser.add_argument(
        "--sample-data",
        action="store_true",
        help="Add sample teams and members"
    )

    parser.add_argument(
        "--yes",
        action="store_true",
        help="Skip the confirmation prompt for --reset"
    )

    args = parser.parse_args(argv)
    configure_logging()

    if args.reset and not args.yes:
        print("⚠️  WARNING: This will DELETE ALL DATA in the database!")
        response = input("Are you sure? Type 'yes' to continue: ")
        if response.lower() != 'yes':
            print("❌ Aborted")
            return

    initialize_database(reset=args.reset, sample_data=args.sample_data)


if __name__ == "__main__":
    main()
