"""Management CLI commands."""

import argparse
import getpass
import sys

from flask import Flask
from intake import create_app, db


def init_db(app: Flask) -> None:
    """Initialize the database."""
    with app.app_context():
        app.logger.info("Database initialized successfully (schema managed by migrations)")


def drop_db(app: Flask, confirm: bool = False) -> None:
    """Drop all database tables."""
    if not confirm:
        response = input("Are you sure you want to drop all tables? [y/N]: ")
        if response.lower() != "y":
            print("Operation cancelled")
            return

    with app.app_context():
        db.drop_all()
        app.logger.info("Database dropped successfully")


def migrate(app: Flask) -> None:
    """Run database migrations."""
    from alembic.config import Config
    from alembic import command

    alembic_cfg = Config("alembic.ini")

    with app.app_context():
        command.upgrade(alembic_cfg, "head")
        print("Migrations completed successfully")


def create_migration(app: Flask, message: str) -> None:
    """Create a new migration."""
    from alembic.config import Config
    from alembic import command

    alembic_cfg = Config("alembic.ini")

    with app.app_context():
        command.revision(alembic_cfg, autogenerate=True, message=message)
        print(f"Migration created with message: {message}")


def stamp_db(app: Flask, revision: str = "head") -> None:
    """Stamp database with a specific migration version without running it."""
    from alembic.config import Config
    from alembic import command

    alembic_cfg = Config("alembic.ini")

    with app.app_context():
        command.stamp(alembic_cfg, revision)
        print(f"Database stamped with revision: {revision}")


def create_admin(app: Flask, email: str = None, name: str = None, password: str = None) -> None:
    """Create an admin account, prompting for missing values."""
    from intake.services.admin_auth_service import AdminAuthService

    email = email or input("Admin email: ").strip()
    name = name or input("Admin name: ").strip()
    password = password or getpass.getpass("Password: ")

    with app.app_context():
        try:
            admin = AdminAuthService.create_admin(email=email, password=password, name=name)
        except ValueError as e:
            print(f"Could not create admin: {e}")
            sys.exit(1)
        print(f"Admin created: {admin.email} (id={admin.id})")


def purge_invitations(app: Flask, argv) -> None:
    """Delete primary invitations by email, token or all."""
    from intake.services.maintenance_service import MaintenanceService

    parser = argparse.ArgumentParser(
        prog="manage.py purge-invitations",
        description="Delete primary invitations and their history",
    )
    parser.add_argument("--email", help="Delete invitations sent to this email")
    parser.add_argument("--token", help="Delete the invitation with this token")
    parser.add_argument("--all", action="store_true", help="Delete every invitation")
    parser.add_argument("--dry-run", action="store_true", help="Only report what would be deleted")
    parser.add_argument("--force", action="store_true", help="Do not ask for confirmation")
    args = parser.parse_args(argv)

    if not (args.all or args.email or args.token):
        parser.error("Provide at least one selector (--email, --token, or --all)")

    with app.app_context():
        invitations = MaintenanceService.find_invitations(
            email=args.email, token=args.token, all_records=args.all
        )
        print(f"Matched invitations: {len(invitations)}")

        if not invitations:
            print("No invitations matched the provided criteria. Nothing to delete.")
            return

        if args.dry_run:
            for invitation in invitations:
                print(f"  {invitation.id}  {invitation.email}  {invitation.status}")
            print("Dry run enabled. No invitations were deleted.")
            return

        if not args.force:
            answer = input(f"Delete {len(invitations)} invitation(s)? (yes/no): ")
            if answer.strip().lower() != "yes":
                print("Deletion cancelled.")
                return

        deleted = MaintenanceService.purge(invitations)
        print(f"Deleted {deleted} invitation(s)")


def purge_expired(app: Flask, dry_run: bool = False) -> None:
    """Delete expired invitations that were never completed."""
    from intake.services.maintenance_service import MaintenanceService

    with app.app_context():
        if dry_run:
            expired = MaintenanceService.find_expired()
            print(f"{len(expired)} expired invitation(s) would be deleted")
            return
        deleted = MaintenanceService.purge_expired()
        print(f"Deleted {deleted} expired invitation(s)")


def show_config() -> None:
    """Print the effective settings with secrets masked."""
    from config.settings import settings

    settings.display_config()


def send_reminders(app: Flask) -> None:
    """Send work tracker reminders now."""
    from intake.services.tracker_service import TrackerService

    with app.app_context():
        results = TrackerService.send_reminders()
        print(f"Reminders sent: {results['successful']}/{results['total']} (failed: {results['failed']})")


if __name__ == "__main__":
    app = create_app()

    commands = {
        "init": lambda: init_db(app),
        "drop": lambda: drop_db(app),
        "migrate": lambda: migrate(app),
        "create-migration": lambda: create_migration(app, sys.argv[2] if len(sys.argv) > 2 else "auto"),
        "stamp": lambda: stamp_db(app, sys.argv[2] if len(sys.argv) > 2 else "head"),
        "create-admin": lambda: create_admin(
            app,
            email=sys.argv[2] if len(sys.argv) > 2 else None,
            name=sys.argv[3] if len(sys.argv) > 3 else None,
        ),
        "purge-invitations": lambda: purge_invitations(app, sys.argv[2:]),
        "purge-expired": lambda: purge_expired(app, dry_run="--dry-run" in sys.argv[2:]),
        "send-reminders": lambda: send_reminders(app),
        "show-config": show_config,
    }

    if len(sys.argv) < 2:
        print("Usage: python manage.py <command>")
        print("\nCommands:")
        print("  init                - Initialize database")
        print("  drop                - Drop all tables")
        print("  migrate             - Run migrations")
        print("  create-migration    - Create new migration")
        print("  stamp               - Mark database as at specific revision")
        print("                        Usage: stamp [revision] (default: head)")
        print("\nAdmin Commands:")
        print("  create-admin        - Create an admin account")
        print("                        Usage: create-admin [email] [name]")
        print("\nMaintenance Commands:")
        print("  purge-invitations   - Delete invitations")
        print("                        Usage: purge-invitations [--email E] [--token T] [--all] [--dry-run] [--force]")
        print("  purge-expired       - Delete expired, never-completed invitations [--dry-run]")
        print("  send-reminders      - Send work tracker reminders now")
        print("  show-config         - Print effective settings (secrets masked)")
        sys.exit(1)

    command = sys.argv[1]
    if command not in commands:
        print(f"Unknown command: {command}")
        sys.exit(1)

    commands[command]()
