"""Seed script to create users for local development/testing.

Usage:
  python scripts/seed_users.py
  python scripts/seed_users.py --email lead@example.com --password s3cret --name "Lead Interviewer"
  python scripts/seed_users.py --role candidate --email jane@example.com --password s3cret
"""

import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import argparse
from sqlmodel import Session

from config.settings import settings
from models.user import Role
from services.auth_service import AuthService
from services.exceptions import DuplicateEmailError
from utils.database import get_engine, init_db

DEFAULT_NAME = "Interviewer"
DEFAULT_EMAIL = "interviewer@example.com"
DEFAULT_PASSWORD = "change-me"


def seed_user(name: str, email: str, password: str, role: str) -> bool:
    if not settings.DATABASE_URL:
        print("ERROR: DATABASE_URL not set in environment/.env", file=sys.stderr)
        return False

    engine = get_engine()
    init_db(engine)

    try:
        with Session(engine) as db:
            user = AuthService(db, settings).signup(name=name, email=email, password=password, role=role)
            print(f"✅ Created {user.role} '{user.name}' ({user.email}) id={user.id}")
            return True
    except DuplicateEmailError:
        print(f"User {email} already exists")
        return True
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return False


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed a user for local dev/testing")
    parser.add_argument("--name", default=DEFAULT_NAME)
    parser.add_argument("--email", default=DEFAULT_EMAIL)
    parser.add_argument("--password", default=DEFAULT_PASSWORD)
    parser.add_argument(
        "--role",
        default=Role.INTERVIEWER.value,
        choices=[r.value for r in Role],
        help="Role of the new user (default: interviewer)",
    )
    args = parser.parse_args()

    ok = seed_user(name=args.name, email=args.email, password=args.password, role=args.role)
    sys.exit(0 if ok else 1)
