import sys
from collections import Counter
from typing import Callable, Dict, List

from sqlalchemy.orm import Session

from database import SessionLocal
from models import User


def role_counts(db: Session) -> Dict[str, int]:
    """Count users per raw role value; users without a role count as ``unknown``."""
    return dict(Counter(role or "unknown" for (role,) in db.query(User.role).all()))


def list_users(db: Session) -> List[User]:
    """All users, newest first."""
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def print_users(db: Session) -> int:
    """Print every user, newest first, followed by a per-role summary."""
    users = list_users(db)
    if not users:
        print("No users found in the database.")
        return 0

    print(f"Found {len(users)} user(s):\n")
    print(f"{'Email':<28} {'Name':<20} {'Role':<16}")
    for user in users:
        print(f"{user.email:<28} {(user.name or 'N/A'):<20} {(user.role or 'N/A'):<16}")

    print("\nUsers by role:")
    for role, count in sorted(role_counts(db).items()):
        print(f"  {role}: {count}")
    return len(users)


def main(session_factory: Callable[[], Session] = SessionLocal) -> int:
    db = session_factory()
    try:
        print_users(db)
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
