import sys
from typing import Callable, Optional, TextIO

from sqlalchemy.orm import Session

from database import SessionLocal
from models import Account, User, UserSession

# Dependents first: sessions and accounts both reference users.
CLEAR_ORDER = (
    (UserSession, "sessions"),
    (Account, "accounts"),
    (User, "users"),
)


def clear_auth_data(db: Session, out: Optional[TextIO] = None) -> None:
    """
    Delete every session, account and user, in that order.

    Each table is emptied and committed before the next one is touched,
    so a failure leaves the remaining tables as they were.
    """
    out = out or sys.stdout
    for model, label in CLEAR_ORDER:
        deleted = db.query(model).delete()
        db.commit()
        print(f"Deleted all {label} ({deleted} rows).", file=out)


def main(session_factory: Callable[[], Session] = SessionLocal) -> int:
    """
    Wipe all authentication data from the database.

    This is a one-off maintenance script: there is no confirmation prompt
    and no dry-run. Run ``python seed_users.py`` afterwards to recreate the
    default logins.
    """
    db = session_factory()
    try:
        print("Clearing all authentication data...")
        clear_auth_data(db)
    except Exception as exc:
        print(f"Error: failed to clear authentication data: {exc}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print("\nDatabase cleaned successfully.")
    print("Now run: python seed_users.py")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
