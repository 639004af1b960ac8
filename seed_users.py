import sys
from typing import Iterable, List

from sqlalchemy.orm import Session, sessionmaker

from auth import create_user, normalize_email
from config import SEED_USERS
from database import Base, SessionLocal
from models import User


def seed_users(db: Session, users: Iterable[dict] = SEED_USERS) -> List[User]:
    """Create the default dashboard logins, skipping emails that already exist."""
    created = []
    for data in users:
        email = normalize_email(data["email"])
        if db.query(User).filter(User.email == email).first() is not None:
            print(f"Skipped {email}: already exists.")
            continue
        user = create_user(
            db,
            name=data["name"],
            email=email,
            password=data["password"],
            role=data["role"],
        )
        print(f"Created {user.email} ({user.role})")
        created.append(user)
    return created


def main(session_factory: sessionmaker = SessionLocal) -> int:
    Base.metadata.create_all(bind=session_factory.kw["bind"])
    db = session_factory()
    try:
        seed_users(db)
    except Exception as exc:
        print(f"Error: failed to seed users: {exc}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print("\nLogin credentials:")
    for data in SEED_USERS:
        print(f"  {data['email']:<25} {data['password']}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
