import logging
import secrets
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request
from passlib.context import CryptContext
from sqlalchemy.orm import Session, joinedload
from starlette.concurrency import run_in_threadpool

from config import CREDENTIAL_PROVIDER, SESSION_COOKIE_NAME, SESSION_TTL
from models import Account, User, UserSession

logger = logging.getLogger("dashboard.auth")

# pbkdf2_sha256 ships with passlib itself, so no separate bcrypt backend is needed.
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    """
    Hash a plain-text password using PBKDF2-SHA256.
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed: str) -> bool:
    """
    Verify a candidate password against a stored hash.
    """
    return pwd_context.verify(plain_password, hashed)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def normalize_email(email: str) -> str:
    return email.strip().lower()


def create_user(db: Session, *, name: str, email: str, password: str, role: Optional[str]) -> User:
    """Create a user together with its ``credential`` account."""
    normalized = normalize_email(email)
    user = User(name=name.strip(), email=normalized, role=role)
    db.add(user)
    db.flush()
    db.add(
        Account(
            user_id=user.id,
            provider_id=CREDENTIAL_PROVIDER,
            account_id=normalized,
            password_hash=hash_password(password),
        )
    )
    db.commit()
    db.refresh(user)
    return user


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user when ``password`` matches its credential account."""
    user = db.query(User).filter(User.email == normalize_email(email)).first()
    if user is None:
        return None
    account = (
        db.query(Account)
        .filter(Account.user_id == user.id, Account.provider_id == CREDENTIAL_PROVIDER)
        .first()
    )
    if account is None or not account.password_hash:
        return None
    if not verify_password(password, account.password_hash):
        return None
    return user


def create_session(db: Session, user: User) -> UserSession:
    session = UserSession(
        token=secrets.token_urlsafe(32),
        user_id=user.id,
        expires_at=_utcnow() + SESSION_TTL,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def lookup_session(db: Session, token: str) -> Optional[UserSession]:
    """
    Resolve a session token. Unknown tokens give ``None``; expired
    sessions are deleted and also give ``None``.
    """
    session = (
        db.query(UserSession)
        .options(joinedload(UserSession.user))
        .filter(UserSession.token == token)
        .first()
    )
    if session is None:
        return None
    if _as_utc(session.expires_at) <= _utcnow():
        logger.info("Session for user %s expired", session.user_id)
        db.delete(session)
        db.commit()
        return None
    return session


def destroy_session(db: Session, token: str) -> None:
    db.query(UserSession).filter(UserSession.token == token).delete()
    db.commit()


def session_from_request(request: Request, db: Session) -> Optional[UserSession]:
    """Return the session named by the request's cookie, if it is still valid."""
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        return None
    return lookup_session(db, token)


async def get_current_session(request: Request, db: Session) -> Optional[UserSession]:
    """Same as :func:`session_from_request`, with the lookup run in the threadpool."""
    return await run_in_threadpool(session_from_request, request, db)
