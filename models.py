from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


class User(Base):
    """
    Dashboard user.

    ``role`` is stored as the raw string written by whoever created the
    user; it is decoded with :meth:`roles.Role.parse` where it is read.
    """

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("email", name="uq_user_email"),)

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(128), nullable=False)
    email = Column(String(256), nullable=False, index=True)
    role = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    accounts = relationship("Account", back_populates="user")
    sessions = relationship("UserSession", back_populates="user")


class Account(Base):
    """Link between a user and an identity provider (``credential`` for email/password)."""

    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint("provider_id", "account_id", name="uq_account_provider"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    provider_id = Column(String(64), nullable=False)
    account_id = Column(String(256), nullable=False)
    password_hash = Column(String(256), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="accounts")


class UserSession(Base):
    """Browser login session, identified by the token stored in the session cookie."""

    __tablename__ = "sessions"
    __table_args__ = (UniqueConstraint("token", name="uq_session_token"),)

    id = Column(Integer, primary_key=True, index=True)
    token = Column(String(128), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="sessions")
