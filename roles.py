"""Role decoding and the dashboard landing decision."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from models import UserSession


class Role(str, Enum):
    ADMIN = "ADMIN"
    DIRECTION = "DIRECTION"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "Role":
        """Decode a stored role string, case-insensitively.

        Anything that is not ``ADMIN`` or ``DIRECTION`` (including ``None``
        and the empty string) is :attr:`OTHER`.
        """
        normalized = (raw or "").upper()
        if normalized == cls.ADMIN.value:
            return cls.ADMIN
        if normalized == cls.DIRECTION.value:
            return cls.DIRECTION
        return cls.OTHER


class Destination(str, Enum):
    LOGIN = "/login"
    ADMIN_DASHBOARD = "/dashboard/admin"
    DIRECTION_DASHBOARD = "/dashboard/direction"


# Roles allowed past the dashboard guard; everyone else is sent to /unauthorized.
DASHBOARD_ROLES = frozenset({Role.ADMIN, Role.DIRECTION})


def session_role(session: UserSession) -> Role:
    return Role.parse(session.user.role)


def landing_destination(session: Optional[UserSession]) -> Destination:
    """Pick where ``/dashboard`` sends the browser.

    Without a session the answer is the login page. Admins land on the admin
    dashboard; every other role, known or not, lands on the direction
    dashboard.
    """
    if session is None:
        return Destination.LOGIN
    role = session_role(session)
    if role is Role.ADMIN:
        return Destination.ADMIN_DASHBOARD
    if role is Role.DIRECTION:
        return Destination.DIRECTION_DASHBOARD
    return Destination.DIRECTION_DASHBOARD
