"""Roles attached to the identity that issues a command."""

from enum import Enum

from ordering.errors import ForbiddenError


class Role(Enum):
    CUSTOMER = "Customer"
    ADMIN = "Admin"

    @classmethod
    def parse(cls, value):
        """Case-insensitive lookup; unknown or missing roles fall back to Customer."""
        for member in cls:
            if value and member.value.lower() == str(value).strip().lower():
                return member
        return cls.CUSTOMER


def require_admin(actor_role, action):
    if Role.parse(actor_role) != Role.ADMIN:
        raise ForbiddenError(f"Only administrators can {action}")
