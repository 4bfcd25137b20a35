"""Request identity for the Ordering API.

Authentication happens upstream: the gateway verifies the session and
forwards the user id and role as headers. A request without a user id is
unauthenticated.
"""

from fastapi import Header
from pydantic import BaseModel

from ordering.errors import UnauthenticatedError
from ordering.shared.roles import Role


class Principal(BaseModel):
    user_id: str
    role: Role = Role.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


async def current_user(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Principal:
    """FastAPI dependency resolving the caller from the identity headers."""
    if not x_user_id or not x_user_id.strip():
        raise UnauthenticatedError("Authentication required")
    return Principal(user_id=x_user_id.strip(), role=Role.parse(x_user_role))
