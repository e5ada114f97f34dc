from fastapi import Depends, HTTPException, Header
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List
from app.database import AsyncSessionLocal
import uuid

PATIENT = "patient"
STAFF = "staff"
ADMIN = "admin"

ANY_ROLE = [PATIENT, STAFF, ADMIN]
STAFF_ROLES = [STAFF, ADMIN]


async def get_db() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


class CurrentUser:
    """Identity forwarded by the auth gateway. Patients may be anonymous (no user id)."""

    def __init__(self, user_id: str, role: str):
        self.id = user_id
        self.role = role

    @property
    def uuid(self) -> Optional[uuid.UUID]:
        try:
            return uuid.UUID(self.id)
        except (ValueError, AttributeError):
            return None


def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> CurrentUser:
    # Sessions live in the upstream auth gateway; it forwards identity as headers
    if not x_user_role:
        raise HTTPException(status_code=401, detail="Not authenticated")
    if x_user_role not in ANY_ROLE:
        raise HTTPException(status_code=401, detail=f"Unknown role '{x_user_role}'")
    return CurrentUser(user_id=x_user_id or "", role=x_user_role)


def require_role(allowed_roles: List[str]):
    def dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed_roles:
            raise HTTPException(
                status_code=403,
                detail=f"Role '{current_user.role}' is not authorized for this action.",
            )
        return current_user

    return dependency


def require_user_id(current_user: CurrentUser = Depends(get_current_user)) -> uuid.UUID:
    """Bookings and emergencies are tied to an account; anonymous callers get a 400."""
    user_id = current_user.uuid
    if user_id is None:
        raise HTTPException(status_code=400, detail="A valid X-User-Id is required")
    return user_id
