import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import STAFF_ROLES, get_db, require_role, require_user_id
from app.schemas.emergency import EmergencyCreate, EmergencyResponse
from app.services.emergency_service import EmergencyService

router = APIRouter()


@router.post("/", response_model=EmergencyResponse, status_code=201)
async def broadcast_emergency(
    payload: EmergencyCreate,
    db: AsyncSession = Depends(get_db),
    user_id: uuid.UUID = Depends(require_user_id),
):
    """Broadcast an emergency to every staff member watching the open queue."""
    return await EmergencyService(db).broadcast(payload, user_id=user_id)


@router.get("/mine", response_model=list[EmergencyResponse])
async def my_emergencies(
    db: AsyncSession = Depends(get_db),
    user_id: uuid.UUID = Depends(require_user_id),
):
    return await EmergencyService(db).list_for_user(user_id)


@router.get("/open", response_model=list[EmergencyResponse])
async def open_emergencies(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_role(STAFF_ROLES)),
):
    return await EmergencyService(db).list_open()


@router.post("/{request_id}/resolve", response_model=EmergencyResponse)
async def resolve_emergency(
    request_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_role(STAFF_ROLES)),
):
    return await EmergencyService(db).resolve(request_id)
