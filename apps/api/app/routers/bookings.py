import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import STAFF_ROLES, get_db, require_role, require_user_id
from app.schemas.booking import BookingCreate, BookingResponse
from app.services.booking_service import BookingService

router = APIRouter()


@router.post("/", response_model=BookingResponse, status_code=201)
async def create_booking(
    payload: BookingCreate,
    db: AsyncSession = Depends(get_db),
    user_id: uuid.UUID = Depends(require_user_id),
):
    return await BookingService(db).create_booking(payload, user_id=user_id)


@router.get("/mine", response_model=list[BookingResponse])
async def my_bookings(
    db: AsyncSession = Depends(get_db),
    user_id: uuid.UUID = Depends(require_user_id),
):
    return await BookingService(db).list_for_user(user_id)


@router.get("/pending", response_model=list[BookingResponse])
async def pending_bookings(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_role(STAFF_ROLES)),
):
    return await BookingService(db).list_pending()


@router.post("/{booking_id}/confirm", response_model=BookingResponse)
async def confirm_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_role(STAFF_ROLES)),
):
    """Confirm a pending booking and take one bed of its type out of availability."""
    return await BookingService(db).confirm_booking(booking_id)


@router.post("/{booking_id}/reject", response_model=BookingResponse)
async def reject_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_role(STAFF_ROLES)),
):
    return await BookingService(db).reject_booking(booking_id)
