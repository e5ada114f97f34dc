"""
Booking Service
Patients request beds; staff confirm or reject them.

Confirmation is one transaction: the booking must still be PENDING and the hospital
must have a free bed of the requested type. Both rows are locked, the bed count is
decremented and the booking marked CONFIRMED together, or nothing changes.
"""
import logging
import uuid
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking, BookingStatus
from app.models.hospital import Hospital
from app.schemas.booking import BookingCreate, BookingResponse
from app.schemas.hospital import HospitalResponse
from app.services.change_feed import ChangeFeed, change_feed

logger = logging.getLogger(__name__)


class BookingService:
    def __init__(self, db: AsyncSession, feed: ChangeFeed = change_feed):
        self.db = db
        self.feed = feed

    async def create_booking(self, payload: BookingCreate, user_id: uuid.UUID) -> Booking:
        hospital = await self.db.get(Hospital, payload.hospital_id)
        if not hospital:
            raise HTTPException(status_code=404, detail="Hospital not found")

        booking = Booking(**payload.model_dump(), user_id=user_id, status=BookingStatus.Pending)
        self.db.add(booking)
        await self.db.commit()
        await self.db.refresh(booking)
        logger.info(f"[Bookings] {booking.id} created for hospital {hospital.id} ({booking.bed_type.value})")
        self._publish("INSERT", booking)
        return booking

    async def list_for_user(self, user_id: uuid.UUID, limit: int = 50) -> list[Booking]:
        result = await self.db.execute(
            select(Booking)
            .where(Booking.user_id == user_id)
            .order_by(Booking.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_pending(self, limit: int = 100) -> list[Booking]:
        result = await self.db.execute(
            select(Booking)
            .where(Booking.status == BookingStatus.Pending)
            .order_by(Booking.created_at.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def _lock_pending(self, booking_id: uuid.UUID) -> Booking:
        result = await self.db.execute(
            select(Booking).where(Booking.id == booking_id).with_for_update()
        )
        booking = result.scalar_one_or_none()
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        if booking.status != BookingStatus.Pending:
            raise HTTPException(
                status_code=409,
                detail=f"Booking is already {booking.status.value}",
            )
        return booking

    async def confirm_booking(self, booking_id: uuid.UUID) -> Booking:
        try:
            booking = await self._lock_pending(booking_id)
            result = await self.db.execute(
                select(Hospital).where(Hospital.id == booking.hospital_id).with_for_update()
            )
            hospital: Optional[Hospital] = result.scalar_one_or_none()
            if not hospital:
                raise HTTPException(status_code=404, detail="Hospital not found")

            field = f"bed_av_{booking.bed_type.value}"
            available = hospital.available_beds(booking.bed_type)
            if available <= 0:
                raise HTTPException(
                    status_code=409,
                    detail=f"No {booking.bed_type.value} beds available at {hospital.name}",
                )
            setattr(hospital, field, available - 1)
            booking.status = BookingStatus.Confirmed
            await self.db.commit()
        except HTTPException:
            await self.db.rollback()
            raise

        await self.db.refresh(booking)
        await self.db.refresh(hospital)
        logger.info(f"[Bookings] {booking.id} confirmed; {field} now {available - 1}")
        self._publish("UPDATE", booking)
        self.feed.publish(
            "hospitals", "UPDATE", HospitalResponse.model_validate(hospital).model_dump(mode="json")
        )
        return booking

    async def reject_booking(self, booking_id: uuid.UUID) -> Booking:
        try:
            booking = await self._lock_pending(booking_id)
            booking.status = BookingStatus.Rejected
            await self.db.commit()
        except HTTPException:
            await self.db.rollback()
            raise
        await self.db.refresh(booking)
        logger.info(f"[Bookings] {booking.id} rejected")
        self._publish("UPDATE", booking)
        return booking

    def _publish(self, event: str, booking: Booking) -> None:
        row = BookingResponse.model_validate(booking).model_dump(mode="json")
        self.feed.publish("bookings", event, row)
