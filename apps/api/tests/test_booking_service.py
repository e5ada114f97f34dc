import asyncio
import uuid

import pytest
from fastapi import HTTPException

from app.models.booking import BookingStatus
from app.models.hospital import BedType, Hospital
from app.schemas.booking import BookingCreate
from app.services.booking_service import BookingService
from app.services.change_feed import ChangeFeed
from tests.support import add_hospital, open_db

PATIENT = uuid.UUID("7b0f6a52-9a57-4d6a-8d2e-3f1c1c8a0e11")


def _request(hospital_id, bed_type=BedType.ICU) -> BookingCreate:
    return BookingCreate(
        hospital_id=hospital_id,
        patient_name="Ravi Kumar",
        age=54,
        condition="Low SpO2",
        contact_phone="+91 98200 00000",
        bed_type=bed_type,
    )


async def _beds(factory, hospital_id, bed_type: BedType) -> int:
    async with factory() as db:
        hospital = await db.get(Hospital, hospital_id)
        return hospital.available_beds(bed_type)


def test_confirm_decrements_available_beds(db_url):
    feed = ChangeFeed()
    events = []
    feed.subscribe("hospitals", events.append)

    async def go():
        engine, factory = await open_db(db_url)
        hospital = await add_hospital(factory)
        async with factory() as db:
            svc = BookingService(db, feed=feed)
            booking = await svc.create_booking(_request(hospital.id), user_id=PATIENT)
            assert booking.status == BookingStatus.Pending
            confirmed = await svc.confirm_booking(booking.id)
        beds = await _beds(factory, hospital.id, BedType.ICU)
        await engine.dispose()
        return confirmed, beds

    confirmed, beds = asyncio.run(go())
    assert confirmed.status == BookingStatus.Confirmed
    assert beds == 3
    assert events[-1]["row"]["bed_av_icu"] == 3


def test_confirm_without_free_bed_changes_nothing(db_url):
    async def go():
        engine, factory = await open_db(db_url)
        hospital = await add_hospital(factory, bed_av_oxygen=0)
        async with factory() as db:
            svc = BookingService(db, feed=ChangeFeed())
            booking = await svc.create_booking(_request(hospital.id, BedType.Oxygen), user_id=PATIENT)
            booking_id = booking.id
            with pytest.raises(HTTPException) as exc:
                await svc.confirm_booking(booking_id)
            pending_ids = [b.id for b in await svc.list_pending()]
        beds = await _beds(factory, hospital.id, BedType.Oxygen)
        await engine.dispose()
        return exc.value, pending_ids, booking_id, beds

    error, pending_ids, booking_id, beds = asyncio.run(go())
    assert error.status_code == 409
    assert pending_ids == [booking_id]
    assert beds == 0


def test_booking_can_only_be_decided_once(db_url):
    async def go():
        engine, factory = await open_db(db_url)
        hospital = await add_hospital(factory)
        async with factory() as db:
            svc = BookingService(db, feed=ChangeFeed())
            booking = await svc.create_booking(_request(hospital.id), user_id=PATIENT)
            # a refused decision rolls back and expires loaded rows
            booking_id = booking.id
            await svc.confirm_booking(booking_id)
            with pytest.raises(HTTPException) as again:
                await svc.confirm_booking(booking_id)
            with pytest.raises(HTTPException) as reject:
                await svc.reject_booking(booking_id)
        beds = await _beds(factory, hospital.id, BedType.ICU)
        await engine.dispose()
        return again.value.status_code, reject.value.status_code, beds

    assert asyncio.run(go()) == (409, 409, 3)


def test_reject_leaves_beds_untouched(db_url):
    async def go():
        engine, factory = await open_db(db_url)
        hospital = await add_hospital(factory)
        async with factory() as db:
            svc = BookingService(db, feed=ChangeFeed())
            booking = await svc.create_booking(_request(hospital.id, BedType.General), user_id=PATIENT)
            rejected = await svc.reject_booking(booking.id)
            mine = await svc.list_for_user(PATIENT)
        beds = await _beds(factory, hospital.id, BedType.General)
        await engine.dispose()
        return rejected.status, [b.status for b in mine], beds

    assert asyncio.run(go()) == (BookingStatus.Rejected, [BookingStatus.Rejected], 15)


def test_unknown_hospital_or_booking_is_not_found(db_url):
    async def go():
        engine, factory = await open_db(db_url)
        async with factory() as db:
            svc = BookingService(db, feed=ChangeFeed())
            with pytest.raises(HTTPException) as no_hospital:
                await svc.create_booking(_request(uuid.uuid4()), user_id=PATIENT)
            with pytest.raises(HTTPException) as no_booking:
                await svc.confirm_booking(uuid.uuid4())
        await engine.dispose()
        return no_hospital.value.status_code, no_booking.value.status_code

    assert asyncio.run(go()) == (404, 404)
