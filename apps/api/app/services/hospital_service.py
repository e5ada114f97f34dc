from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, func
from typing import Optional
import uuid
from app.models.hospital import Hospital, HospitalSource
from app.schemas.hospital import (
    HospitalCreate,
    HospitalCapacityUpdate,
    HospitalResponse,
    HospitalStats,
    NearbyHospital,
    check_bed_inventory,
)
from app.services.change_feed import ChangeFeed, change_feed
from app.services.geo import haversine_km, bounding_box


def to_nearby(hospital: Hospital, distance_km: Optional[float]) -> NearbyHospital:
    return NearbyHospital(
        id=str(hospital.id),
        name=hospital.name,
        address=hospital.address,
        lat=hospital.lat,
        lng=hospital.lng,
        type=hospital.type,
        phone=hospital.phone,
        bed_total_icu=hospital.bed_total_icu,
        bed_av_icu=hospital.bed_av_icu,
        bed_total_oxygen=hospital.bed_total_oxygen,
        bed_av_oxygen=hospital.bed_av_oxygen,
        bed_total_general=hospital.bed_total_general,
        bed_av_general=hospital.bed_av_general,
        verified=hospital.verified,
        distance_km=distance_km,
        in_db=True,
    )


class HospitalService:
    def __init__(self, db: AsyncSession, feed: ChangeFeed = change_feed):
        self.db = db
        self.feed = feed

    async def list_hospitals(
        self,
        search: Optional[str] = None,
        hospital_type: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Hospital]:
        q = select(Hospital)

        if hospital_type:
            q = q.where(Hospital.type == hospital_type)
        if search:
            term = f"%{search.strip()}%"
            q = q.where(
                or_(
                    Hospital.name.ilike(term),
                    Hospital.address.ilike(term),
                )
            )

        q = q.order_by(Hospital.name.asc()).limit(limit).offset(offset)
        result = await self.db.execute(q)
        return list(result.scalars().all())

    async def get_by_id(self, hospital_id: uuid.UUID) -> Optional[Hospital]:
        result = await self.db.execute(select(Hospital).where(Hospital.id == hospital_id))
        return result.scalar_one_or_none()

    async def nearby(self, lat: float, lng: float, radius_km: float) -> list[NearbyHospital]:
        """Authoritative hospitals within radius_km, nearest first, with distance attached.

        The bounding box hits the (lat, lng) index; the exact radius cut happens here.
        """
        south, west, north, east = bounding_box(lat, lng, radius_km)
        result = await self.db.execute(
            select(Hospital).where(
                Hospital.lat.between(south, north),
                Hospital.lng.between(west, east),
            )
        )
        rows: list[NearbyHospital] = []
        for hospital in result.scalars().all():
            distance = haversine_km(lat, lng, hospital.lat, hospital.lng)
            if distance <= radius_km:
                rows.append(to_nearby(hospital, distance))
        rows.sort(key=lambda r: r.distance_km)
        return rows

    async def create_hospital(
        self, payload: HospitalCreate, added_by: Optional[uuid.UUID] = None
    ) -> Hospital:
        hospital = Hospital(
            **payload.model_dump(mode="json"),
            verified=True,
            source=HospitalSource.Staff.value,
            added_by=added_by,
        )
        self.db.add(hospital)
        await self.db.commit()
        await self.db.refresh(hospital)
        self._publish("INSERT", hospital)
        return hospital

    async def update_capacity(
        self, hospital_id: uuid.UUID, payload: HospitalCapacityUpdate
    ) -> Hospital:
        from fastapi import HTTPException
        hospital = await self.get_by_id(hospital_id)
        if not hospital:
            raise HTTPException(status_code=404, detail="Hospital not found")
        for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(hospital, field, value)
        try:
            check_bed_inventory(hospital)
        except ValueError as e:
            await self.db.rollback()
            raise HTTPException(status_code=422, detail=str(e))
        await self.db.commit()
        await self.db.refresh(hospital)
        self._publish("UPDATE", hospital)
        return hospital

    async def stats(self) -> HospitalStats:
        result = await self.db.execute(
            select(
                func.count(Hospital.id),
                func.coalesce(
                    func.sum(Hospital.bed_av_icu + Hospital.bed_av_oxygen + Hospital.bed_av_general),
                    0,
                ),
            )
        )
        count, beds = result.one()
        return HospitalStats(hospitals=count or 0, beds=int(beds or 0))

    def _publish(self, event: str, hospital: Hospital) -> None:
        row = HospitalResponse.model_validate(hospital).model_dump(mode="json")
        self.feed.publish("hospitals", event, row)
