"""
Hospital Reconciliation
Keeps OpenStreetMap discoveries and the authoritative hospitals table coherent.

merge() combines a nearby query's authoritative rows with live OSM discoveries for
display. sync() persists discoveries the store has not seen yet as unverified,
zero-capacity placeholders so staff can later fill in real bed counts.

Authoritative data always wins: sync never updates an existing row, and merge
drops any discovery whose name (case-insensitive) is already in the authoritative list.

Known limitation: the existence check and the insert in sync() are two statements.
Two clients discovering the same new hospital at the same moment can both insert
it. Closing that needs a unique constraint on the store side.
"""
from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import settings
from app.database import AsyncSessionLocal
from app.models.hospital import Hospital, HospitalSource, HospitalType
from app.schemas.hospital import HospitalResponse, NearbyHospital
from app.services.change_feed import ChangeFeed, change_feed
from app.services.overpass_service import DiscoveredHospital

logger = logging.getLogger(__name__)


def discovered_to_nearby(h: DiscoveredHospital) -> NearbyHospital:
    """Placeholder row for a discovery with no authoritative counterpart."""
    return NearbyHospital(
        id=h.synthetic_id,
        name=h.name,
        address=h.address,
        lat=h.lat,
        lng=h.lng,
        type=h.type,
        phone=h.phone,
        verified=False,
        distance_km=h.distance_km,
        in_db=False,
    )


class HospitalReconciler:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
        lat_tolerance: Optional[float] = None,
        feed: ChangeFeed = change_feed,
    ):
        self.session_factory = session_factory
        self.lat_tolerance = settings.DEDUP_LAT_TOLERANCE if lat_tolerance is None else lat_tolerance
        self.feed = feed

    # ------------------------------------------------------------------
    # merge
    # ------------------------------------------------------------------

    @staticmethod
    def merge(
        authoritative: list[NearbyHospital],
        discovered: list[DiscoveredHospital],
    ) -> list[NearbyHospital]:
        known_names = {h.name.lower() for h in authoritative}
        combined = list(authoritative)
        for h in discovered:
            if h.name.lower() in known_names:
                continue
            combined.append(discovered_to_nearby(h))
        return combined

    # ------------------------------------------------------------------
    # sync
    # ------------------------------------------------------------------

    async def _find_existing(self, db: AsyncSession, h: DiscoveredHospital) -> Optional[uuid.UUID]:
        result = await db.execute(
            select(Hospital.id, Hospital.lng)
            .where(
                Hospital.name == h.name,
                Hospital.lat >= h.lat - self.lat_tolerance,
                Hospital.lat <= h.lat + self.lat_tolerance,
            )
            .limit(1)
        )
        match = result.first()
        if match is None:
            return None
        # Only latitude is compared; two same-named sites on one parallel collide here
        if abs(match.lng - h.lng) > self.lat_tolerance:
            logger.warning(
                f"[Reconcile] {h.name!r} matched {match.id} by latitude, but longitude differs "
                f"by {abs(match.lng - h.lng):.4f}°; keeping the existing row"
            )
        return match.id

    async def sync(
        self,
        discovered: list[DiscoveredHospital],
        added_by: Optional[uuid.UUID] = None,
    ) -> int:
        """Insert every discovery with no match by name + latitude window.

        Best effort: a failing record is logged and skipped. Returns the insert count.
        """
        if not discovered:
            return 0

        inserted = 0
        failed = 0
        async with self.session_factory() as db:
            for h in discovered:
                try:
                    if await self._find_existing(db, h) is not None:
                        continue
                    hospital = Hospital(
                        name=h.name,
                        address=h.address,
                        lat=h.lat,
                        lng=h.lng,
                        type=HospitalType.General.value,
                        phone=h.phone,
                        verified=False,
                        source=HospitalSource.OpenStreetMap.value,
                        added_by=added_by,
                    )
                    db.add(hospital)
                    await db.commit()
                    await db.refresh(hospital)
                except SQLAlchemyError as e:
                    failed += 1
                    logger.warning(f"[Reconcile] failed to sync {h.name!r}: {e}")
                    await db.rollback()
                    continue
                inserted += 1
                self.feed.publish(
                    "hospitals",
                    "INSERT",
                    HospitalResponse.model_validate(hospital).model_dump(mode="json"),
                )

        logger.info(
            f"[Reconcile] {len(discovered)} discovered, {inserted} inserted, {failed} failed"
        )
        return inserted
