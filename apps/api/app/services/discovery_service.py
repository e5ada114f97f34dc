"""
Nearby Hospital Discovery
Single entry point for "hospitals near me" with type and free-text filters.

Sources:
  - Authoritative store: geo-bounded query over the hospitals table (live bed counts)
  - OpenStreetMap Overpass: hospitals the store has not registered yet

Both are queried in parallel, merged by the reconciler, then filtered and sorted
by distance. A failing authoritative query raises NearbyQueryError so callers can
tell "no results" from "query failed". A failing Overpass query only shrinks the
result. Newly discovered hospitals are persisted in the background; the search
never waits for that.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Optional

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.schemas.hospital import NearbyHospital
from app.services.background import BackgroundRunner, runner as default_runner
from app.services.hospital_service import HospitalService
from app.services.overpass_service import DiscoveredHospital, discover_hospitals
from app.services.reconciliation_service import HospitalReconciler

logger = logging.getLogger(__name__)

ALL_TYPES = "All"


class NearbyQueryError(Exception):
    """The authoritative nearby query failed; the caller may retry."""


def apply_filters(
    rows: list[NearbyHospital],
    query: str = "",
    hospital_type: str = ALL_TYPES,
) -> list[NearbyHospital]:
    """Type filter, then free-text filter on name/address, then sort by distance."""
    if hospital_type and hospital_type != ALL_TYPES:
        rows = [r for r in rows if r.type == hospital_type]

    q = (query or "").strip().lower()
    if q:
        rows = [
            r for r in rows
            if q in r.name.lower() or q in (r.address or "").lower()
        ]

    sentinel = settings.DISTANCE_SENTINEL_KM
    return sorted(
        rows,
        key=lambda r: r.distance_km if r.distance_km is not None else sentinel,
    )


class DiscoveryService:
    def __init__(
        self,
        db: AsyncSession,
        reconciler: Optional[HospitalReconciler] = None,
        runner: Optional[BackgroundRunner] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.db = db
        self.reconciler = reconciler or HospitalReconciler()
        self.runner = runner or default_runner
        self.transport = transport

    def _schedule_sync(self, added_by: Optional[uuid.UUID]):
        def on_discovered(hospitals: list[DiscoveredHospital]) -> None:
            self.runner.spawn(
                self.reconciler.sync(hospitals, added_by=added_by),
                name=f"sync-{len(hospitals)}-osm-hospitals",
            )
        return on_discovered

    async def _authoritative(self, lat: float, lng: float, radius_km: float) -> list[NearbyHospital]:
        try:
            return await HospitalService(self.db).nearby(lat, lng, radius_km)
        except SQLAlchemyError as e:
            raise NearbyQueryError(f"Nearby hospital query failed: {e}") from e

    async def find_nearby(
        self,
        lat: Optional[float],
        lng: Optional[float],
        radius_km: float = settings.DEFAULT_RADIUS_KM,
        query: str = "",
        hospital_type: str = ALL_TYPES,
        added_by: Optional[uuid.UUID] = None,
    ) -> list[NearbyHospital]:
        if lat is None or lng is None:
            return []

        logger.info(
            f"[Discovery] ({lat}, {lng}) r={radius_km}km q={query!r} type={hospital_type!r}"
        )

        timeout = httpx.Timeout(settings.OVERPASS_TIMEOUT_S + 5.0)
        async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
            authoritative, discovered = await asyncio.gather(
                self._authoritative(lat, lng, radius_km),
                discover_hospitals(
                    client, lat, lng, radius_km,
                    on_discovered=self._schedule_sync(added_by),
                ),
                return_exceptions=True,
            )

        if isinstance(authoritative, BaseException):
            raise authoritative
        if isinstance(discovered, BaseException):
            # OSM failures never fail a search
            logger.warning(f"[Discovery] OSM discovery error: {discovered!r}")
            discovered = []

        merged = HospitalReconciler.merge(authoritative, discovered)
        results = apply_filters(merged, query=query, hospital_type=hospital_type)
        logger.info(
            f"[Discovery] {len(authoritative)} registered + {len(discovered)} OSM "
            f"-> {len(results)} results"
        )
        return results
