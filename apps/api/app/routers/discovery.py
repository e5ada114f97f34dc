"""
Discovery Router
Nearby hospital search: registered hospitals plus live OpenStreetMap results.
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from app.config import settings
from app.dependencies import get_db, get_current_user, CurrentUser
from app.schemas.hospital import NearbyResponse
from app.services.discovery_service import DiscoveryService, NearbyQueryError, ALL_TYPES

logger = logging.getLogger(__name__)

router = APIRouter()


def get_discovery_service(db: AsyncSession = Depends(get_db)) -> DiscoveryService:
    return DiscoveryService(db)


@router.get("/nearby", response_model=NearbyResponse)
async def find_nearby(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius_km: float = Query(settings.DEFAULT_RADIUS_KM, gt=0, le=settings.MAX_RADIUS_KM),
    q: str = Query("", max_length=200),
    type: str = Query(ALL_TYPES, pattern=r"^(All|Pvt|Gov|Sem|General)$"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    svc: DiscoveryService = Depends(get_discovery_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Hospitals within radius_km of (lat, lng), nearest first.
    Rows with in_db=false come from OpenStreetMap and have no bed data yet.
    Missing coordinates return an empty list rather than an error.
    """
    try:
        results = await svc.find_nearby(
            lat, lng, radius_km,
            query=q,
            hospital_type=type,
            added_by=current_user.uuid,
        )
    except NearbyQueryError as e:
        logger.error(f"[Discovery] {e}")
        raise HTTPException(
            status_code=503,
            detail="Nearby hospital search is temporarily unavailable. Please retry.",
        )
    except Exception as e:
        logger.exception(f"[Discovery] Search error: {e}")
        raise HTTPException(status_code=500, detail="Nearby hospital search failed")

    return NearbyResponse(results=results[offset:offset + limit], total=len(results))
