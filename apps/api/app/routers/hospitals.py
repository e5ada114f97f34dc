from fastapi import APIRouter, Depends, Query, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import uuid
from app.dependencies import ANY_ROLE, STAFF_ROLES, get_db, require_role, CurrentUser
from app.models.hospital import HospitalType
from app.schemas.hospital import (
    HospitalCreate,
    HospitalCapacityUpdate,
    HospitalResponse,
    HospitalStats,
)
from app.services.hospital_service import HospitalService

router = APIRouter()


@router.get("/", response_model=list[HospitalResponse])
async def list_hospitals(
    search: Optional[str] = Query(None, max_length=200),
    type: Optional[HospitalType] = Query(None),
    limit: int = Query(50, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_role(ANY_ROLE)),
):
    svc = HospitalService(db)
    return await svc.list_hospitals(
        search=search,
        hospital_type=type.value if type else None,
        limit=limit,
        offset=offset,
    )


@router.get("/stats", response_model=HospitalStats)
async def hospital_stats(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_role(ANY_ROLE)),
):
    return await HospitalService(db).stats()


@router.post("/", response_model=HospitalResponse, status_code=201)
async def register_hospital(
    payload: HospitalCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_role(STAFF_ROLES)),
):
    svc = HospitalService(db)
    return await svc.create_hospital(payload, added_by=current_user.uuid)


@router.get("/{hospital_id}", response_model=HospitalResponse)
async def get_hospital(
    hospital_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_role(ANY_ROLE)),
):
    hospital = await HospitalService(db).get_by_id(hospital_id)
    if not hospital:
        raise HTTPException(status_code=404, detail="Hospital not found")
    return hospital


@router.patch("/{hospital_id}/capacity", response_model=HospitalResponse)
async def update_capacity(
    hospital_id: uuid.UUID,
    payload: HospitalCapacityUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_role(STAFF_ROLES)),
):
    return await HospitalService(db).update_capacity(hospital_id, payload)
