from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional
from datetime import datetime
import uuid
from app.models.hospital import HospitalType, BedType


class HospitalCreate(BaseModel):
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    type: HospitalType = HospitalType.Private
    phone: Optional[str] = None
    about: Optional[str] = None
    specialties: Optional[str] = None
    bed_total_icu: int = Field(default=0, ge=0)
    bed_av_icu: int = Field(default=0, ge=0)
    bed_total_oxygen: int = Field(default=0, ge=0)
    bed_av_oxygen: int = Field(default=0, ge=0)
    bed_total_general: int = Field(default=0, ge=0)
    bed_av_general: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _available_within_total(self):
        check_bed_inventory(self)
        return self


class HospitalCapacityUpdate(BaseModel):
    bed_total_icu: Optional[int] = Field(default=None, ge=0)
    bed_av_icu: Optional[int] = Field(default=None, ge=0)
    bed_total_oxygen: Optional[int] = Field(default=None, ge=0)
    bed_av_oxygen: Optional[int] = Field(default=None, ge=0)
    bed_total_general: Optional[int] = Field(default=None, ge=0)
    bed_av_general: Optional[int] = Field(default=None, ge=0)


def check_bed_inventory(obj) -> None:
    for bed_type in BedType:
        total = getattr(obj, f"bed_total_{bed_type.value}")
        available = getattr(obj, f"bed_av_{bed_type.value}")
        if total is not None and available is not None and available > total:
            raise ValueError(
                f"bed_av_{bed_type.value} ({available}) exceeds bed_total_{bed_type.value} ({total})"
            )


class HospitalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    address: Optional[str]
    lat: float
    lng: float
    type: str
    phone: Optional[str]
    about: Optional[str]
    specialties: Optional[str]
    bed_total_icu: int
    bed_av_icu: int
    bed_total_oxygen: int
    bed_av_oxygen: int
    bed_total_general: int
    bed_av_general: int
    verified: bool
    source: str
    created_at: datetime
    updated_at: datetime


class NearbyHospital(BaseModel):
    """One row of a nearby search: an authoritative hospital or an OSM placeholder."""
    id: str
    name: str
    address: Optional[str] = None
    lat: float
    lng: float
    type: str = HospitalType.General.value
    phone: Optional[str] = None
    bed_total_icu: int = 0
    bed_av_icu: int = 0
    bed_total_oxygen: int = 0
    bed_av_oxygen: int = 0
    bed_total_general: int = 0
    bed_av_general: int = 0
    verified: bool = False
    distance_km: Optional[float] = None
    in_db: bool = True


class NearbyResponse(BaseModel):
    results: list[NearbyHospital]
    total: int


class HospitalStats(BaseModel):
    hospitals: int
    beds: int
