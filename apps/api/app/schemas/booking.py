from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
import uuid
from app.models.booking import BookingStatus
from app.models.hospital import BedType


class BookingCreate(BaseModel):
    hospital_id: uuid.UUID
    patient_name: str = Field(..., min_length=1)
    age: int = Field(..., ge=0, le=150)
    condition: Optional[str] = None
    contact_phone: str = Field(..., min_length=1)
    bed_type: BedType = BedType.General


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    hospital_id: uuid.UUID
    patient_name: str
    age: int
    condition: Optional[str]
    contact_phone: str
    bed_type: BedType
    status: BookingStatus
    created_at: datetime
    updated_at: datetime
