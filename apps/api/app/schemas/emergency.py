from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
import uuid
from app.models.emergency import EmergencyStatus, Severity


class EmergencyCreate(BaseModel):
    patient_name: str = Field(..., min_length=1)
    patient_age: str = Field(..., min_length=1, max_length=10)
    severity: Severity = Severity.Critical
    nature_of_emergency: str = Field(..., min_length=1)
    location_text: str = Field(..., min_length=1)
    contact_number: str = Field(..., min_length=1)


class EmergencyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    patient_name: str
    patient_age: str
    severity: Severity
    nature_of_emergency: str
    location_text: str
    contact_number: str
    status: EmergencyStatus
    created_at: datetime
