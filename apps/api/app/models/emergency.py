import uuid
import enum
from datetime import datetime
from sqlalchemy import String, Text, Enum as SAEnum, func
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base


class Severity(str, enum.Enum):
    Critical = "Critical"
    Serious = "Serious"
    Moderate = "Moderate"


class EmergencyStatus(str, enum.Enum):
    Open = "OPEN"
    Resolved = "RESOLVED"


class EmergencyRequest(Base):
    """An emergency broadcast visible to every staff member until resolved."""
    __tablename__ = "emergency_requests"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    patient_name: Mapped[str] = mapped_column(String, nullable=False)
    patient_age: Mapped[str] = mapped_column(String(10), nullable=False)
    severity: Mapped[Severity] = mapped_column(
        SAEnum(Severity, name="emergency_severity"), nullable=False, default=Severity.Critical
    )
    nature_of_emergency: Mapped[str] = mapped_column(Text, nullable=False)
    location_text: Mapped[str] = mapped_column(Text, nullable=False)
    contact_number: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[EmergencyStatus] = mapped_column(
        SAEnum(EmergencyStatus, name="emergency_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=EmergencyStatus.Open,
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
