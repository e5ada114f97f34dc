import uuid
import enum
from datetime import datetime
from sqlalchemy import String, Integer, Text, ForeignKey, Enum as SAEnum, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
from app.models.hospital import BedType


class BookingStatus(str, enum.Enum):
    Pending = "PENDING"
    Confirmed = "CONFIRMED"
    Rejected = "REJECTED"


class Booking(Base):
    """A patient's request to hold a bed of a given type at a hospital."""
    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    hospital_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("hospitals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    patient_name: Mapped[str] = mapped_column(String, nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    condition: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_phone: Mapped[str] = mapped_column(String, nullable=False)
    bed_type: Mapped[BedType] = mapped_column(
        SAEnum(BedType, name="bed_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    status: Mapped[BookingStatus] = mapped_column(
        SAEnum(BookingStatus, name="booking_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=BookingStatus.Pending,
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now(), onupdate=func.now()
    )

    hospital: Mapped["Hospital"] = relationship("Hospital")  # noqa: F821
