import uuid
import enum
from datetime import datetime
from sqlalchemy import String, Integer, Float, Boolean, Text, Index, func
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base


class HospitalType(str, enum.Enum):
    Private = "Pvt"
    Government = "Gov"
    SemiGovernment = "Sem"
    General = "General"  # unclassified, e.g. discovered via OpenStreetMap


class BedType(str, enum.Enum):
    ICU = "icu"
    Oxygen = "oxygen"
    General = "general"


class HospitalSource(str, enum.Enum):
    Staff = "Staff"
    OpenStreetMap = "OpenStreetMap"


class Hospital(Base):
    __tablename__ = "hospitals"
    __table_args__ = (
        Index("ix_hospitals_lat_lng", "lat", "lng"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False, index=True)
    address: Mapped[str | None] = mapped_column(String, nullable=True)
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lng: Mapped[float] = mapped_column(Float, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=HospitalType.General.value)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    about: Mapped[str | None] = mapped_column(Text, nullable=True)
    specialties: Mapped[str | None] = mapped_column(Text, nullable=True)

    bed_total_icu: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bed_av_icu: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bed_total_oxygen: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bed_av_oxygen: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bed_total_general: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bed_av_general: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    source: Mapped[str] = mapped_column(String(20), nullable=False, default=HospitalSource.Staff.value)
    added_by: Mapped[uuid.UUID | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def available_beds(self, bed_type: BedType) -> int:
        return getattr(self, f"bed_av_{bed_type.value}")
