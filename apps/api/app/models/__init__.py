from app.models.hospital import Hospital, HospitalType, HospitalSource, BedType
from app.models.booking import Booking, BookingStatus
from app.models.emergency import EmergencyRequest, EmergencyStatus, Severity

__all__ = [
    "Hospital",
    "HospitalType",
    "HospitalSource",
    "BedType",
    "Booking",
    "BookingStatus",
    "EmergencyRequest",
    "EmergencyStatus",
    "Severity",
]
