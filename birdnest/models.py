"""
Domain records shared by the monitor, the store and the API layer.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class PilotInfo:
    """Contact details of a registered pilot."""
    first_name: str
    last_name: str
    phone_number: str
    email: str

    @classmethod
    def from_json(cls, data: dict) -> 'PilotInfo':
        """Build from a registry record. Raises KeyError/TypeError if incomplete."""
        return cls(
            first_name=str(data['firstName']),
            last_name=str(data['lastName']),
            phone_number=str(data['phoneNumber']),
            email=str(data['email']),
        )

    def to_dict(self) -> dict:
        return {
            'firstName': self.first_name,
            'lastName': self.last_name,
            'phoneNumber': self.phone_number,
            'email': self.email,
        }


@dataclass
class Violation:
    """
    A drone's presence inside the no-fly zone.

    closest_distance_mm only ever decreases; pilot is fixed when the
    violation is first recorded.
    """
    serial_number: str
    closest_distance_mm: float
    pilot: Optional[PilotInfo]
    last_seen_at: datetime

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'serialNumber': self.serial_number,
            'closestDistanceInMm': self.closest_distance_mm,
            'pilot': self.pilot.to_dict() if self.pilot else None,
            'latestCaptureDateAndTime': self.last_seen_at.isoformat(),
        }
