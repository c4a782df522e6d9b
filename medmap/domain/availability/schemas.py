"""Availability domain schemas"""

from typing import Optional

from pydantic import BaseModel


class Slot(BaseModel):
    """One 30-minute window on a given date"""

    time: str  # HH:MM
    available: bool


class AvailabilityResult(BaseModel):
    """Slots for a doctor on a date, plus a warning when lookups failed"""

    doctor_id: str
    date: str
    day_of_week: int
    slots: list[Slot] = []
    warning: Optional[str] = None
