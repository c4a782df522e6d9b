"""Availability service - derives bookable slots for a doctor and date"""

import logging
from datetime import date
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import DoctorSchedule
from ...shared.validators import minutes_to_time, time_to_minutes
from .repository import AvailabilityRepository
from .schemas import AvailabilityResult, Slot

logger = logging.getLogger(__name__)

SLOT_MINUTES = 30


def generate_slots(rules: Iterable[DoctorSchedule], occupied: set[str]) -> list[Slot]:
    """
    Expand weekly rules into 30-minute slots.

    Each rule is an independent [start, end) window; a trailing slot shorter
    than SLOT_MINUTES is dropped. Times produced by more than one rule collapse
    into one entry, the last rule seen wins.
    """
    slots: dict[str, Slot] = {}
    for rule in rules:
        start = time_to_minutes(rule.start_time)
        end = time_to_minutes(rule.end_time)
        minute = start
        while minute + SLOT_MINUTES <= end:
            time_value = minutes_to_time(minute)
            slots[time_value] = Slot(time=time_value, available=time_value not in occupied)
            minute += SLOT_MINUTES

    return [slots[key] for key in sorted(slots)]


class AvailabilityService:
    """Service layer for slot resolution"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AvailabilityRepository()

    def resolve_available_slots(self, doctor_id: str, appointment_date: date) -> AvailabilityResult:
        """
        Slots for a doctor on a date.

        A failed lookup never raises: the result is empty and carries a warning
        so the caller can show "no slots" instead of an error.
        """
        day_of_week = appointment_date.isoweekday()
        result = AvailabilityResult(
            doctor_id=doctor_id, date=appointment_date.isoformat(), day_of_week=day_of_week
        )

        try:
            rules = self.repo.get_active_rules(self.db, doctor_id, day_of_week)
            occupied = self.repo.get_occupied_times(self.db, doctor_id, appointment_date)
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to load availability for doctor {doctor_id} on {appointment_date}: {e}")
            self.db.rollback()
            result.warning = "Availability could not be loaded. Please try again."
            return result

        if not rules:
            logger.debug(f"No schedule for doctor {doctor_id} on weekday {day_of_week}")
            return result

        result.slots = generate_slots(rules, occupied)
        return result
