"""
Booking Coordinator - consultation slot reservation.

submit():
1. Validate input in a fixed order (required -> phone -> email -> date)
2. Check the (date, time) slot and insert in ONE transaction
3. Return the new booking; notifications are scheduled by the caller

Slot exclusivity is enforced by the partial unique index
uq_consultations_active_slot (meeting_date, meeting_time WHERE status <>
'cancelled'). The SELECT gives the friendly fast-path answer; the index is
what makes two concurrent submissions for the same slot impossible to both
succeed.
"""

import logging
import re
from datetime import date
from typing import Callable, List

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, SlotConflictError, ValidationError
from app.db.database import execute_raw_sql, get_db_session
from app.db.tables import consultations
from app.schemas.schemas import BookingRequest, BookingStatus

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^[0-9]{10}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REQUIRED_FIELDS = ("full_name", "email", "phone", "meeting_date", "meeting_time")

# Column limits from the consultations table, checked after the format checks
MAX_LENGTHS = {
    "full_name": ("Full name", consultations.c.full_name.type.length),
    "email": ("Email", consultations.c.email.type.length),
    "meeting_time": ("Meeting time", consultations.c.meeting_time.type.length),
}

# cancelled and completed are terminal
ALLOWED_TRANSITIONS = {
    BookingStatus.pending: {BookingStatus.confirmed, BookingStatus.cancelled},
    BookingStatus.confirmed: {BookingStatus.completed, BookingStatus.cancelled},
    BookingStatus.completed: set(),
    BookingStatus.cancelled: set(),
}


def validate_booking(request: BookingRequest, today: date) -> dict:
    """
    Validate a booking request and return the cleaned fields.
    Raises ValidationError for the FIRST failing check only.
    """
    values = {field: (getattr(request, field) or "").strip() for field in REQUIRED_FIELDS}

    if not all(values.values()):
        raise ValidationError(
            "All fields are required: full_name, email, phone, meeting_date, meeting_time"
        )

    if not PHONE_PATTERN.match(values["phone"]):
        raise ValidationError("Phone number must be exactly 10 digits")

    if not EMAIL_PATTERN.match(values["email"]):
        raise ValidationError("Please provide a valid email address")

    try:
        meeting_date = date.fromisoformat(values["meeting_date"])
    except ValueError:
        raise ValidationError("Meeting date must be a valid date (YYYY-MM-DD)")

    # Day granularity: today is bookable whatever the current time is
    if meeting_date < today:
        raise ValidationError("Meeting date cannot be in the past")

    for field, (label, limit) in MAX_LENGTHS.items():
        if len(values[field]) > limit:
            raise ValidationError(f"{label} must be at most {limit} characters")

    values["meeting_date"] = meeting_date
    return values


class BookingCoordinator:

    def __init__(self, today: Callable[[], date] = date.today):
        self.today = today

    def _slot_taken(self, db: Session, meeting_date: date, meeting_time: str) -> bool:
        result = db.execute(
            text("""
                SELECT id FROM consultations
                WHERE meeting_date = :meeting_date AND meeting_time = :meeting_time
                  AND status <> 'cancelled'
            """),
            {"meeting_date": meeting_date.isoformat(), "meeting_time": meeting_time}
        )
        return result.fetchone() is not None

    def submit(self, request: BookingRequest) -> dict:
        """Create a pending booking or raise ValidationError / SlotConflictError."""
        try:
            booking = validate_booking(request, self.today())
        except ValidationError as e:
            logger.warning("Rejected booking request: %s", e.message)
            raise

        with get_db_session() as db:
            if self._slot_taken(db, booking["meeting_date"], booking["meeting_time"]):
                logger.warning("Slot %s %s already booked", booking["meeting_date"], booking["meeting_time"])
                raise SlotConflictError()

            try:
                result = db.execute(
                    text("""
                        INSERT INTO consultations (full_name, email, phone, meeting_date, meeting_time, status)
                        VALUES (:full_name, :email, :phone, :meeting_date, :meeting_time, 'pending')
                        RETURNING id
                    """),
                    {**booking, "meeting_date": booking["meeting_date"].isoformat()}
                )
                consultation_id = result.fetchone()[0]
            except IntegrityError as e:
                # A concurrent submission took the slot between SELECT and INSERT
                logger.warning("Slot %s %s lost to a concurrent booking", booking["meeting_date"], booking["meeting_time"])
                raise SlotConflictError() from e

        logger.info("Consultation %s booked for %s %s", consultation_id, booking["meeting_date"], booking["meeting_time"])
        return {"id": consultation_id, "status": BookingStatus.pending.value, **booking}

    def update_status(self, consultation_id: int, new_status: str) -> BookingStatus:
        """Move a booking along its lifecycle and touch updated_at."""
        try:
            status = BookingStatus(new_status)
        except ValueError:
            raise ValidationError(
                "Invalid status. Must be one of: pending, confirmed, completed, cancelled"
            )

        with get_db_session() as db:
            row = db.execute(
                text("SELECT status FROM consultations WHERE id = :id"),
                {"id": consultation_id}
            ).fetchone()
            if not row:
                raise NotFoundError("Consultation not found")

            current = BookingStatus(row[0])
            if status != current and status not in ALLOWED_TRANSITIONS[current]:
                raise ValidationError(f"Cannot change status from {current.value} to {status.value}")

            db.execute(
                text("UPDATE consultations SET status = :status, updated_at = CURRENT_TIMESTAMP WHERE id = :id"),
                {"status": status.value, "id": consultation_id}
            )

        logger.info("Consultation %s status: %s -> %s", consultation_id, current.value, status.value)
        return status

    def list_bookings(self) -> List[dict]:
        return execute_raw_sql("""
            SELECT id, full_name, email, phone, meeting_date, meeting_time, status, created_at, updated_at
            FROM consultations ORDER BY created_at DESC, id DESC
        """)


def get_booking_coordinator() -> BookingCoordinator:
    """Get booking coordinator instance (FastAPI dependency)."""
    return BookingCoordinator()
