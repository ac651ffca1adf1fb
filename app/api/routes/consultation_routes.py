"""
Consultation Routes

GET /consultations - List all bookings (newest first)
POST /consultations - Book a consultation slot
PATCH /consultations/{id}/status - Update booking status
PUT /consultations/{id}/status - Same as PATCH
"""

from fastapi import APIRouter, BackgroundTasks, Depends
from typing import List

from app.services.booking_service import BookingCoordinator, get_booking_coordinator
from app.services.notification_service import Notifier, get_notifier
from app.schemas.schemas import (
    BookingRequest, BookingDetails, BookingCreatedResponse, BookingResponse,
    BookingStatusUpdate, BookingStatusResponse
)

router = APIRouter(prefix="/consultations", tags=["Consultations"])


@router.get("", response_model=List[BookingResponse])
async def list_consultations(coordinator: BookingCoordinator = Depends(get_booking_coordinator)):
    """Get all consultations, newest first."""
    return coordinator.list_bookings()


@router.post("", response_model=BookingCreatedResponse, status_code=201)
async def book_consultation(
    request: BookingRequest,
    background_tasks: BackgroundTasks,
    coordinator: BookingCoordinator = Depends(get_booking_coordinator),
    notifier: Notifier = Depends(get_notifier)
):
    """
    Book a consultation slot.

    The confirmation and admin emails are sent after the response;
    their outcome never changes the booking result.
    """
    booking = coordinator.submit(request)
    background_tasks.add_task(notifier.notify_booking_created, booking)

    return BookingCreatedResponse(
        message="Consultation booked successfully! A confirmation email has been sent.",
        consultation_id=booking["id"],
        details=BookingDetails(
            full_name=booking["full_name"], email=booking["email"],
            meeting_date=booking["meeting_date"], meeting_time=booking["meeting_time"],
            status=booking["status"]
        )
    )


@router.patch("/{consultation_id}/status", response_model=BookingStatusResponse)
@router.put("/{consultation_id}/status", response_model=BookingStatusResponse, include_in_schema=False)
async def update_consultation_status(
    consultation_id: int,
    data: BookingStatusUpdate,
    coordinator: BookingCoordinator = Depends(get_booking_coordinator)
):
    """Update status: pending -> confirmed/cancelled, confirmed -> completed/cancelled."""
    status = coordinator.update_status(consultation_id, data.status or "")
    return BookingStatusResponse(
        message=f"Consultation status updated to {status.value}",
        consultation_id=consultation_id,
        status=status
    )
