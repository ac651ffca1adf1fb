import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta

import pytest

from app.core.config import Settings
from app.core.errors import NotificationError
from app.services.booking_service import BookingCoordinator
from app.services.notification_service import Notifier

TOMORROW = (date.today() + timedelta(days=1)).isoformat()


def booking_payload(**overrides):
    payload = {
        "full_name": "Asha Rao",
        "email": "asha@example.com",
        "phone": "9876543210",
        "meeting_date": TOMORROW,
        "meeting_time": "15:00",
    }
    payload.update(overrides)
    return payload


def book(client, **overrides):
    return client.post("/api/consultations", json=booking_payload(**overrides))


# ------------------ booking ------------------
def test_booking_end_to_end(client, notifier):
    response = book(client)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["details"]["status"] == "pending"
    assert body["details"]["meeting_date"] == TOMORROW
    booking_id = body["consultation_id"]

    # Same slot, different person
    clash = book(client, full_name="Ravi Kumar", email="ravi@example.com", phone="9123456780")
    assert clash.status_code == 409
    assert clash.json() == {
        "success": False,
        "error": {
            "code": "slot_conflict",
            "message": "This time slot is already booked. Please choose a different time.",
        },
    }

    # Cancelling frees the slot
    cancel = client.patch(f"/api/consultations/{booking_id}/status", json={"status": "cancelled"})
    assert cancel.status_code == 200
    assert cancel.json()["status"] == "cancelled"

    rebook = book(client, full_name="Ravi Kumar", email="ravi@example.com", phone="9123456780")
    assert rebook.status_code == 201
    assert rebook.json()["consultation_id"] != booking_id

    # Both successful bookings scheduled their notifications, the clash did not
    assert [b["id"] for b in notifier.bookings] == [booking_id, rebook.json()["consultation_id"]]


def test_distinct_slots_get_distinct_ids(client):
    ids = {
        book(client, meeting_time="10:00").json()["consultation_id"],
        book(client, meeting_time="11:00").json()["consultation_id"],
        book(client, meeting_date=(date.today() + timedelta(days=2)).isoformat()).json()["consultation_id"],
    }
    assert len(ids) == 3


def test_slot_index_rejects_booking_that_passes_the_precheck(client, monkeypatch):
    # Simulates a concurrent submission winning between SELECT and INSERT
    monkeypatch.setattr(BookingCoordinator, "_slot_taken", lambda self, db, meeting_date, meeting_time: False)

    assert book(client).status_code == 201
    second = book(client, email="other@example.com")
    assert second.status_code == 409
    assert second.json()["error"]["code"] == "slot_conflict"

    listed = client.get("/api/consultations").json()
    assert len(listed) == 1


def test_today_is_bookable(client):
    assert book(client, meeting_date=date.today().isoformat()).status_code == 201


def test_past_date_rejected(client, notifier):
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    response = book(client, meeting_date=yesterday)
    assert response.status_code == 400
    assert response.json()["error"] == {
        "code": "validation_error",
        "message": "Meeting date cannot be in the past",
    }
    assert notifier.bookings == []


def test_missing_field_rejected(client):
    payload = booking_payload()
    del payload["meeting_time"]
    response = client.post("/api/consultations", json=payload)
    assert response.status_code == 400
    assert response.json()["error"]["message"].startswith("All fields are required")


def test_bad_phone_and_email(client):
    assert book(client, phone="12345").json()["error"]["message"] == "Phone number must be exactly 10 digits"
    assert book(client, email="not-an-email").json()["error"]["message"] == "Please provide a valid email address"


def test_list_newest_first(client):
    first = book(client, meeting_time="10:00").json()["consultation_id"]
    second = book(client, meeting_time="11:00").json()["consultation_id"]

    listed = client.get("/api/consultations").json()
    assert [b["id"] for b in listed] == [second, first]
    assert listed[0]["phone"] == "9876543210"


# ------------------ status ------------------
def test_status_lifecycle(client):
    booking_id = book(client).json()["consultation_id"]

    assert client.patch(f"/api/consultations/{booking_id}/status", json={"status": "confirmed"}).status_code == 200
    # PUT is accepted as well
    done = client.put(f"/api/consultations/{booking_id}/status", json={"status": "completed"})
    assert done.status_code == 200
    assert done.json()["message"] == "Consultation status updated to completed"

    # completed is terminal
    reopened = client.patch(f"/api/consultations/{booking_id}/status", json={"status": "pending"})
    assert reopened.status_code == 400
    assert reopened.json()["error"]["message"] == "Cannot change status from completed to pending"


def test_same_status_is_a_no_op(client):
    booking_id = book(client).json()["consultation_id"]
    response = client.patch(f"/api/consultations/{booking_id}/status", json={"status": "pending"})
    assert response.status_code == 200
    assert response.json()["status"] == "pending"


def test_invalid_status(client):
    booking_id = book(client).json()["consultation_id"]
    response = client.patch(f"/api/consultations/{booking_id}/status", json={"status": "archived"})
    assert response.status_code == 400
    assert response.json()["error"]["message"].startswith("Invalid status")


def test_status_of_unknown_booking(client):
    response = client.patch("/api/consultations/999/status", json={"status": "confirmed"})
    assert response.status_code == 404
    assert response.json()["error"] == {"code": "not_found", "message": "Consultation not found"}


def test_completed_booking_still_holds_its_slot(client):
    booking_id = book(client).json()["consultation_id"]
    client.patch(f"/api/consultations/{booking_id}/status", json={"status": "confirmed"})
    client.patch(f"/api/consultations/{booking_id}/status", json={"status": "completed"})
    assert book(client, email="other@example.com").status_code == 409


# ------------------ notifications ------------------
class FlakySender:
    """Fails for one recipient, records the rest."""

    def __init__(self, failing_recipient):
        self.failing_recipient = failing_recipient
        self.sent = []

    async def send(self, to, subject, html_body):
        if to == self.failing_recipient:
            raise NotificationError(f"SMTP rejected {to}")
        self.sent.append((to, subject))
        return "message-id"


def make_booking():
    return {
        "id": 7, "full_name": "Asha Rao", "email": "asha@example.com", "phone": "9876543210",
        "meeting_date": date(2026, 10, 20), "meeting_time": "15:00", "status": "pending",
    }


def test_one_failed_email_does_not_stop_the_other(caplog):
    sender = FlakySender(failing_recipient="asha@example.com")
    notifier = Notifier(sender, Settings(admin_email="ops@talentconnect.com"))

    asyncio.run(notifier.notify_booking_created(make_booking()))

    assert [to for to, _ in sender.sent] == ["ops@talentconnect.com"]
    assert "confirmation email failed" in caplog.text


def test_missing_admin_address_only_skips_admin_notice(caplog):
    sender = FlakySender(failing_recipient=None)
    notifier = Notifier(sender, Settings(admin_email=""))

    asyncio.run(notifier.notify_booking_created(make_booking()))

    assert [to for to, _ in sender.sent] == ["asha@example.com"]
    assert "admin notification email failed" in caplog.text


def test_confirmation_mentions_the_slot():
    sender = FlakySender(failing_recipient=None)
    notifier = Notifier(sender, Settings(admin_email="ops@talentconnect.com"))

    asyncio.run(notifier.send_booking_confirmation(make_booking()))

    to, subject = sender.sent[0]
    assert to == "asha@example.com"
    assert subject


def test_booking_succeeds_when_every_email_fails(client):
    from app.main import app
    from app.services.notification_service import get_notifier

    sender = FlakySender(failing_recipient=None)
    sender.send = _always_fail
    app.dependency_overrides[get_notifier] = lambda: Notifier(sender, Settings(admin_email="ops@talentconnect.com"))

    response = book(client)
    assert response.status_code == 201
    assert len(client.get("/api/consultations").json()) == 1


async def _always_fail(to, subject, html_body):
    raise NotificationError("SMTP down")


def test_unconfigured_sender_raises():
    from app.services.email_service import EmailSender

    sender = EmailSender(Settings(mail_enabled=False))
    assert sender.enabled is False
    with pytest.raises(NotificationError):
        asyncio.run(sender.send("asha@example.com", "Hello", "<p>Hi</p>"))


def test_enabled_sender_rejects_bad_recipient_as_notification_error():
    from app.services.email_service import EmailSender

    sender = EmailSender(Settings(mail_enabled=True, mail_username="mailer", mail_password="secret"))
    assert sender.enabled is True
    with pytest.raises(NotificationError):
        asyncio.run(sender.send("not-an-email", "Welcome", "<p>Hi</p>"))


def test_welcome_email_to_bad_address_is_logged(caplog):
    from app.services.email_service import EmailSender

    sender = EmailSender(Settings(mail_enabled=True, mail_username="mailer", mail_password="secret"))
    notifier = Notifier(sender, Settings(admin_email="ops@talentconnect.com"))

    asyncio.run(notifier.send_registration_welcome({"id": 3, "full_name": "Asha", "email": "not-an-email"}))

    assert "Registration 3: welcome email failed" in caplog.text


def test_overlong_name_is_a_client_error(client):
    response = book(client, full_name="A" * 101)
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Full name must be at most 100 characters"


# ------------------ concurrent submissions ------------------
def test_concurrent_bookings_for_one_slot(tmp_path, monkeypatch):
    from sqlalchemy import text
    from sqlalchemy.orm import sessionmaker

    from app.core.errors import SlotConflictError
    from app.db import database
    from app.schemas.schemas import BookingRequest

    file_engine = database.create_db_engine(f"sqlite:///{tmp_path / 'bookings.db'}")
    database.init_schema(bind=file_engine)
    monkeypatch.setattr(database, "SessionLocal", sessionmaker(autocommit=False, autoflush=False, bind=file_engine))

    # Both submissions finish the pre-check before either inserts
    barrier = threading.Barrier(2)
    slot_taken = BookingCoordinator._slot_taken

    def slot_taken_then_wait(self, db, meeting_date, meeting_time):
        taken = slot_taken(self, db, meeting_date, meeting_time)
        barrier.wait(timeout=10)
        return taken

    monkeypatch.setattr(BookingCoordinator, "_slot_taken", slot_taken_then_wait)

    coordinator = BookingCoordinator()

    def submit(email):
        request = BookingRequest(**booking_payload(email=email))
        try:
            return coordinator.submit(request)
        except SlotConflictError as e:
            return e

    try:
        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(submit, ["asha@example.com", "ravi@example.com"]))

        booked = [r for r in results if isinstance(r, dict)]
        conflicts = [r for r in results if isinstance(r, SlotConflictError)]
        assert len(booked) == 1
        assert len(conflicts) == 1

        with file_engine.connect() as conn:
            rows = conn.execute(text("SELECT id FROM consultations WHERE status <> 'cancelled'")).fetchall()
        assert [row[0] for row in rows] == [booked[0]["id"]]
    finally:
        file_engine.dispose()
