"""Tests for the reservation workflow and booking routes."""

from urllib.parse import parse_qs, urlparse

from sqlalchemy.exc import OperationalError

from medmap.domain.bookings.repository import BookingRepository
from medmap.domain.payments.payfast_service import payfast_service
from medmap.models import Booking

MONDAY = "2030-01-07"


def book(client, headers, doctor_id, appointment_time="09:00", notes=None):
    body = {"doctor_id": doctor_id, "appointment_date": MONDAY, "appointment_time": appointment_time}
    if notes is not None:
        body["patient_notes"] = notes
    return client.post("/bookings", json=body, headers=headers)


def stored_booking(db, booking_id) -> Booking:
    db.expire_all()
    return db.query(Booking).filter(Booking.id == booking_id).first()


class TestCreateBooking:
    """Tests for POST /bookings."""

    def test_creates_pending_booking_with_payment_url(self, client, db, doctor, patient, headers_for):
        """Fee 50000 plus booking fee 1000 totals 51000 and returns a signed PayFast URL."""
        response = book(client, headers_for(patient), doctor.id, notes="  Follow-up on blood tests ")
        assert response.status_code == 201
        data = response.json()
        assert data["total_amount"] == 51000
        assert data["booking_id"] in data["payment_url"]

        booking = stored_booking(db, data["booking_id"])
        assert booking.status == "pending"
        assert booking.payment_status == "pending"
        assert booking.consultation_fee == 50000
        assert booking.booking_fee == 1000
        assert booking.patient_notes == "Follow-up on blood tests"
        assert booking.payment_reference.startswith(f"PF_{booking.id}_")

    def test_payment_url_carries_correlation_fields(self, client, doctor, patient, headers_for):
        """The redirect targets the process endpoint with the booking correlation keys."""
        data = book(client, headers_for(patient), doctor.id).json()
        url = urlparse(data["payment_url"])
        params = {k: v[0] for k, v in parse_qs(url.query).items()}

        assert url.path.endswith("/eng/process")
        assert params["amount"] == "510.00"
        assert params["custom_str1"] == data["booking_id"]
        assert params["custom_str2"] == patient.id
        assert params["custom_str3"] == "booking_payment"
        assert params["notify_url"].endswith("/webhooks/payfast")
        assert len(params["signature"]) == 32

    def test_unknown_doctor(self, client, patient, headers_for):
        """Booking a doctor that does not exist is a 404."""
        response = book(client, headers_for(patient), "missing-doctor")
        assert response.status_code == 404

    def test_invalid_time(self, client, doctor, patient, headers_for):
        """Times must be HH:MM."""
        response = book(client, headers_for(patient), doctor.id, appointment_time="9am")
        assert response.status_code == 422

    def test_requires_authentication(self, client, doctor):
        """No bearer token, no booking."""
        response = client.post(
            "/bookings",
            json={"doctor_id": doctor.id, "appointment_date": MONDAY, "appointment_time": "09:00"},
        )
        assert response.status_code in (401, 403)

    def test_gateway_not_configured_leaves_booking_pending(
        self, client, db, doctor, patient, headers_for, monkeypatch
    ):
        """Missing merchant credentials fail the attempt but keep the pending row."""
        monkeypatch.setattr(payfast_service, "merchant_id", None)
        response = book(client, headers_for(patient), doctor.id)
        assert response.status_code == 503

        db.expire_all()
        bookings = db.query(Booking).all()
        assert len(bookings) == 1
        assert bookings[0].status == "pending"
        assert bookings[0].payment_status == "pending"
        assert bookings[0].payment_reference is None

    def test_insert_failure(self, client, db, doctor, patient, headers_for, monkeypatch):
        """A failed insert surfaces as a 500 with nothing stored."""

        def broken(*args, **kwargs):
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(BookingRepository, "create_booking", staticmethod(broken))
        response = book(client, headers_for(patient), doctor.id)
        assert response.status_code == 500
        assert "try again" in response.json()["detail"]

        db.expire_all()
        assert db.query(Booking).count() == 0

    def test_same_slot_can_be_booked_twice(self, client, db, doctor, patient, headers_for):
        """Slot availability is not re-checked on insert, so two reservations for one slot both succeed."""
        first = book(client, headers_for(patient), doctor.id, appointment_time="10:00")
        second = book(client, headers_for(patient), doctor.id, appointment_time="10:00")

        assert first.status_code == 201
        assert second.status_code == 201
        assert first.json()["booking_id"] != second.json()["booking_id"]

        db.expire_all()
        same_slot = (
            db.query(Booking)
            .filter(Booking.doctor_id == doctor.id, Booking.appointment_time == "10:00")
            .count()
        )
        assert same_slot == 2


class TestBookingPayment:
    """Tests for POST /bookings/{id}/payment."""

    def test_retry_for_pending_booking(self, client, db, doctor, patient, headers_for):
        """A pending booking gets a fresh reference and URL."""
        booking_id = book(client, headers_for(patient), doctor.id).json()["booking_id"]

        response = client.post(f"/bookings/{booking_id}/payment", headers=headers_for(patient))
        assert response.status_code == 200
        data = response.json()
        assert booking_id in data["payment_url"]
        assert data["payment_reference"] == stored_booking(db, booking_id).payment_reference

    def test_retry_for_confirmed_booking(self, client, db, doctor, patient, headers_for):
        """Paid bookings cannot be paid again."""
        booking_id = book(client, headers_for(patient), doctor.id).json()["booking_id"]
        booking = stored_booking(db, booking_id)
        booking.status = "confirmed"
        booking.payment_status = "paid"
        db.commit()

        response = client.post(f"/bookings/{booking_id}/payment", headers=headers_for(patient))
        assert response.status_code == 409

    def test_retry_for_someone_elses_booking(self, client, db, doctor, patient, admin, headers_for):
        """Other users' bookings are invisible."""
        booking_id = book(client, headers_for(patient), doctor.id).json()["booking_id"]
        response = client.post(f"/bookings/{booking_id}/payment", headers=headers_for(admin))
        assert response.status_code == 404


class TestBookingHistory:
    """Tests for GET /bookings/me and GET /bookings/{id}."""

    def test_list_my_bookings(self, client, doctor, patient, admin, headers_for):
        """Patients only see their own bookings."""
        book(client, headers_for(patient), doctor.id, appointment_time="09:00")
        book(client, headers_for(patient), doctor.id, appointment_time="09:30")
        book(client, headers_for(admin), doctor.id, appointment_time="10:00")

        response = client.get("/bookings/me", headers=headers_for(patient))
        assert response.status_code == 200
        data = response.json()
        assert [b["appointment_time"] for b in data] == ["09:30", "09:00"]
        assert data[0]["doctor"]["practice_name"] == "Naidoo Family Practice"

    def test_get_booking(self, client, doctor, patient, headers_for):
        """A single own booking is returned with its amounts."""
        booking_id = book(client, headers_for(patient), doctor.id).json()["booking_id"]
        response = client.get(f"/bookings/{booking_id}", headers=headers_for(patient))
        assert response.status_code == 200
        data = response.json()
        assert data["total_amount"] == 51000
        assert data["status"] == "pending"

    def test_get_missing_booking(self, client, patient, headers_for):
        """Unknown booking ids are a 404."""
        response = client.get("/bookings/nope", headers=headers_for(patient))
        assert response.status_code == 404


class TestBookingEndToEnd:
    """Reservation, redirect and PayFast confirmation in sequence."""

    def test_book_pay_and_confirm(self, client, db, doctor, patient, headers_for, signed_itn, sent_emails):
        """A COMPLETE notification for the booking confirms it and emails the patient."""
        slots = client.get(f"/availability/{doctor.id}", params={"date": MONDAY}).json()["slots"]
        assert {"time": "09:00", "available": True} in slots

        created = book(client, headers_for(patient), doctor.id, appointment_time="09:00").json()
        assert created["total_amount"] == 51000
        booking_id = created["booking_id"]
        assert booking_id in created["payment_url"]

        slots = client.get(f"/availability/{doctor.id}", params={"date": MONDAY}).json()["slots"]
        assert {"time": "09:00", "available": False} in slots

        response = client.post(
            "/webhooks/payfast",
            data=signed_itn(
                payment_status="COMPLETE",
                custom_str1=booking_id,
                custom_str2=patient.id,
                custom_str3="booking_payment",
            ),
        )
        assert response.status_code == 200
        assert response.text == "OK"

        booking = stored_booking(db, booking_id)
        assert booking.status == "confirmed"
        assert booking.payment_status == "paid"
        sent_emails["booking_confirmed"].assert_awaited_once()
