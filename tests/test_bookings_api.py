"""
Integration tests for vendor booking endpoints
"""
from datetime import datetime, timedelta
import pytest
from app.models import (
    BookingFeedback, BookingReschedule, BookingStatus, EventServiceProvider, Notification, SupplierReport,
)
from app.models.vendor import APPLICATION_APPROVED
from app.services.booking_service import format_long_date


def _create(client, headers, vendor_user, event_date, **extra):
    payload = {
        "vendor_id": vendor_user.id,
        "service_name": "Photo coverage",
        "event_date": event_date.isoformat(),
        "event_location": "Quezon City",
        **extra,
    }
    return client.post("/api/bookings/create", json=payload, headers=headers)


@pytest.mark.integration
class TestCreateBookingEndpoint:
    """Test POST /api/bookings/create"""

    def test_requires_auth(self, client, vendor_user, provider, future_event):
        """Test requires auth"""
        response = _create(client, {}, vendor_user, future_event)

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Unauthorized"}

    def test_create_booking(self, client, headers_for, client_user, vendor_user, provider, future_event):
        """Test create booking"""
        response = _create(client, headers_for(client_user), vendor_user, future_event, total_amount=25000)

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert isinstance(data["booking_id"], int)

    def test_missing_fields(self, client, headers_for, client_user):
        """Test missing fields"""
        response = client.post("/api/bookings/create", json={"service_name": "x"}, headers=headers_for(client_user))

        assert response.status_code == 422
        assert response.json()["success"] is False
        assert "details" in response.json()

    def test_same_day_conflict(self, client, headers_for, client_user, make_user, vendor_user, provider, future_event):
        """Test same day conflict"""
        other_client = make_user()
        assert _create(client, headers_for(other_client), vendor_user, future_event.replace(hour=9)).status_code == 201

        response = _create(client, headers_for(client_user), vendor_user, future_event)

        assert response.status_code == 409
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Schedule Unavailable"
        assert data["conflict"] is True
        assert "already booked for" in data["message"]

    def test_past_date(self, client, headers_for, client_user, vendor_user, provider):
        """Test past date"""
        response = _create(client, headers_for(client_user), vendor_user, datetime.now() - timedelta(days=1))

        assert response.status_code == 400
        assert response.json()["error"] == "Event date must be in the future"

    def test_unknown_vendor(self, client, headers_for, client_user, future_event, make_user):
        """Test unknown vendor"""
        stranger = make_user()
        response = _create(client, headers_for(client_user), stranger, future_event)

        assert response.status_code == 404
        assert response.json()["error"] == "Vendor not found or not verified"


@pytest.mark.integration
class TestListBookings:
    """Test booking listings"""

    def test_user_bookings_newest_first(self, client, headers_for, client_user, provider, make_booking):
        """Test user bookings newest first"""
        first = make_booking(client_user, provider=provider, event_date=datetime.now() + timedelta(days=10))
        second = make_booking(client_user, provider=provider, event_date=datetime.now() + timedelta(days=12))

        response = client.get("/api/bookings/user", headers=headers_for(client_user))

        assert response.status_code == 200
        ids = [b["id"] for b in response.json()["bookings"]]
        assert ids == [second.id, first.id]
        assert response.json()["bookings"][0]["vendor_name"] == "Lens & Light Studio"
        assert response.json()["bookings"][0]["booking_type"] == "supplier"

    def test_status_filter(self, client, headers_for, client_user, provider, make_booking):
        """Test status filter"""
        make_booking(client_user, provider=provider, status=BookingStatus.CONFIRMED)
        make_booking(client_user, provider=provider, event_date=datetime.now() + timedelta(days=50))

        response = client.get("/api/bookings/user?status=Confirmed", headers=headers_for(client_user))

        assert [b["status"] for b in response.json()["bookings"]] == ["Confirmed"]

    def test_vendor_bookings_include_venue_bookings(
        self, client, headers_for, client_user, venue_owner, venue, test_db_session, make_booking,
    ):
        """Test vendor bookings include venue bookings"""
        esp = EventServiceProvider(user_id=venue_owner.id, business_name="Ana Events", application_status=APPLICATION_APPROVED)
        test_db_session.add(esp)
        test_db_session.commit()
        make_booking(client_user, provider=esp)
        make_booking(client_user, venue=venue, start_date=(datetime.now() + timedelta(days=5)).date())

        response = client.get("/api/bookings/vendor", headers=headers_for(venue_owner))

        data = response.json()
        assert data["summary"] == {"total": 2, "supplier_bookings": 1, "venue_bookings": 1}
        assert {b["booking_type"] for b in data["bookings"]} == {"supplier", "venue"}
        assert data["bookings"][0]["client_email"] == "maria@example.com"

    def test_booking_detail_access(self, client, headers_for, client_user, vendor_user, provider, make_user, make_booking):
        """Test booking detail access"""
        booking = make_booking(client_user, provider=provider)
        stranger = make_user()

        assert client.get(f"/api/bookings/{booking.id}", headers=headers_for(client_user)).status_code == 200
        assert client.get(f"/api/bookings/{booking.id}", headers=headers_for(vendor_user)).status_code == 200
        assert client.get(f"/api/bookings/{booking.id}", headers=headers_for(stranger)).status_code == 403
        assert client.get("/api/bookings/9999", headers=headers_for(client_user)).status_code == 404


@pytest.mark.integration
class TestStatusAndReschedule:
    """Test confirm, reschedule and approval flow"""

    def test_confirm_rechecks_same_day_conflict(
        self, client, headers_for, test_db_session, client_user, make_user, vendor_user, provider, make_booking, future_event,
    ):
        """Test confirming fails when another active booking holds the same day"""
        make_booking(client_user, provider=provider, event_date=future_event)
        second = make_booking(make_user(), provider=provider, event_date=future_event.replace(hour=9))

        response = client.patch(
            f"/api/bookings/{second.id}/status", json={"status": "Confirmed"}, headers=headers_for(vendor_user)
        )

        assert response.status_code == 409
        assert response.json()["error"] == "Date unavailable"
        test_db_session.refresh(second)
        assert second.status == BookingStatus.PENDING

    def test_vendor_confirms(self, client, headers_for, test_db_session, client_user, vendor_user, provider, make_booking):
        """Test vendor confirms"""
        booking = make_booking(client_user, provider=provider)

        response = client.patch(
            f"/api/bookings/{booking.id}/status", json={"status": "Confirmed"}, headers=headers_for(vendor_user)
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Booking Confirmed"
        test_db_session.refresh(booking)
        assert booking.status == BookingStatus.CONFIRMED
        note = test_db_session.query(Notification).filter(Notification.user_id == client_user.id).one()
        assert (note.type, note.title) == ("booking_update", "Booking Updated")

    def test_invalid_status(self, client, headers_for, client_user, vendor_user, provider, make_booking):
        """Test invalid status"""
        booking = make_booking(client_user, provider=provider)

        response = client.patch(
            f"/api/bookings/{booking.id}/status", json={"status": "Completed"}, headers=headers_for(vendor_user)
        )
        assert response.status_code == 400

    def test_client_cannot_confirm(self, client, headers_for, client_user, provider, make_booking):
        """Test client cannot confirm"""
        booking = make_booking(client_user, provider=provider)

        response = client.patch(
            f"/api/bookings/{booking.id}/status", json={"status": "Confirmed"}, headers=headers_for(client_user)
        )
        assert response.status_code == 403

    def test_reschedule_approved(
        self, client, headers_for, test_db_session, client_user, vendor_user, provider, make_booking, future_event,
    ):
        """Test reschedule approved"""
        booking = make_booking(client_user, provider=provider, event_date=future_event, status=BookingStatus.CONFIRMED)
        new_date = future_event + timedelta(days=7)

        response = client.patch(
            f"/api/bookings/{booking.id}/reschedule",
            json={"new_event_date": new_date.isoformat()},
            headers=headers_for(client_user),
        )
        assert response.status_code == 200
        reschedule_id = response.json()["reschedule_id"]
        test_db_session.refresh(booking)
        assert booking.status == BookingStatus.PENDING

        listing = client.get("/api/bookings/user", headers=headers_for(client_user)).json()["bookings"][0]
        assert listing["has_pending_reschedule"] is True
        assert listing["requested_date"] == new_date.isoformat()

        response = client.patch(
            f"/api/bookings/{booking.id}/status", json={"status": "Confirmed"}, headers=headers_for(vendor_user)
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Reschedule approved!"

        test_db_session.refresh(booking)
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.event_date == new_date
        assert booking.remarks == f"Rescheduled to {format_long_date(new_date)}"
        assert test_db_session.get(BookingReschedule, reschedule_id).status == "Approved"

    def test_reschedule_rejected_keeps_date(
        self, client, headers_for, test_db_session, client_user, vendor_user, provider, make_booking, future_event,
    ):
        """Test reschedule rejected keeps date"""
        booking = make_booking(client_user, provider=provider, event_date=future_event, status=BookingStatus.CONFIRMED)
        client.patch(
            f"/api/bookings/{booking.id}/reschedule",
            json={"new_event_date": (future_event + timedelta(days=3)).isoformat()},
            headers=headers_for(client_user),
        )

        response = client.patch(
            f"/api/bookings/{booking.id}/status", json={"status": "Rejected"}, headers=headers_for(vendor_user)
        )

        assert response.json()["message"] == "Reschedule rejected"
        test_db_session.refresh(booking)
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.event_date == future_event

    def test_reschedule_into_conflict(
        self, client, headers_for, make_user, client_user, provider, make_booking, future_event,
    ):
        """Test reschedule into conflict"""
        booking = make_booking(client_user, provider=provider, event_date=future_event, status=BookingStatus.CONFIRMED)
        make_booking(make_user(), provider=provider, event_date=future_event + timedelta(days=2))

        response = client.patch(
            f"/api/bookings/{booking.id}/reschedule",
            json={"new_event_date": (future_event + timedelta(days=2)).isoformat()},
            headers=headers_for(client_user),
        )

        assert response.status_code == 409
        assert response.json() == {"success": False, "error": "Date unavailable", "conflict": True}

    def test_reschedule_requires_confirmed(self, client, headers_for, client_user, provider, make_booking, future_event):
        """Test reschedule requires confirmed"""
        booking = make_booking(client_user, provider=provider, event_date=future_event)

        response = client.patch(
            f"/api/bookings/{booking.id}/reschedule",
            json={"new_event_date": (future_event + timedelta(days=1)).isoformat()},
            headers=headers_for(client_user),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Only Confirmed bookings can be rescheduled"

    def test_reschedule_missing_date(self, client, headers_for, client_user, provider, make_booking):
        """Test reschedule missing date"""
        booking = make_booking(client_user, provider=provider, status=BookingStatus.CONFIRMED)

        response = client.patch(f"/api/bookings/{booking.id}/reschedule", json={}, headers=headers_for(client_user))
        assert response.status_code == 400

    def test_second_reschedule_request_conflicts(self, client, headers_for, client_user, provider, make_booking, future_event):
        """Test second reschedule request conflicts"""
        booking = make_booking(client_user, provider=provider, event_date=future_event, status=BookingStatus.CONFIRMED)
        body = {"new_event_date": (future_event + timedelta(days=4)).isoformat()}
        first = client.patch(f"/api/bookings/{booking.id}/reschedule", json=body, headers=headers_for(client_user))
        assert first.status_code == 200

        # Booking is Pending while the request is open, so a second one is refused
        response = client.patch(f"/api/bookings/{booking.id}/reschedule", json=body, headers=headers_for(client_user))
        assert response.status_code == 400
        assert response.json()["error"] == "Only Confirmed bookings can be rescheduled"


@pytest.mark.integration
class TestCancelCompleteFeedback:
    """Test cancel, complete and feedback"""

    def test_cancel_twice(self, client, headers_for, client_user, vendor_user, provider, make_booking, test_db_session):
        """Test cancel twice"""
        booking = make_booking(client_user, provider=provider)

        first = client.patch(f"/api/bookings/{booking.id}/cancel", headers=headers_for(client_user))
        second = client.patch(f"/api/bookings/{booking.id}/cancel", headers=headers_for(client_user))

        assert first.status_code == 200
        assert second.status_code == 400
        note = test_db_session.query(Notification).filter(Notification.user_id == vendor_user.id).one()
        assert note.type == "booking_cancelled"

    def test_only_client_cancels(self, client, headers_for, client_user, vendor_user, provider, make_booking):
        """Test only client cancels"""
        booking = make_booking(client_user, provider=provider)

        response = client.patch(f"/api/bookings/{booking.id}/cancel", headers=headers_for(vendor_user))
        assert response.status_code == 403

    def test_cancelled_frees_the_date(self, client, headers_for, client_user, make_user, vendor_user, provider, future_event):
        """Test cancelled frees the date"""
        booking_id = _create(client, headers_for(client_user), vendor_user, future_event).json()["booking_id"]
        client.patch(f"/api/bookings/{booking_id}/cancel", headers=headers_for(client_user))

        response = _create(client, headers_for(make_user()), vendor_user, future_event)
        assert response.status_code == 201

    def test_complete_before_event(self, client, headers_for, client_user, vendor_user, provider, make_booking, future_event):
        """Test complete before event"""
        booking = make_booking(client_user, provider=provider, event_date=future_event, status=BookingStatus.CONFIRMED)

        response = client.patch(f"/api/bookings/{booking.id}/complete", headers=headers_for(vendor_user))

        assert response.status_code == 400
        assert response.json()["error"].startswith("Cannot mark as completed before the event date")

    def test_complete_requires_confirmed(self, client, headers_for, client_user, vendor_user, provider, make_booking):
        """Test complete requires confirmed"""
        booking = make_booking(client_user, provider=provider, event_date=datetime.now() - timedelta(days=2))

        response = client.patch(f"/api/bookings/{booking.id}/complete", headers=headers_for(vendor_user))

        assert response.status_code == 400
        assert response.json()["error"] == (
            "Only Confirmed bookings can be marked as Completed. Current status: Pending"
        )

    def test_complete_and_feedback(
        self, client, headers_for, test_db_session, client_user, vendor_user, provider, make_booking,
    ):
        """Test complete and feedback"""
        booking = make_booking(
            client_user, provider=provider, event_date=datetime.now() - timedelta(days=2),
            status=BookingStatus.CONFIRMED,
        )

        response = client.patch(f"/api/bookings/{booking.id}/complete", headers=headers_for(vendor_user))
        assert response.status_code == 200
        test_db_session.refresh(booking)
        assert booking.status == BookingStatus.COMPLETED
        assert booking.remarks == "Service completed successfully"

        response = client.post(
            f"/api/bookings/{booking.id}/feedback",
            json={"rating": 4, "comment": "Great shots", "report": True, "report_reason": "Late arrival"},
            headers=headers_for(client_user),
        )
        assert response.status_code == 201

        test_db_session.refresh(provider)
        assert provider.average_rating == 4.0
        assert provider.total_reviews == 1
        report = test_db_session.query(SupplierReport).one()
        assert report.vendor_id == vendor_user.id
        assert report.reason == "Late arrival"

        again = client.post(
            f"/api/bookings/{booking.id}/feedback", json={"rating": 5}, headers=headers_for(client_user)
        )
        assert again.status_code == 409
        assert test_db_session.query(BookingFeedback).count() == 1

    def test_feedback_requires_completed(self, client, headers_for, client_user, provider, make_booking):
        """Test feedback requires completed"""
        booking = make_booking(client_user, provider=provider, status=BookingStatus.CONFIRMED)

        response = client.post(
            f"/api/bookings/{booking.id}/feedback", json={"rating": 5}, headers=headers_for(client_user)
        )
        assert response.status_code == 400

    def test_feedback_rating_range(self, client, headers_for, client_user, provider, make_booking):
        """Test feedback rating range"""
        booking = make_booking(client_user, provider=provider, status=BookingStatus.COMPLETED)

        response = client.post(
            f"/api/bookings/{booking.id}/feedback", json={"rating": 7}, headers=headers_for(client_user)
        )
        assert response.status_code == 422
