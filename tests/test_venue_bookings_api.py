"""
Integration tests for venue booking endpoints
"""
from datetime import date, datetime, time, timedelta
import pytest
from app.models import Booking, BookingStatus, Notification, VenueAvailability
from app.services.booking_service import format_long_date


def _book(client, headers, venue, start, end=None, **extra):
    payload = {
        "venue_id": venue.id,
        "event_type": "Wedding",
        "start_date": start.isoformat(),
        "guest_count": 120,
        "event_location": "Tagaytay City",
        **extra,
    }
    if end is not None:
        payload["end_date"] = end.isoformat()
    return client.post("/api/venue-bookings/create", json=payload, headers=headers)



def _block(client, headers, venue, day):
    return client.post(
        "/api/venue/availability",
        json={"venue_id": venue.id, "date": day.isoformat(), "is_available": False},
        headers=headers,
    )

@pytest.fixture
def start_day():
    return date.today() + timedelta(days=45)


@pytest.mark.integration
class TestCreateVenueBookingEndpoint:
    """Test POST /api/venue-bookings/create"""

    def test_create_without_warning(self, client, headers_for, client_user, venue, venue_owner, start_day, test_db_session):
        """Test create without warning"""
        response = _book(client, headers_for(client_user), venue, start_day, event_time="15:30")

        assert response.status_code == 201
        data = response.json()
        assert data["capacity_warning"] is None

        booking = test_db_session.get(Booking, data["booking_id"])
        assert booking.end_date == start_day
        assert booking.event_date.hour == 15
        assert booking.additional_notes.splitlines() == ["Guest Count: 120", "Event Time: 15:30"]

        note = test_db_session.query(Notification).filter(Notification.user_id == venue_owner.id).one()
        assert note.type == "venue_booking_request"

    def test_capacity_warning_returned(self, client, headers_for, client_user, venue, start_day):
        """Test capacity warning returned"""
        response = _book(client, headers_for(client_user), venue, start_day, guest_count=151)

        assert response.status_code == 201
        assert response.json()["capacity_warning"] == "Guest count (151) exceeds venue capacity (150)"

    def test_overlap_is_conflict(self, client, headers_for, client_user, make_user, venue, start_day):
        """Test overlap is conflict"""
        assert _book(client, headers_for(client_user), venue, start_day, start_day + timedelta(days=2)).status_code == 201

        response = _book(client, headers_for(make_user()), venue, start_day + timedelta(days=2))

        assert response.status_code == 409
        assert response.json() == {
            "success": False,
            "error": "Venue is already booked for the selected dates",
            "conflict": True,
        }

    def test_day_after_range_is_free(self, client, headers_for, client_user, make_user, venue, start_day):
        """Test day after range is free"""
        _book(client, headers_for(client_user), venue, start_day, start_day + timedelta(days=2))

        response = _book(client, headers_for(make_user()), venue, start_day + timedelta(days=3))
        assert response.status_code == 201

    def test_owner_blocked_day(self, client, headers_for, client_user, venue_owner, venue, start_day):
        """Test owner blocked day"""
        created = client.post(
            "/api/venue/availability",
            json={"venue_id": venue.id, "date": start_day.isoformat(), "is_available": False},
            headers=headers_for(venue_owner),
        )
        assert created.status_code == 201

        response = _book(client, headers_for(client_user), venue, start_day)
        assert response.status_code == 409

    def test_past_start(self, client, headers_for, client_user, venue):
        """Test past start"""
        response = _book(client, headers_for(client_user), venue, date.today() - timedelta(days=1))

        assert response.status_code == 400
        assert response.json()["error"] == "Start date cannot be in the past"

    def test_inactive_venue(self, client, headers_for, client_user, venue, start_day, test_db_session):
        """Test inactive venue"""
        venue.status = "Inactive"
        test_db_session.commit()

        response = _book(client, headers_for(client_user), venue, start_day)
        assert response.status_code == 404


@pytest.mark.integration
class TestVenueBookingLifecycle:
    """Test owner decisions, cancel and reschedule"""

    def test_owner_confirms(self, client, headers_for, client_user, venue_owner, venue, start_day, test_db_session):
        """Test owner confirms"""
        booking_id = _book(client, headers_for(client_user), venue, start_day).json()["booking_id"]

        response = client.patch(
            f"/api/venue-bookings/{booking_id}/status", json={"status": "Confirmed"}, headers=headers_for(venue_owner)
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Booking confirmed successfully"
        assert test_db_session.get(Booking, booking_id).status == BookingStatus.CONFIRMED

    def test_non_owner_gets_not_found(self, client, headers_for, client_user, venue, start_day):
        """Test non owner gets not found"""
        booking_id = _book(client, headers_for(client_user), venue, start_day).json()["booking_id"]

        response = client.patch(
            f"/api/venue-bookings/{booking_id}/status", json={"status": "Confirmed"}, headers=headers_for(client_user)
        )
        assert response.status_code == 404

    def test_owner_and_client_listings(self, client, headers_for, client_user, venue_owner, venue, start_day):
        """Test owner and client listings"""
        _book(client, headers_for(client_user), venue, start_day)

        mine = client.get("/api/venue-bookings/user", headers=headers_for(client_user)).json()["bookings"]
        owned = client.get("/api/venue-bookings/owner", headers=headers_for(venue_owner)).json()["bookings"]

        assert len(mine) == 1
        assert mine[0]["venue_name"] == "Garden Pavilion"
        assert owned[0]["client_name"] == "Maria Santos"

    def test_stranger_cannot_view(self, client, headers_for, client_user, make_user, venue, start_day):
        """Test stranger cannot view"""
        booking_id = _book(client, headers_for(client_user), venue, start_day).json()["booking_id"]

        response = client.get(f"/api/venue-bookings/{booking_id}", headers=headers_for(make_user()))
        assert response.status_code == 404

    def test_cancel_only_own(self, client, headers_for, client_user, make_user, venue, start_day, test_db_session):
        """Test cancel only own"""
        booking_id = _book(client, headers_for(client_user), venue, start_day).json()["booking_id"]

        assert client.patch(f"/api/venue-bookings/{booking_id}/cancel", headers=headers_for(make_user())).status_code == 404
        assert client.patch(f"/api/venue-bookings/{booking_id}/cancel", headers=headers_for(client_user)).status_code == 200
        assert test_db_session.get(Booking, booking_id).status == BookingStatus.CANCELLED

    def test_reschedule_returns_to_pending(
        self, client, headers_for, client_user, venue_owner, venue, start_day, test_db_session,
    ):
        """Test reschedule returns to pending"""
        booking_id = _book(client, headers_for(client_user), venue, start_day, start_day + timedelta(days=1)).json()["booking_id"]
        client.patch(
            f"/api/venue-bookings/{booking_id}/status", json={"status": "Confirmed"}, headers=headers_for(venue_owner)
        )

        new_start = start_day + timedelta(days=10)
        response = client.patch(
            f"/api/venue-bookings/{booking_id}/reschedule",
            json={"new_start_date": new_start.isoformat(), "new_end_date": (new_start + timedelta(days=1)).isoformat()},
            headers=headers_for(client_user),
        )

        assert response.status_code == 200
        booking = test_db_session.get(Booking, booking_id)
        test_db_session.refresh(booking)
        assert booking.status == BookingStatus.PENDING
        assert (booking.start_date, booking.end_date) == (new_start, new_start + timedelta(days=1))

    def test_reschedule_onto_other_booking(self, client, headers_for, client_user, make_user, venue, start_day):
        """Test reschedule onto other booking"""
        booking_id = _book(client, headers_for(client_user), venue, start_day).json()["booking_id"]
        _book(client, headers_for(make_user()), venue, start_day + timedelta(days=5))

        response = client.patch(
            f"/api/venue-bookings/{booking_id}/reschedule",
            json={"new_start_date": (start_day + timedelta(days=5)).isoformat()},
            headers=headers_for(client_user),
        )
        assert response.status_code == 409
        assert response.json()["error"] == "Venue is not available for the new dates"

    def test_reschedule_onto_blocked_day(
        self, client, headers_for, client_user, venue_owner, venue, start_day, test_db_session,
    ):
        """Test a booking cannot be moved onto a day the owner closed"""
        blocked_day = start_day + timedelta(days=10)
        assert _block(client, headers_for(venue_owner), venue, blocked_day).status_code == 201
        booking_id = _book(client, headers_for(client_user), venue, start_day).json()["booking_id"]

        response = client.patch(
            f"/api/venue-bookings/{booking_id}/reschedule",
            json={"new_start_date": blocked_day.isoformat()},
            headers=headers_for(client_user),
        )

        assert response.status_code == 409
        assert response.json()["error"] == f"Venue is not available on {format_long_date(blocked_day)}"
        booking = test_db_session.get(Booking, booking_id)
        test_db_session.refresh(booking)
        assert booking.start_date == start_day

    def test_confirm_over_blocked_day(
        self, client, headers_for, client_user, venue_owner, venue, start_day, test_db_session,
    ):
        """Test the owner cannot confirm a booking on a day they closed afterwards"""
        booking_id = _book(client, headers_for(client_user), venue, start_day).json()["booking_id"]
        test_db_session.add(VenueAvailability(
            venue_id=venue.id, date=start_day, start_time=time(0, 0), end_time=time(23, 59, 59), is_available=False,
        ))
        test_db_session.commit()

        response = client.patch(
            f"/api/venue-bookings/{booking_id}/status", json={"status": "Confirmed"}, headers=headers_for(venue_owner)
        )

        assert response.status_code == 409
        booking = test_db_session.get(Booking, booking_id)
        test_db_session.refresh(booking)
        assert booking.status == BookingStatus.PENDING

    def test_confirm_over_overlapping_booking(
        self, client, headers_for, client_user, make_user, venue_owner, venue, start_day, make_booking, test_db_session,
    ):
        """Test confirming re-checks overlapping active bookings"""
        event_date = datetime.combine(start_day, time(10, 0))
        make_booking(client_user, venue=venue, event_date=event_date, start_date=start_day, end_date=start_day)
        second = make_booking(make_user(), venue=venue, event_date=event_date, start_date=start_day, end_date=start_day)

        response = client.patch(
            f"/api/venue-bookings/{second.id}/status", json={"status": "Confirmed"}, headers=headers_for(venue_owner)
        )

        assert response.status_code == 409
        assert response.json()["error"] == "Venue is already booked for the selected dates"
        test_db_session.refresh(second)
        assert second.status == BookingStatus.PENDING


@pytest.mark.integration
class TestVenueRangeAvailability:
    """Test GET /api/venues/{id}/availability"""

    def test_free_range(self, client, venue, start_day):
        """Test free range"""
        response = client.get(f"/api/venues/{venue.id}/availability", params={"start_date": start_day.isoformat()})

        assert response.status_code == 200
        data = response.json()
        assert data["available"] is True
        assert data["conflicting_bookings"] == []
        assert data["venue"] == {"id": venue.id, "name": "Garden Pavilion", "capacity": 150}

    def test_conflicting_range(self, client, headers_for, client_user, venue, start_day):
        """Test conflicting range"""
        _book(client, headers_for(client_user), venue, start_day, start_day + timedelta(days=1))

        response = client.get(
            f"/api/venues/{venue.id}/availability",
            params={"start_date": (start_day - timedelta(days=3)).isoformat(), "end_date": start_day.isoformat()},
        )

        data = response.json()
        assert data["available"] is False
        assert data["conflicting_bookings"] == [{
            "start_date": start_day.isoformat(),
            "end_date": (start_day + timedelta(days=1)).isoformat(),
            "status": "Pending",
        }]

    def test_blocked_day_reported(self, client, headers_for, venue_owner, venue, start_day):
        """Test owner-closed days make the range unavailable"""
        _block(client, headers_for(venue_owner), venue, start_day + timedelta(days=1))

        data = client.get(
            f"/api/venues/{venue.id}/availability",
            params={"start_date": start_day.isoformat(), "end_date": (start_day + timedelta(days=2)).isoformat()},
        ).json()

        assert data["available"] is False
        assert data["conflicting_bookings"] == []
        assert data["blocked_dates"] == [(start_day + timedelta(days=1)).isoformat()]


    def test_unknown_venue(self, client, start_day):
        """Test unknown venue"""
        response = client.get("/api/venues/999/availability", params={"start_date": start_day.isoformat()})
        assert response.status_code == 404
