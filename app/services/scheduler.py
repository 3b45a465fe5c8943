"""
APScheduler Service
Handles background tasks like booking reminders and completion prompts
"""
import logging
from datetime import datetime, timedelta
from typing import Optional
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.config import settings
from app.database import SessionLocal
from app.models import Booking, BookingStatus
from app.services.booking_service import format_long_datetime
from app.services.notification_service import notify

logger = logging.getLogger(__name__)

COMPLETION_GRACE = timedelta(days=1)


def send_booking_reminders(db: Session, now: Optional[datetime] = None) -> int:
    """
    Remind both parties of Confirmed bookings starting within the lead time.
    Each booking is reminded once.

    Returns:
        Number of bookings reminded
    """
    now = now or datetime.now()
    horizon = now + timedelta(hours=settings.reminder_lead_hours)

    bookings = db.query(Booking).filter(
        Booking.status == BookingStatus.CONFIRMED,
        Booking.event_date >= now,
        Booking.event_date <= horizon,
        Booking.reminder_sent.isnot(True),  # Only send once
    ).all()

    sent = 0
    for booking in bookings:
        when = format_long_datetime(booking.event_date)
        booking.reminder_sent = True
        db.commit()

        notify(
            db, booking.user_id, "booking_reminder", "Upcoming Booking",
            f"Reminder: {booking.service_name} is scheduled for {when}",
        )
        notify(
            db, booking.owner_user_id, "booking_reminder", "Upcoming Booking",
            f"Reminder: you have a booking for {booking.service_name} on {when}",
        )
        sent += 1
        logger.info("Reminder sent", extra={"booking_id": booking.id})
    return sent


def send_completion_prompts(db: Session, now: Optional[datetime] = None) -> int:
    """Ask owners to mark bookings completed once the event is over a day past."""
    now = now or datetime.now()

    bookings = db.query(Booking).filter(
        Booking.status == BookingStatus.CONFIRMED,
        Booking.event_date < now - COMPLETION_GRACE,
        Booking.completion_prompt_sent.isnot(True),
    ).all()

    sent = 0
    for booking in bookings:
        booking.completion_prompt_sent = True
        db.commit()

        notify(
            db, booking.owner_user_id, "booking_completion_due", "Mark Booking as Completed",
            f"The event for {booking.service_name} on {format_long_datetime(booking.event_date)} has passed. "
            "Please mark the booking as completed so the client can leave feedback.",
        )
        sent += 1
        logger.info("Completion prompt sent", extra={"booking_id": booking.id})
    return sent


class SchedulerService:
    """Service to manage background scheduler tasks"""

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory
        self.scheduler = BackgroundScheduler()
        self._setup_jobs()

    def _setup_jobs(self):
        """Setup all background jobs"""
        # Check for reminders every 15 minutes
        self.scheduler.add_job(
            self._run_booking_reminders,
            IntervalTrigger(minutes=15),
            id="booking_reminders",
            name="Send booking reminders",
            replace_existing=True
        )

        # Check for finished events every hour
        self.scheduler.add_job(
            self._run_completion_prompts,
            IntervalTrigger(hours=1),
            id="completion_prompts",
            name="Send completion prompts",
            replace_existing=True
        )

    def _run(self, job, label: str) -> None:
        db = self.session_factory()
        try:
            job(db)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Error in %s job", label)
        finally:
            db.close()

    def _run_booking_reminders(self):
        self._run(send_booking_reminders, "booking reminders")

    def _run_completion_prompts(self):
        self._run(send_completion_prompts, "completion prompts")

    def start(self):
        """Start the scheduler"""
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Scheduler started")

    def stop(self):
        """Stop the scheduler"""
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Scheduler stopped")


# Global scheduler instance
_scheduler_service = None


def get_scheduler() -> SchedulerService:
    """Get or create scheduler instance"""
    global _scheduler_service
    if _scheduler_service is None:
        _scheduler_service = SchedulerService()
    return _scheduler_service


def start_scheduler():
    """Start the background scheduler"""
    scheduler = get_scheduler()
    scheduler.start()


def stop_scheduler():
    """Stop the background scheduler"""
    scheduler = get_scheduler()
    scheduler.stop()
