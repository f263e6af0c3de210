import asyncio
import logging
from typing import List, Optional

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from licensing.models.notification import Notification
from licensing.services import email_service
from licensing.utils.dates import utcnow
from licensing.workflow.errors import NotFoundError

logger = logging.getLogger(__name__)

EMAIL_SENDERS = {
    "signature_otp": email_service.send_signature_otp_email,
    "appointment": email_service.send_appointment_email,
    "rejection": email_service.send_rejection_email,
    "payment_received": email_service.send_payment_received_email,
    "certificate_ready": email_service.send_certificate_ready_email,
    "status_update": email_service.send_status_update_email,
}


class Notifier:
    """Out-of-band delivery (email). Called only after the transaction commits."""

    def dispatch(self, kind: str, **kwargs):
        raise NotImplementedError


class EmailNotifier(Notifier):
    """Sends through fastapi-mail; inside a request the sends run as background tasks."""

    def __init__(self, background_tasks: Optional[BackgroundTasks] = None):
        self.background_tasks = background_tasks

    def dispatch(self, kind: str, **kwargs):
        sender = EMAIL_SENDERS.get(kind)
        if sender is None:
            raise ValueError(f"Unknown notification kind: {kind}")
        if not kwargs.get("to_email"):
            logger.warning(f"⚠️ No recipient for {kind} notification, skipped")
            return

        if self.background_tasks is not None:
            self.background_tasks.add_task(sender, **kwargs)
            logger.info(f"📧 Queued {kind} email to {kwargs['to_email']}")
        else:
            asyncio.run(sender(**kwargs))


# -------------------- IN-APP NOTIFICATIONS --------------------
def create_notification(db: Session, application, notification_type: str, title: str, message: str) -> Notification:
    """Add an in-app notification for the application's owner. Caller commits."""
    notification = Notification(
        applicant_id=application.applicant_id,
        application_id=application.id,
        application_number=application.application_number,
        notification_type=notification_type,
        title=title,
        message=message,
    )
    db.add(notification)
    return notification


def list_notifications(db: Session, applicant_id: int, unread_only: bool = False) -> List[Notification]:
    query = db.query(Notification).filter(Notification.applicant_id == applicant_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()


def mark_notification_read(db: Session, applicant_id: int, notification_id: int) -> Notification:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.applicant_id == applicant_id
    ).first()
    if not notification:
        raise NotFoundError("Notification not found")

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utcnow()
        db.commit()
    return notification


def mark_all_read(db: Session, applicant_id: int) -> int:
    updated = db.query(Notification).filter(
        Notification.applicant_id == applicant_id,
        Notification.is_read.is_(False)
    ).update({"is_read": True, "read_at": utcnow()}, synchronize_session=False)
    db.commit()
    return updated


def get_notifier(background_tasks: BackgroundTasks) -> Notifier:
    """FastAPI dependency; overridden in tests."""
    return EmailNotifier(background_tasks)
