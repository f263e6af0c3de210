from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from licensing.auth.dependencies import get_current_applicant
from licensing.database import get_db
from licensing.models.applicant import Applicant
from licensing.services import notification_service

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/")
def list_notifications(
    unread_only: bool = Query(False),
    current_applicant: Applicant = Depends(get_current_applicant),
    db: Session = Depends(get_db)
):
    notifications = notification_service.list_notifications(db, current_applicant.id, unread_only)
    return {
        "unread_count": sum(1 for n in notifications if not n.is_read),
        "notifications": [n.to_dict() for n in notifications],
    }


@router.post("/{notification_id}/read")
def mark_read(notification_id: int, current_applicant: Applicant = Depends(get_current_applicant),
              db: Session = Depends(get_db)):
    return notification_service.mark_notification_read(db, current_applicant.id, notification_id).to_dict()


@router.post("/read-all")
def mark_all_read(current_applicant: Applicant = Depends(get_current_applicant), db: Session = Depends(get_db)):
    updated = notification_service.mark_all_read(db, current_applicant.id)
    return {"message": f"{updated} notification(s) marked as read", "updated": updated}
