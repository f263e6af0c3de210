from fastapi import Depends
from sqlalchemy.orm import Session

from licensing.database import get_db
from licensing.services.notification_service import Notifier, get_notifier
from licensing.workflow.engine import TransitionEngine


def get_engine(db: Session = Depends(get_db), notifier: Notifier = Depends(get_notifier)) -> TransitionEngine:
    return TransitionEngine(db, notifier=notifier)
