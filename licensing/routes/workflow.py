# licensing/routes/workflow.py
"""
Officer-facing workflow endpoints.

Transition bodies are accepted as plain JSON objects and handed to the engine
unparsed, so permission is always decided before the payload is validated.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Query
from sqlalchemy.orm import Session
import logging

from licensing.auth.dependencies import get_current_actor
from licensing.database import get_db, get_session_factory
from licensing.routes.deps import get_engine
from licensing.services.notification_service import Notifier, get_notifier
from licensing.workflow import documents, queries
from licensing.workflow.certificates import generate_certificate
from licensing.workflow.engine import TransitionEngine
from licensing.workflow.policy import Actor
from licensing.workflow.status import Action

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workflow", tags=["Workflow"])


@router.get("/pending")
def pending_applications(
    position_type: Optional[int] = Query(None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return queries.get_pending_applications(db, actor, position_type)


@router.get("/dashboard")
def dashboard(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return queries.dashboard_stats(db, actor)


@router.post("/{application_id}/appointment")
def schedule_appointment(
    application_id: int,
    payload: Dict[str, Any] = Body(...),
    actor: Actor = Depends(get_current_actor),
    engine: TransitionEngine = Depends(get_engine)
):
    return engine.schedule_appointment(application_id, actor, payload).to_dict()


@router.put("/appointments/{appointment_id}")
def reschedule_appointment(
    appointment_id: int,
    payload: Dict[str, Any] = Body(...),
    actor: Actor = Depends(get_current_actor),
    engine: TransitionEngine = Depends(get_engine)
):
    return engine.reschedule_appointment(appointment_id, actor, payload).to_dict()


@router.post("/{application_id}/documents/{document_id}/verify")
def verify_document(
    application_id: int,
    document_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return documents.verify_document(db, application_id, document_id, actor).to_dict()


@router.post("/{application_id}/approve")
def approve(
    application_id: int,
    payload: Optional[Dict[str, Any]] = Body(None),
    actor: Actor = Depends(get_current_actor),
    engine: TransitionEngine = Depends(get_engine)
):
    return engine.approve(application_id, actor, payload).to_dict()


@router.post("/{application_id}/reject")
def reject(
    application_id: int,
    payload: Dict[str, Any] = Body(...),
    actor: Actor = Depends(get_current_actor),
    engine: TransitionEngine = Depends(get_engine)
):
    return engine.apply_transition(application_id, Action.REJECT, actor, payload).to_dict()


@router.post("/{application_id}/otp")
def generate_otp(application_id: int, actor: Actor = Depends(get_current_actor),
                 engine: TransitionEngine = Depends(get_engine)):
    return engine.generate_otp(application_id, actor).to_dict()


@router.post("/{application_id}/sign")
def verify_and_sign(
    application_id: int,
    background_tasks: BackgroundTasks,
    payload: Dict[str, Any] = Body(...),
    actor: Actor = Depends(get_current_actor),
    engine: TransitionEngine = Depends(get_engine),
    notifier: Notifier = Depends(get_notifier)
):
    result = engine.apply_transition(application_id, Action.VERIFY_AND_SIGN, actor, payload)

    if any(e.kind == "certificate_requested" for e in result.side_effects):
        logger.info(f"📜 Scheduling certificate generation for application {application_id}")
        background_tasks.add_task(generate_certificate, application_id, get_session_factory(), notifier)
    return result.to_dict()
