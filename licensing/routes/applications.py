# licensing/routes/applications.py
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
import logging
import os

from licensing.auth.dependencies import get_current_actor, get_current_applicant
from licensing.config import settings
from licensing.database import get_db
from licensing.models.applicant import Applicant
from licensing.models.certificate import Certificate
from licensing.routes.deps import get_engine
from licensing.schemas.applicant import ApplicationCreate
from licensing.services.account_service import ApplicantService
from licensing.workflow import documents, queries
from licensing.workflow.certificates import certificate_status
from licensing.workflow.engine import TransitionEngine
from licensing.workflow.errors import NotFoundError
from licensing.workflow.policy import Actor
from licensing.workflow.status import ApplicationStatus, Role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])


def _applicant_actor(applicant: Applicant) -> Actor:
    return Actor(role=Role.APPLICANT, actor_id=applicant.id)


def _auto_assign(engine: TransitionEngine, result) -> Dict[str, Any]:
    """Push a freshly submitted application into the Junior Engineer queue."""
    body = result.to_dict()
    if settings.AUTO_ASSIGN_ON_SUBMIT and result.new_status == ApplicationStatus.SUBMITTED:
        assigned = engine.assign(result.application_id)
        body["new_status"] = int(assigned.new_status)
        body["new_status_name"] = assigned.to_dict()["new_status_name"]
        body["side_effects"].extend(e.to_dict() for e in assigned.side_effects)
    return body


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_application(
    data: ApplicationCreate,
    current_applicant: Applicant = Depends(get_current_applicant),
    db: Session = Depends(get_db)
):
    application = ApplicantService.create_application(db, current_applicant, data.position_type)
    return queries.summary(application)


@router.get("/mine")
def my_applications(
    current_applicant: Applicant = Depends(get_current_applicant),
    db: Session = Depends(get_db)
):
    return queries.get_applicant_applications(db, current_applicant.id)


@router.get("/{application_id}")
def get_application(application_id: int, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return queries.get_application(db, application_id, actor)


@router.get("/{application_id}/history")
def get_history(application_id: int, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return queries.get_status_history(db, application_id, actor)


@router.put("/{application_id}/draft")
def save_draft(
    application_id: int,
    payload: Dict[str, Any] = Body(...),
    current_applicant: Applicant = Depends(get_current_applicant),
    engine: TransitionEngine = Depends(get_engine)
):
    return engine.save_draft(application_id, _applicant_actor(current_applicant), payload).to_dict()


@router.post("/{application_id}/submit")
def submit_application(
    application_id: int,
    current_applicant: Applicant = Depends(get_current_applicant),
    engine: TransitionEngine = Depends(get_engine)
):
    result = engine.submit(application_id, _applicant_actor(current_applicant))
    return _auto_assign(engine, result)


@router.post("/{application_id}/resubmit")
def resubmit_application(
    application_id: int,
    current_applicant: Applicant = Depends(get_current_applicant),
    engine: TransitionEngine = Depends(get_engine)
):
    result = engine.resubmit(application_id, _applicant_actor(current_applicant))
    return _auto_assign(engine, result)


@router.post("/{application_id}/documents", status_code=status.HTTP_201_CREATED)
def upload_document(
    application_id: int,
    document_type: int = Form(...),
    file: UploadFile = File(...),
    current_applicant: Applicant = Depends(get_current_applicant),
    db: Session = Depends(get_db)
):
    content = file.file.read()
    document = documents.upload_document(
        db, application_id, _applicant_actor(current_applicant), document_type,
        file.filename, content, file.content_type
    )
    return document.to_dict()


@router.get("/{application_id}/certificate")
def get_certificate_status(application_id: int, actor: Actor = Depends(get_current_actor),
                           db: Session = Depends(get_db)):
    queries.get_status_history(db, application_id, actor)  # ownership check
    return certificate_status(db, application_id)


@router.get("/{application_id}/certificate/download")
def download_certificate(application_id: int, actor: Actor = Depends(get_current_actor),
                         db: Session = Depends(get_db)):
    queries.get_status_history(db, application_id, actor)
    certificate = db.query(Certificate).filter(Certificate.application_id == application_id).first()
    if not certificate or certificate.status != "generated":
        raise NotFoundError("Certificate not generated yet")
    if not os.path.isfile(certificate.file_path):
        logger.error(f"❌ Certificate file missing on disk: {certificate.file_path}")
        raise HTTPException(status_code=404, detail="Certificate file not found")

    return FileResponse(
        certificate.file_path,
        filename=f"{certificate.certificate_number}.pdf",
        media_type="application/pdf"
    )
