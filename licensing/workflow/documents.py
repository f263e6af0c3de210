"""
Document sub-resource: applicant uploads, JE verification flags and the
system-generated PDFs attached as transition side effects.

Uploads and verification flags never change the application status, so they
do not take the application row lock.
"""
import logging
import re
from typing import Dict, Optional

from sqlalchemy.orm import Session

from licensing.models.application import PositionApplication
from licensing.models.document import ApplicationDocument
from licensing.utils.dates import utcnow
from licensing.utils.upload import store_bytes
from licensing.workflow.errors import AuthorizationError, NotFoundError, ValidationError
from licensing.workflow.policy import Actor
from licensing.workflow.status import (
    ApplicationStatus,
    DocumentType,
    Role,
    SYSTEM_DOCUMENT_TYPES,
    required_documents,
)

logger = logging.getLogger(__name__)

UPLOAD_STATUSES = (ApplicationStatus.DRAFT, ApplicationStatus.REJECTED)
MAX_UPLOAD_BYTES = 5 * 1024 * 1024

SYSTEM_FILE_NAMES = {
    DocumentType.RECOMMENDATION_FORM: "RecommendationForm_{number}.pdf",
    DocumentType.LICENSE_CERTIFICATE: "LicenseCertificate_{number}.pdf",
    DocumentType.PAYMENT_CHALLAN: "PaymentChallan_{number}.pdf",
}

PAN_PATTERN = re.compile(r"^[A-Z0-9]{10}$")
AADHAR_PATTERN = re.compile(r"^\d{12}$")


def _get_application(db: Session, application_id: int) -> PositionApplication:
    application = db.query(PositionApplication).filter(PositionApplication.id == application_id).first()
    if not application:
        raise NotFoundError(f"Application {application_id} not found")
    return application


def upload_document(db: Session, application_id: int, actor: Actor, document_type: int,
                    file_name: str, content: bytes, content_type: Optional[str] = None) -> ApplicationDocument:
    application = _get_application(db, application_id)

    if actor.role != Role.APPLICANT or application.applicant_id != actor.actor_id:
        raise AuthorizationError()
    if ApplicationStatus(application.status) not in UPLOAD_STATUSES:
        raise AuthorizationError()

    try:
        doc_type = DocumentType(int(document_type))
    except ValueError:
        raise ValidationError({"document_type": "Unknown document type"})
    if doc_type in SYSTEM_DOCUMENT_TYPES:
        raise ValidationError({"document_type": "System documents cannot be uploaded"})
    if not content:
        raise ValidationError({"file": "File is empty"})
    if len(content) > MAX_UPLOAD_BYTES:
        raise ValidationError({"file": "File exceeds 5 MB"})

    handle = store_bytes(content)

    # One file per type, except additional documents
    existing = None
    if doc_type != DocumentType.ADDITIONAL_DOCUMENT:
        existing = next(iter(application.documents_of_type(doc_type)), None)

    document = existing or ApplicationDocument(application_id=application.id, document_type=int(doc_type))
    document.file_name = file_name or f"{doc_type.name.lower()}.bin"
    document.file_size = len(content)
    document.content_type = content_type
    document.storage_handle = handle
    document.is_verified = False
    document.verified_by = None
    document.verified_at = None
    document.uploaded_at = utcnow()
    if existing is None:
        application.documents.append(document)

    db.commit()
    db.refresh(document)
    logger.info(f"📎 Document {doc_type.name} stored for application {application.id} ({len(content)} bytes)")
    return document


def verify_document(db: Session, application_id: int, document_id: int, actor: Actor) -> ApplicationDocument:
    """JE marks a single uploaded document verified while the appointment is open."""
    application = _get_application(db, application_id)

    if actor.role != Role.JUNIOR_ENGINEER:
        raise AuthorizationError()
    if ApplicationStatus(application.status) != ApplicationStatus.APPOINTMENT_SCHEDULED:
        raise AuthorizationError()

    document = next((d for d in application.documents if d.id == document_id), None)
    if document is None:
        raise NotFoundError(f"Document {document_id} not found")
    if document.is_system_generated:
        raise ValidationError({"document_id": "System documents are not verified by officers"})

    if not document.is_verified:
        document.is_verified = True
        document.verified_by = actor.actor_id
        document.verified_at = utcnow()
        db.commit()
        logger.info(f"✅ Document {document.id} verified by JE {actor.actor_id}")
    return document


def missing_required_documents(application) -> list:
    present = {d.document_type for d in application.documents}
    return [doc_type for doc_type in required_documents(application.position_type) if int(doc_type) not in present]


def unverified_required_documents(application) -> list:
    required = {int(t) for t in required_documents(application.position_type)}
    return [d for d in application.documents if d.document_type in required and not d.is_verified]


def submission_errors(application) -> Dict[str, str]:
    """Field-level reasons the application cannot be submitted yet."""
    errors = {}
    if not application.first_name or not application.last_name:
        errors["name"] = "First and last name are required"
    if not application.email:
        errors["email"] = "Email is required"
    if not application.mobile_number:
        errors["mobile_number"] = "Mobile number is required"
    if not application.pan_number or not PAN_PATTERN.match(application.pan_number):
        errors["pan_number"] = "PAN must be 10 characters"
    if not application.aadhar_number or not AADHAR_PATTERN.match(application.aadhar_number):
        errors["aadhar_number"] = "Aadhar must be 12 digits"
    if application.get_address("local") is None:
        errors["addresses"] = "A local address is required"
    if not application.qualifications:
        errors["qualifications"] = "At least one qualification is required"
    missing = missing_required_documents(application)
    if missing:
        errors["documents"] = "Missing: " + ", ".join(t.name for t in missing)
    return errors


def attach_system_document(application, document_type: DocumentType, content: bytes) -> ApplicationDocument:
    """Create or replace the single system-generated document of this type. Caller commits."""
    handle = store_bytes(content)
    existing = next(iter(application.documents_of_type(document_type)), None)
    document = existing or ApplicationDocument(application_id=application.id, document_type=int(document_type))
    document.file_name = SYSTEM_FILE_NAMES[document_type].format(number=application.application_number)
    document.file_size = len(content)
    document.content_type = "application/pdf"
    document.storage_handle = handle
    document.is_system_generated = True
    document.is_verified = True
    document.uploaded_at = utcnow()
    if existing is None:
        application.documents.append(document)
    return document


def remove_system_document(application, document_type: DocumentType) -> None:
    for document in application.documents_of_type(document_type):
        application.documents.remove(document)
