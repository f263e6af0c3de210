"""
Certificate issuance.

The engine only records a pending Certificate row when the final City Engineer
signature lands. generate_certificate() is the background job that renders the
PDF and completes the row in a single commit; certificate_status() is what
clients poll.
"""
import logging
import os
from typing import Callable, Optional

from sqlalchemy.orm import Session

from licensing.config import settings
from licensing.models.application import PositionApplication
from licensing.models.certificate import Certificate
from licensing.services.notification_service import Notifier
from licensing.services.pdf_service import PDFGenerator, pdf_generator
from licensing.utils.dates import utcnow
from licensing.workflow.errors import NotFoundError
from licensing.workflow.status import DocumentType

logger = logging.getLogger(__name__)

CERTIFICATE_SUBDIR = "certificates"


def certificate_path(certificate_number: str) -> str:
    return os.path.join(settings.STORAGE_DIR, CERTIFICATE_SUBDIR, f"{certificate_number}.pdf")


def generate_certificate(application_id: int, session_factory: Callable[[], Session],
                         notifier: Optional[Notifier] = None, pdf: Optional[PDFGenerator] = None) -> Optional[str]:
    """Render and attach the licence certificate. Safe to run more than once."""
    pdf = pdf or pdf_generator
    db = session_factory()
    try:
        certificate = db.query(Certificate).filter(Certificate.application_id == application_id).first()
        if certificate is None:
            logger.warning(f"⚠️ No certificate requested for application {application_id}")
            return None
        if certificate.status == "generated":
            return certificate.file_path

        application = db.query(PositionApplication).filter(PositionApplication.id == application_id).first()
        signatures = [
            s for s in application.signatures
            if s.submission_round == application.submission_round
            and s.target_document == int(DocumentType.LICENSE_CERTIFICATE)
        ]

        try:
            content = pdf.generate_license_certificate(application, certificate.certificate_number, signatures)
            file_path = certificate_path(certificate.certificate_number)
            os.makedirs(os.path.dirname(file_path), exist_ok=True)
            with open(file_path, "wb") as f:
                f.write(content)
        except Exception as e:
            logger.error(f"❌ Certificate generation failed for application {application_id}: {str(e)}")
            certificate.status = "failed"
            certificate.error_message = str(e)
            db.commit()
            return None

        # Path, timestamp and status become visible together.
        certificate.file_path = file_path
        certificate.generated_at = utcnow()
        certificate.status = "generated"
        certificate.error_message = None
        db.commit()
        logger.info(f"📜 Certificate {certificate.certificate_number} generated for application {application_id}")

        if notifier is not None:
            to_email = application.email or application.applicant.email
            try:
                notifier.dispatch(
                    "certificate_ready",
                    to_email=to_email,
                    name=application.full_name,
                    application_number=application.application_number,
                    certificate_number=certificate.certificate_number,
                )
            except Exception as e:
                logger.error(f"❌ Failed to dispatch certificate email: {str(e)}")
        return file_path
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def certificate_status(db: Session, application_id: int) -> dict:
    application = db.query(PositionApplication).filter(PositionApplication.id == application_id).first()
    if not application:
        raise NotFoundError(f"Application {application_id} not found")

    certificate = db.query(Certificate).filter(Certificate.application_id == application_id).first()
    if certificate is None or certificate.status != "generated":
        return {
            "exists": False,
            "status": certificate.status if certificate else None,
        }
    return {
        "exists": True,
        "status": certificate.status,
        "certificate_id": certificate.certificate_number,
        "generated_date": certificate.generated_at.isoformat(),
    }
