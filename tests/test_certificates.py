"""
Tests for background certificate issuance and status polling.
"""

import os

import pytest

from licensing.database import SessionLocal
from licensing.models.certificate import Certificate
from licensing.services.pdf_service import PDFGenerationError
from licensing.workflow.certificates import certificate_path, certificate_status, generate_certificate
from licensing.workflow.errors import NotFoundError


class BrokenPDF:
    def generate_license_certificate(self, application, certificate_number, signatures):
        raise PDFGenerationError("font missing")


@pytest.fixture
def approved(workflow, application):
    workflow.to_approved(application.id)
    return application


def test_status_is_pending_until_generated(db, approved):
    assert certificate_status(db, approved.id) == {"exists": False, "status": "pending"}


def test_status_before_approval(db, application):
    assert certificate_status(db, application.id) == {"exists": False, "status": None}


def test_status_for_unknown_application(db):
    with pytest.raises(NotFoundError):
        certificate_status(db, 4242)


def test_generation_writes_file_and_completes_row(db, notifier, approved):
    file_path = generate_certificate(approved.id, SessionLocal, notifier)

    assert file_path == certificate_path(f"CERT-{approved.application_number}")
    assert os.path.exists(file_path)
    with open(file_path, "rb") as f:
        assert f.read(4) == b"%PDF"

    db.expire_all()
    status = certificate_status(db, approved.id)
    assert status["exists"] is True
    assert status["status"] == "generated"
    assert status["certificate_id"] == f"CERT-{approved.application_number}"
    assert status["generated_date"]

    ready = notifier.last("certificate_ready")
    assert ready["certificate_number"] == f"CERT-{approved.application_number}"
    assert ready["to_email"] == approved.email


def test_generation_is_idempotent(db, notifier, approved):
    first = generate_certificate(approved.id, SessionLocal, notifier)
    second = generate_certificate(approved.id, SessionLocal, notifier)

    assert first == second
    assert notifier.kinds().count("certificate_ready") == 1


def test_failed_render_is_recorded(db, notifier, approved):
    assert generate_certificate(approved.id, SessionLocal, notifier, pdf=BrokenPDF()) is None

    db.expire_all()
    certificate = db.query(Certificate).filter(Certificate.application_id == approved.id).one()
    assert certificate.status == "failed"
    assert "font missing" in certificate.error_message
    assert certificate.file_path is None
    assert certificate_status(db, approved.id)["exists"] is False
    assert "certificate_ready" not in notifier.kinds()


def test_retry_after_failure(db, notifier, approved):
    generate_certificate(approved.id, SessionLocal, notifier, pdf=BrokenPDF())
    generate_certificate(approved.id, SessionLocal, notifier)

    db.expire_all()
    assert certificate_status(db, approved.id)["exists"] is True


def test_nothing_to_do_without_request(db, notifier, application):
    assert generate_certificate(application.id, SessionLocal, notifier) is None
    assert notifier.sent == []
