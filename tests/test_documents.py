"""
Tests for applicant document uploads and submission checks.
"""

import pytest

from conftest import make_applicant, make_application
from licensing.utils.upload import read_stored
from licensing.workflow import documents
from licensing.workflow.errors import AuthorizationError, NotFoundError, ValidationError
from licensing.workflow.policy import Actor
from licensing.workflow.status import DocumentType, PositionType, Role


def upload(db, application, actor, document_type=DocumentType.ADDITIONAL_DOCUMENT, content=b"%PDF-1.4 scan"):
    return documents.upload_document(
        db, application.id, actor, int(document_type), "scan.pdf", content, "application/pdf"
    )


class TestUpload:
    def test_upload_stores_content(self, db, applicant_actor, application):
        document = upload(db, application, applicant_actor, content=b"experience letter")

        assert document.file_size == len(b"experience letter")
        assert document.is_verified is False
        assert read_stored(document.storage_handle) == b"experience letter"

    def test_reupload_replaces_same_type(self, db, applicant_actor, application):
        before = len(application.documents)
        original = application.documents_of_type(DocumentType.PAN_CARD)[0]

        replaced = upload(db, application, applicant_actor, DocumentType.PAN_CARD, b"new pan scan")

        assert replaced.id == original.id
        assert len(application.documents) == before
        assert read_stored(replaced.storage_handle) == b"new pan scan"

    def test_additional_documents_accumulate(self, db, applicant_actor, application):
        upload(db, application, applicant_actor, content=b"one")
        upload(db, application, applicant_actor, content=b"two")
        assert len(application.documents_of_type(DocumentType.ADDITIONAL_DOCUMENT)) == 2

    def test_reupload_clears_verification(self, db, applicant_actor, application):
        pan = application.documents_of_type(DocumentType.PAN_CARD)[0]
        pan.is_verified = True
        db.commit()

        document = upload(db, application, applicant_actor, DocumentType.PAN_CARD, b"rescanned")
        assert document.is_verified is False

    def test_only_owner_can_upload(self, db, application):
        stranger = make_applicant(db, email="stranger@example.com")
        with pytest.raises(AuthorizationError):
            upload(db, application, Actor(role=Role.APPLICANT, actor_id=stranger.id))

    def test_officers_cannot_upload(self, db, actors, application):
        with pytest.raises(AuthorizationError):
            upload(db, application, actors[Role.JUNIOR_ENGINEER])

    def test_uploads_closed_once_submitted(self, db, workflow, applicant_actor, application):
        workflow.submit(application.id)
        with pytest.raises(AuthorizationError):
            upload(db, application, applicant_actor)

    def test_uploads_reopen_after_rejection(self, db, workflow, actors, applicant_actor, application):
        workflow.submit(application.id)
        workflow.engine.reject(application.id, actors[Role.JUNIOR_ENGINEER], "Blurred Aadhar")

        document = upload(db, application, applicant_actor, DocumentType.AADHAR_CARD, b"clear aadhar")
        assert read_stored(document.storage_handle) == b"clear aadhar"

    @pytest.mark.parametrize("document_type", [
        DocumentType.RECOMMENDATION_FORM, DocumentType.LICENSE_CERTIFICATE, DocumentType.PAYMENT_CHALLAN,
    ])
    def test_system_documents_cannot_be_uploaded(self, db, applicant_actor, application, document_type):
        with pytest.raises(ValidationError) as exc_info:
            upload(db, application, applicant_actor, document_type)
        assert "document_type" in exc_info.value.details

    def test_unknown_document_type(self, db, applicant_actor, application):
        with pytest.raises(ValidationError):
            upload(db, application, applicant_actor, 99)

    def test_empty_file(self, db, applicant_actor, application):
        with pytest.raises(ValidationError) as exc_info:
            upload(db, application, applicant_actor, content=b"")
        assert exc_info.value.details == {"file": "File is empty"}

    def test_oversized_file(self, db, applicant_actor, application):
        with pytest.raises(ValidationError) as exc_info:
            upload(db, application, applicant_actor, content=b"x" * (documents.MAX_UPLOAD_BYTES + 1))
        assert exc_info.value.details == {"file": "File exceeds 5 MB"}

    def test_unknown_application(self, db, applicant_actor):
        with pytest.raises(NotFoundError):
            documents.upload_document(db, 4242, applicant_actor, 1, "scan.pdf", b"data")


class TestSubmissionChecks:
    def test_complete_application_has_no_errors(self, application):
        assert documents.submission_errors(application) == {}

    def test_missing_documents_are_listed(self, db, applicant):
        application = make_application(db, applicant, with_documents=False)
        errors = documents.submission_errors(application)
        assert errors["documents"].startswith("Missing: ")
        assert "PAN_CARD" in errors["documents"]

    def test_architect_needs_coa_certificate(self, db, applicant):
        application = make_application(db, applicant, PositionType.ARCHITECT)
        assert documents.missing_required_documents(application) == []

        coa = application.documents_of_type(DocumentType.COA_CERTIFICATE)[0]
        application.documents.remove(coa)
        assert documents.missing_required_documents(application) == [DocumentType.COA_CERTIFICATE]

    def test_field_checks(self, db, application):
        application.pan_number = "abc"
        application.aadhar_number = "1234"
        application.qualifications = []
        application.addresses = []

        errors = documents.submission_errors(application)

        assert set(errors) == {"pan_number", "aadhar_number", "qualifications", "addresses"}
