"""
Tests for rejection and resubmission.

A resubmitted application restarts the chain from the Junior Engineer. Only a
completed payment carries over to the new round.
"""

import pytest

from licensing.models.appointment import Appointment
from licensing.models.signature import DigitalSignature, SignatureSession
from licensing.workflow.errors import AuthorizationError, ValidationError
from licensing.workflow.policy import Actor
from licensing.workflow.status import ApplicationStatus as S, DocumentType, Role


def restart(workflow, application_id):
    """Resubmit and walk the new round up to the end of stage 1."""
    engine = workflow.engine
    engine.resubmit(application_id, workflow.applicant)
    engine.assign(application_id)
    workflow.schedule(application_id)
    workflow.verify(application_id)
    workflow.sign(application_id, Role.ASSISTANT_ENGINEER)
    workflow.sign(application_id, Role.EXECUTIVE_ENGINEER)
    return workflow.sign(application_id, Role.CITY_ENGINEER)


@pytest.fixture
def rejected_by_clerk(workflow, actors, application):
    workflow.to_clerk_pending(application.id)
    workflow.engine.reject(application.id, actors[Role.CLERK], "Experience certificate is illegible")
    return application


class TestReject:
    def test_rejection_records_stage_and_reason(self, db, engine, notifier, workflow, actors, application):
        workflow.to_ae_pending(application.id)

        result = engine.reject(application.id, actors[Role.ASSISTANT_ENGINEER], "  Degree not recognised ")

        assert result.new_status == S.REJECTED
        assert application.rejection_stage == int(S.AE_PENDING)
        assert application.rejected_by_role == Role.ASSISTANT_ENGINEER.value
        assert application.rejection_reason == "Degree not recognised"
        assert application.rejected_at is not None
        rejection = notifier.last("rejection")
        assert rejection["rejected_by"] == "Assistant Engineer"
        assert rejection["comments"] == "Degree not recognised"

    def test_rejection_invalidates_open_otp_sessions(self, db, engine, workflow, actors, application):
        workflow.to_ae_pending(application.id)
        engine.generate_otp(application.id, actors[Role.ASSISTANT_ENGINEER])

        engine.reject(application.id, actors[Role.ASSISTANT_ENGINEER], "Degree not recognised")

        session = db.query(SignatureSession).one()
        assert session.invalidated_at is not None

    def test_system_can_reject_before_assignment(self, engine, applicant_actor, application):
        engine.submit(application.id, applicant_actor)
        result = engine.reject(application.id, Actor.system(), "Duplicate application")
        assert result.new_status == S.REJECTED

    def test_rejected_application_is_editable(self, engine, workflow, actors, applicant_actor, application):
        workflow.submit(application.id)
        engine.reject(application.id, actors[Role.JUNIOR_ENGINEER], "Wrong PAN")

        engine.save_draft(application.id, applicant_actor, {"pan_number": "ZZZZZ9999Z"})
        assert application.pan_number == "ZZZZZ9999Z"
        assert application.status == S.REJECTED


class TestResubmit:
    def test_resubmit_restarts_the_round(self, db, engine, applicant_actor, rejected_by_clerk):
        application = rejected_by_clerk
        number = application.application_number

        result = engine.resubmit(application.id, applicant_actor)

        assert result.previous_status == S.REJECTED
        assert result.new_status == S.SUBMITTED
        assert application.submission_round == 2
        assert application.application_number == number
        assert application.rejection_stage is None
        assert application.rejection_comments is None
        assert application.certificate_number is None
        effect = next(e for e in result.side_effects if e.kind == "resubmitted")
        assert effect.detail == {"submission_round": 2, "payment_preserved": True}

    def test_resubmit_clears_verification_and_generated_documents(self, db, engine, applicant_actor, rejected_by_clerk):
        application = rejected_by_clerk

        engine.resubmit(application.id, applicant_actor)

        assert db.query(Appointment).filter(Appointment.is_active.is_(True)).count() == 0
        uploaded = [d for d in application.documents if not d.is_system_generated]
        assert uploaded and not any(d.is_verified for d in uploaded)
        assert application.documents_of_type(DocumentType.RECOMMENDATION_FORM) == []
        assert application.documents_of_type(DocumentType.LICENSE_CERTIFICATE) == []
        # The challan belongs to the payment, which survives
        assert len(application.documents_of_type(DocumentType.PAYMENT_CHALLAN)) == 1

    def test_payment_is_preserved(self, db, engine, applicant_actor, rejected_by_clerk):
        application = rejected_by_clerk
        engine.resubmit(application.id, applicant_actor)

        assert application.payment_completed is True
        assert application.payment_amount == 3000
        assert application.challan_number is not None

    def test_new_round_skips_payment(self, db, workflow, rejected_by_clerk):
        application = rejected_by_clerk

        result = restart(workflow, application.id)

        assert result.new_status == S.CLERK_PENDING
        round_two = db.query(DigitalSignature).filter(
            DigitalSignature.application_id == application.id,
            DigitalSignature.submission_round == 2,
        ).count()
        assert round_two == 3

    def test_new_round_can_reach_approval(self, workflow, actors, rejected_by_clerk):
        application = rejected_by_clerk
        restart(workflow, application.id)
        workflow.engine.approve(application.id, actors[Role.CLERK])
        workflow.sign(application.id, Role.EXECUTIVE_ENGINEER)
        result = workflow.sign(application.id, Role.CITY_ENGINEER)

        assert result.new_status == S.APPROVED
        assert application.certificate_number == f"CERT-{application.application_number}"

    def test_unpaid_rejection_still_requires_payment(self, workflow, actors, application):
        workflow.to_ae_pending(application.id)
        workflow.engine.reject(application.id, actors[Role.ASSISTANT_ENGINEER], "Signature missing on form")

        result = restart(workflow, application.id)
        assert result.new_status == S.PAYMENT_PENDING

    def test_resubmit_needs_complete_application(self, db, engine, applicant_actor, rejected_by_clerk):
        application = rejected_by_clerk
        engine.save_draft(application.id, applicant_actor, {"aadhar_number": "12"})

        with pytest.raises(ValidationError) as exc_info:
            engine.resubmit(application.id, applicant_actor)

        assert "aadhar_number" in exc_info.value.details
        db.refresh(application)
        assert application.status == S.REJECTED
        assert application.submission_round == 1

    def test_only_rejected_applications_can_be_resubmitted(self, engine, workflow, applicant_actor, application):
        workflow.submit(application.id)
        with pytest.raises(AuthorizationError):
            engine.resubmit(application.id, applicant_actor)
