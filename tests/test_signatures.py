"""
Tests for OTP-gated signatures.

Tests:
- OTP delivery goes through the notifier only
- Expired, mismatched, reused and superseded OTPs
- Signer binding and at-most-once signing
- Stage 1 vs stage 2 target documents
"""

from datetime import timedelta

import pytest

from conftest import _make_officer
from licensing.models.signature import DigitalSignature, SignatureSession
from licensing.services.account_service import OfficerService
from licensing.utils.dates import utcnow
from licensing.utils.otp import hash_otp, otp_matches
from licensing.workflow.errors import AuthorizationError, InvalidOtpError, ValidationError
from licensing.workflow.status import ApplicationStatus as S, DocumentType, PositionType, Role


@pytest.fixture
def ae_pending(workflow, application):
    workflow.to_ae_pending(application.id)
    return application


@pytest.fixture
def ae(actors):
    return actors[Role.ASSISTANT_ENGINEER]


def signatures(db, application_id):
    return db.query(DigitalSignature).filter(DigitalSignature.application_id == application_id).all()


class TestOtpHashing:
    def test_hash_is_keyed_by_session(self):
        assert hash_otp("123456", "1:assistant_engineer") != hash_otp("123456", "2:assistant_engineer")

    def test_matches_ignores_surrounding_whitespace(self):
        stored = hash_otp("123456", "1:clerk")
        assert otp_matches(" 123456 ", "1:clerk", stored)
        assert not otp_matches("654321", "1:clerk", stored)
        assert not otp_matches("", "1:clerk", stored)


class TestGenerateOtp:
    def test_otp_is_delivered_not_returned(self, db, engine, notifier, officers, ae, ae_pending):
        result = engine.generate_otp(ae_pending.id, ae)

        delivered = notifier.last("signature_otp")
        assert delivered["to_email"] == officers[Role.ASSISTANT_ENGINEER].email
        assert delivered["document_name"] == "Recommendation Form"
        assert len(delivered["otp"]) == 6 and delivered["otp"].isdigit()
        assert all("otp" not in effect.detail for effect in result.side_effects)

        session = db.query(SignatureSession).one()
        assert session.otp_hash != delivered["otp"]
        assert result.new_status == S.AE_PENDING

    def test_new_otp_supersedes_previous(self, db, engine, notifier, ae, ae_pending):
        engine.generate_otp(ae_pending.id, ae)
        engine.generate_otp(ae_pending.id, ae)
        second_otp = notifier.last("signature_otp")["otp"]

        first, second = db.query(SignatureSession).order_by(SignatureSession.id).all()
        assert first.invalidated_at is not None
        assert second.invalidated_at is None
        assert engine.verify_and_sign(ae_pending.id, ae, second_otp).new_status == S.EE_STAGE1_PENDING


class TestVerifyAndSign:
    def test_sign_records_signature(self, db, engine, notifier, ae, ae_pending):
        engine.generate_otp(ae_pending.id, ae)
        result = engine.verify_and_sign(ae_pending.id, ae, notifier.last("signature_otp")["otp"], "Recommended")

        assert result.new_status == S.EE_STAGE1_PENDING
        [signature] = signatures(db, ae_pending.id)
        assert signature.signer_role == Role.ASSISTANT_ENGINEER.value
        assert signature.signer_id == ae.actor_id
        assert signature.stage_status == int(S.AE_PENDING)
        assert signature.target_document == int(DocumentType.RECOMMENDATION_FORM)
        assert signature.submission_round == 1
        assert signature.comments == "Recommended"

    def test_wrong_otp_leaves_status(self, db, engine, ae, ae_pending):
        engine.generate_otp(ae_pending.id, ae)

        with pytest.raises(InvalidOtpError):
            engine.verify_and_sign(ae_pending.id, ae, "000000x")

        db.refresh(ae_pending)
        assert ae_pending.status == S.AE_PENDING
        assert signatures(db, ae_pending.id) == []

    def test_expired_otp_is_refused(self, db, engine, notifier, ae, ae_pending):
        engine.generate_otp(ae_pending.id, ae)
        otp = notifier.last("signature_otp")["otp"]
        session = db.query(SignatureSession).one()
        session.expires_at = utcnow() - timedelta(seconds=1)
        db.commit()

        with pytest.raises(InvalidOtpError):
            engine.verify_and_sign(ae_pending.id, ae, otp)

        db.refresh(ae_pending)
        assert ae_pending.status == S.AE_PENDING

    def test_consumed_otp_cannot_be_reused(self, db, engine, notifier, ae, ae_pending):
        engine.generate_otp(ae_pending.id, ae)
        otp = notifier.last("signature_otp")["otp"]
        engine.verify_and_sign(ae_pending.id, ae, otp)

        with pytest.raises(InvalidOtpError):
            engine.verify_and_sign(ae_pending.id, ae, otp)

        assert len(signatures(db, ae_pending.id)) == 1
        session = db.query(SignatureSession).one()
        assert session.consumed_at is not None

    def test_unknown_code_after_signing_is_not_permitted(self, db, engine, notifier, ae, ae_pending):
        engine.generate_otp(ae_pending.id, ae)
        otp = notifier.last("signature_otp")["otp"]
        engine.verify_and_sign(ae_pending.id, ae, otp)

        wrong = "0" * len(otp) if otp != "0" * len(otp) else "1" * len(otp)
        with pytest.raises(AuthorizationError):
            engine.verify_and_sign(ae_pending.id, ae, wrong)

    def test_otp_is_bound_to_the_requesting_officer(self, db, engine, notifier, actors, ae_pending):
        ae = actors[Role.ASSISTANT_ENGINEER]
        colleague = OfficerService.actor_for(_make_officer(
            db, Role.ASSISTANT_ENGINEER, PositionType.LICENCE_ENGINEER, email="ae.second@pmc.example.com"
        ))
        engine.generate_otp(ae_pending.id, ae)
        otp = notifier.last("signature_otp")["otp"]

        with pytest.raises(InvalidOtpError):
            engine.verify_and_sign(ae_pending.id, colleague, otp)

    def test_sign_without_session(self, engine, ae, ae_pending):
        with pytest.raises(InvalidOtpError):
            engine.verify_and_sign(ae_pending.id, ae, "123456")

    def test_otp_is_required(self, engine, ae, ae_pending):
        with pytest.raises(ValidationError) as exc_info:
            engine.verify_and_sign(ae_pending.id, ae, "  ")
        assert "otp" in exc_info.value.details

    def test_stage_one_session_does_not_carry_into_stage_two(self, db, engine, notifier, workflow, actors, application):
        workflow.to_ae_pending(application.id)
        workflow.sign(application.id, Role.ASSISTANT_ENGINEER)
        ee = actors[Role.EXECUTIVE_ENGINEER]
        engine.generate_otp(application.id, ee)
        stale_otp = notifier.last("signature_otp")["otp"]
        engine.verify_and_sign(application.id, ee, stale_otp)
        workflow.sign(application.id, Role.CITY_ENGINEER)
        workflow.pay(application.id)
        engine.approve(application.id, actors[Role.CLERK])

        with pytest.raises(InvalidOtpError):
            engine.verify_and_sign(application.id, ee, stale_otp)

    def test_stage_two_signs_the_certificate(self, db, workflow, actors, application):
        workflow.to_clerk_pending(application.id)
        workflow.engine.approve(application.id, actors[Role.CLERK])
        result = workflow.sign(application.id, Role.EXECUTIVE_ENGINEER)

        assert result.new_status == S.CE_STAGE2_PENDING
        stage_two = [s for s in signatures(db, application.id) if s.stage_status == int(S.EE_STAGE2_PENDING)]
        assert len(stage_two) == 1
        assert stage_two[0].target_document == int(DocumentType.LICENSE_CERTIFICATE)
        generated = [e for e in result.side_effects if e.kind == "document_generated"]
        assert generated[0].detail["document_type"] == int(DocumentType.LICENSE_CERTIFICATE)
        assert generated[0].detail["signatures"] == 1
