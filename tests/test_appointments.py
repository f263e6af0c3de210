"""
Tests for the document-verification appointment.

Tests:
- Scheduling validation (past dates, blank fields)
- Rescheduling in place with history
- Per-document verification flags
- Completing verification
"""

from datetime import timedelta

import pytest

from conftest import schedule_payload
from licensing.models.appointment import Appointment
from licensing.utils.dates import utcnow
from licensing.workflow import documents
from licensing.workflow.errors import AuthorizationError, NotFoundError, ValidationError
from licensing.workflow.status import ApplicationStatus as S, DocumentType, Role


@pytest.fixture
def je(actors):
    return actors[Role.JUNIOR_ENGINEER]


@pytest.fixture
def assigned(workflow, application):
    workflow.submit(application.id)
    return application


def reschedule_payload(**overrides):
    payload = {
        "new_review_date": (utcnow() + timedelta(days=7)).isoformat(),
        "reschedule_reason": "Officer on field inspection",
        "place": "PMC Ward Office",
        "contact_person": "Mrs. Joshi",
        "room_number": "12",
    }
    payload.update(overrides)
    return payload


class TestSchedule:
    def test_schedule_creates_appointment(self, db, engine, notifier, je, assigned):
        result = engine.schedule_appointment(assigned.id, je, schedule_payload())

        assert result.new_status == S.APPOINTMENT_SCHEDULED
        appointment = assigned.active_appointment
        assert appointment.place == "PMC Main Building"
        assert appointment.scheduled_by == je.actor_id
        assert notifier.last("appointment")["to_email"] == assigned.email

    def test_past_review_date_is_rejected(self, db, engine, je, assigned):
        payload = schedule_payload()
        payload["review_date"] = (utcnow() - timedelta(hours=1)).isoformat()

        with pytest.raises(ValidationError) as exc_info:
            engine.schedule_appointment(assigned.id, je, payload)

        assert "review_date" in exc_info.value.details
        db.refresh(assigned)
        assert assigned.status == S.JE_PENDING
        assert db.query(Appointment).count() == 0

    @pytest.mark.parametrize("field", ["place", "contact_person", "room_number"])
    def test_blank_fields_are_rejected_after_trim(self, db, engine, je, assigned, field):
        payload = schedule_payload()
        payload[field] = "   "

        with pytest.raises(ValidationError) as exc_info:
            engine.schedule_appointment(assigned.id, je, payload)

        assert exc_info.value.details[field] == "must not be empty"
        db.refresh(assigned)
        assert assigned.status == S.JE_PENDING

    def test_values_are_trimmed(self, engine, je, assigned):
        payload = schedule_payload()
        payload["room_number"] = "  204B "
        engine.schedule_appointment(assigned.id, je, payload)
        assert assigned.active_appointment.room_number == "204B"

    def test_timezone_aware_dates_are_stored_as_utc(self, engine, je, assigned):
        payload = schedule_payload()
        payload["review_date"] = "2999-06-01T15:30:00+05:30"
        engine.schedule_appointment(assigned.id, je, payload)
        assert assigned.active_appointment.review_date.isoformat() == "2999-06-01T10:00:00"


class TestReschedule:
    def test_reschedule_updates_in_place(self, db, engine, notifier, je, assigned):
        engine.schedule_appointment(assigned.id, je, schedule_payload())
        appointment = assigned.active_appointment
        original_date = appointment.review_date

        result = engine.reschedule_appointment(appointment.id, je, reschedule_payload())

        assert result.new_status == S.APPOINTMENT_SCHEDULED
        assert result.previous_status == S.APPOINTMENT_SCHEDULED
        db.refresh(appointment)
        assert appointment.place == "PMC Ward Office"
        assert len(appointment.reschedules) == 1
        assert appointment.reschedules[0].previous_review_date == original_date
        assert db.query(Appointment).count() == 1
        assert notifier.last("appointment")["rescheduled"] is True

    def test_reason_is_required(self, db, engine, je, assigned):
        engine.schedule_appointment(assigned.id, je, schedule_payload())
        appointment = assigned.active_appointment

        with pytest.raises(ValidationError) as exc_info:
            engine.reschedule_appointment(appointment.id, je, reschedule_payload(reschedule_reason=""))

        assert "reschedule_reason" in exc_info.value.details
        db.refresh(appointment)
        assert appointment.reschedules == []

    def test_unknown_appointment(self, engine, je, assigned):
        with pytest.raises(NotFoundError):
            engine.reschedule_appointment(999, je, reschedule_payload())

    def test_cannot_reschedule_after_verification(self, db, engine, je, workflow, application):
        workflow.to_ae_pending(application.id)
        appointment = db.query(Appointment).first()
        with pytest.raises(AuthorizationError):
            engine.reschedule_appointment(appointment.id, je, reschedule_payload())


class TestVerification:
    def test_verify_single_document(self, db, engine, je, assigned):
        engine.schedule_appointment(assigned.id, je, schedule_payload())
        pan = assigned.documents_of_type(DocumentType.PAN_CARD)[0]

        document = documents.verify_document(db, assigned.id, pan.id, je)

        assert document.is_verified
        assert document.verified_by == je.actor_id

    def test_document_verification_needs_an_appointment(self, db, je, assigned):
        pan = assigned.documents_of_type(DocumentType.PAN_CARD)[0]
        with pytest.raises(AuthorizationError):
            documents.verify_document(db, assigned.id, pan.id, je)

    def test_only_junior_engineer_verifies_documents(self, db, engine, je, actors, assigned):
        engine.schedule_appointment(assigned.id, je, schedule_payload())
        pan = assigned.documents_of_type(DocumentType.PAN_CARD)[0]
        with pytest.raises(AuthorizationError):
            documents.verify_document(db, assigned.id, pan.id, actors[Role.CLERK])

    def test_completion_forwards_to_assistant_engineer(self, db, engine, je, assigned):
        engine.schedule_appointment(assigned.id, je, schedule_payload())
        appointment = assigned.active_appointment

        result = engine.approve(assigned.id, je, {"comments": "Originals checked"})

        assert result.new_status == S.AE_PENDING
        db.refresh(appointment)
        assert appointment.is_active is False
        assert appointment.completed_at is not None
        assert assigned.active_appointment is None
        assert documents.unverified_required_documents(assigned) == []
        assert len(assigned.documents_of_type(DocumentType.RECOMMENDATION_FORM)) == 1

    def test_completion_without_verify_all_needs_every_flag(self, db, engine, je, assigned):
        engine.schedule_appointment(assigned.id, je, schedule_payload())

        with pytest.raises(ValidationError) as exc_info:
            engine.approve(assigned.id, je, {"verify_all": False})

        assert "documents" in exc_info.value.details
        db.refresh(assigned)
        assert assigned.status == S.APPOINTMENT_SCHEDULED

    def test_completion_after_individual_checks(self, db, engine, je, assigned):
        engine.schedule_appointment(assigned.id, je, schedule_payload())
        for document in list(assigned.documents):
            documents.verify_document(db, assigned.id, document.id, je)

        result = engine.approve(assigned.id, je, {"verify_all": False})
        assert result.new_status == S.AE_PENDING
