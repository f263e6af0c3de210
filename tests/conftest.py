"""Shared fixtures and utilities for tests."""

import os
import tempfile
from datetime import date, timedelta

# Settings are read at import time, so the environment has to be in place
# before anything under licensing is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_DIR"] = tempfile.mkdtemp(prefix="licensing-test-")
os.environ["SECRET_KEY"] = "test-secret-key-for-signature-otps"
os.environ["PAYMENT_MOCK_MODE"] = "true"
os.environ["PAYMENT_GATEWAY_SECRET_KEY"] = "gateway-test-secret"

import pytest
from fastapi.testclient import TestClient

from licensing.database import Base, SessionLocal, engine as db_engine
from licensing.models.applicant import Applicant
from licensing.models.application import Address, PositionApplication, Qualification
from licensing.models.document import ApplicationDocument
from licensing.models.officer import Officer
from licensing.services.account_service import ApplicantService, OfficerService
from licensing.services.notification_service import Notifier
from licensing.utils.dates import utcnow
from licensing.utils.upload import store_bytes
from licensing.workflow.engine import TransitionEngine
from licensing.workflow.policy import Actor
from licensing.workflow.status import (
    ApplicationStatus,
    PositionType,
    Role,
    position_fee,
    required_documents,
)


class RecordingNotifier(Notifier):
    """Keeps every dispatched notification instead of sending email."""

    def __init__(self):
        self.sent = []

    def dispatch(self, kind: str, **kwargs):
        self.sent.append((kind, kwargs))

    def kinds(self):
        return [kind for kind, _ in self.sent]

    def last(self, kind: str) -> dict:
        for sent_kind, kwargs in reversed(self.sent):
            if sent_kind == kind:
                return kwargs
        raise AssertionError(f"No {kind} notification was sent")


class ExplodingNotifier(Notifier):
    def dispatch(self, kind: str, **kwargs):
        raise RuntimeError("SMTP is down")


@pytest.fixture
def db():
    Base.metadata.create_all(bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=db_engine)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def engine(db, notifier):
    return TransitionEngine(db, notifier=notifier)


def _make_officer(db, role: Role, position_type=None, email=None) -> Officer:
    officer = Officer(
        full_name=f"Test {role.value.replace('_', ' ').title()}",
        email=email or f"{role.value}{position_type if position_type is not None else ''}@pmc.example.com",
        password_hash="not-a-real-hash",
        role=role.value,
        position_type=int(position_type) if position_type is not None else None,
    )
    db.add(officer)
    db.commit()
    db.refresh(officer)
    return officer


@pytest.fixture
def officers(db):
    """One officer per role. The Assistant Engineer handles Licence Engineer applications."""
    rows = {
        Role.JUNIOR_ENGINEER: _make_officer(db, Role.JUNIOR_ENGINEER),
        Role.ASSISTANT_ENGINEER: _make_officer(db, Role.ASSISTANT_ENGINEER, PositionType.LICENCE_ENGINEER),
        Role.EXECUTIVE_ENGINEER: _make_officer(db, Role.EXECUTIVE_ENGINEER),
        Role.CITY_ENGINEER: _make_officer(db, Role.CITY_ENGINEER),
        Role.CLERK: _make_officer(db, Role.CLERK),
    }
    return rows


@pytest.fixture
def actors(officers):
    return {role: OfficerService.actor_for(officer) for role, officer in officers.items()}


def make_applicant(db, email="applicant@example.com") -> Applicant:
    applicant = Applicant(
        full_name="Rahul Deshmukh",
        email=email,
        mobile_number="9876543210",
        password_hash="not-a-real-hash",
    )
    db.add(applicant)
    db.commit()
    db.refresh(applicant)
    return applicant


@pytest.fixture
def applicant(db):
    return make_applicant(db)


@pytest.fixture
def applicant_actor(applicant):
    return Actor(role=Role.APPLICANT, actor_id=applicant.id)


def make_application(db, applicant, position_type=PositionType.LICENCE_ENGINEER,
                     with_documents=True) -> PositionApplication:
    """A draft that passes every submission check."""
    application = PositionApplication(
        applicant_id=applicant.id,
        position_type=int(position_type),
        status=int(ApplicationStatus.DRAFT),
        fee_amount=position_fee(position_type),
        first_name="Rahul",
        last_name="Deshmukh",
        email=applicant.email,
        mobile_number=applicant.mobile_number,
        gender="Male",
        date_of_birth=date(1990, 4, 12),
        pan_number="ABCDE1234F",
        aadhar_number="123412341234",
        coa_number="CA/2015/12345" if position_type == PositionType.ARCHITECT else None,
    )
    application.addresses.append(Address(
        address_type="local", address_line1="12 Shivaji Nagar", city="Pune",
        state="Maharashtra", pin_code="411005",
    ))
    application.qualifications.append(Qualification(
        institute_name="COEP", university_name="Pune University", specialization="BE",
        degree_name="B.E. Civil", year_of_passing=2012,
    ))
    if with_documents:
        for doc_type in required_documents(position_type):
            content = f"{doc_type.name} for {applicant.email}".encode()
            application.documents.append(ApplicationDocument(
                document_type=int(doc_type),
                file_name=f"{doc_type.name.lower()}.pdf",
                file_size=len(content),
                content_type="application/pdf",
                storage_handle=store_bytes(content),
            ))
    db.add(application)
    db.commit()
    db.refresh(application)
    return application


@pytest.fixture
def application(db, applicant):
    return make_application(db, applicant)


def schedule_payload(days_ahead=3) -> dict:
    return {
        "review_date": (utcnow() + timedelta(days=days_ahead)).isoformat(),
        "place": "PMC Main Building",
        "contact_person": "Mr. Patil",
        "room_number": "204",
    }


class Workflow:
    """Drives an application through the chain with the engine."""

    def __init__(self, engine: TransitionEngine, notifier: RecordingNotifier, actors: dict, applicant_actor: Actor):
        self.engine = engine
        self.notifier = notifier
        self.actors = actors
        self.applicant = applicant_actor

    def submit(self, application_id):
        self.engine.submit(application_id, self.applicant)
        return self.engine.assign(application_id)

    def schedule(self, application_id):
        return self.engine.schedule_appointment(application_id, self.actors[Role.JUNIOR_ENGINEER], schedule_payload())

    def verify(self, application_id):
        return self.engine.approve(application_id, self.actors[Role.JUNIOR_ENGINEER], {"comments": "Documents in order"})

    def sign(self, application_id, role: Role, comments=None):
        actor = self.actors[role]
        self.engine.generate_otp(application_id, actor)
        otp = self.notifier.last("signature_otp")["otp"]
        return self.engine.verify_and_sign(application_id, actor, otp, comments)

    def to_ae_pending(self, application_id):
        self.submit(application_id)
        self.schedule(application_id)
        return self.verify(application_id)

    def to_stage1_complete(self, application_id):
        self.to_ae_pending(application_id)
        self.sign(application_id, Role.ASSISTANT_ENGINEER)
        self.sign(application_id, Role.EXECUTIVE_ENGINEER)
        return self.sign(application_id, Role.CITY_ENGINEER)

    def pay(self, application_id, reference=None):
        reference = reference or f"GW-TXN-{1000 + application_id}"
        return self.engine.confirm_payment(application_id, self.applicant, reference)

    def to_clerk_pending(self, application_id):
        result = self.to_stage1_complete(application_id)
        if result.new_status == ApplicationStatus.PAYMENT_PENDING:
            result = self.pay(application_id)
        return result

    def to_approved(self, application_id):
        self.to_clerk_pending(application_id)
        self.engine.approve(application_id, self.actors[Role.CLERK])
        self.sign(application_id, Role.EXECUTIVE_ENGINEER)
        return self.sign(application_id, Role.CITY_ENGINEER)


@pytest.fixture
def workflow(engine, notifier, actors, applicant_actor):
    return Workflow(engine, notifier, actors, applicant_actor)


# -------------------- HTTP --------------------
@pytest.fixture
def client(db, notifier):
    from licensing.main import app
    from licensing.services.notification_service import get_notifier

    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers_for_applicant(applicant) -> dict:
    return {"Authorization": f"Bearer {ApplicantService.issue_token(applicant)}"}


def auth_headers_for_officer(officer) -> dict:
    return {"Authorization": f"Bearer {OfficerService.issue_token(officer)}"}
