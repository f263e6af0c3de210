"""
Transition engine.

apply_transition() is the only way an application's status changes. Each call:

1. loads and locks the application row (NotFoundError if absent),
2. checks the role policy (AuthorizationError),
3. validates the payload (ValidationError / InvalidOtpError),
4. applies the action, then follows pass-through states until the
   application rests in a state some actor owns,
5. commits, and only then hands emails/OTPs to the notifier.

Any error rolls the whole call back, so a failed transition leaves status,
documents and notifications untouched.
"""
import logging
import secrets
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from licensing.models.application import Address, Experience, PositionApplication, Qualification
from licensing.models.appointment import Appointment, AppointmentReschedule
from licensing.models.certificate import Certificate
from licensing.models.officer import Officer
from licensing.models.payment import Payment
from licensing.models.signature import DigitalSignature, SignatureSession
from licensing.models.status_history import StatusHistory
from licensing.schemas.workflow import (
    ApprovePayload,
    ConfirmPaymentPayload,
    DraftPayload,
    RejectPayload,
    ReschedulePayload,
    SchedulePayload,
    SignPayload,
)
from licensing.services import payment_service
from licensing.services.notification_service import EmailNotifier, Notifier, create_notification
from licensing.services.pdf_service import PDFGenerator, pdf_generator
from licensing.utils.dates import utcnow
from licensing.utils.otp import generate_otp, hash_otp, otp_matches
from licensing.workflow import documents
from licensing.workflow.errors import (
    AuthorizationError,
    ConflictError,
    InvalidOtpError,
    NotFoundError,
    ValidationError,
    WorkflowError,
)
from licensing.workflow.policy import Actor, SIGN_TRANSITIONS, ensure_permitted, next_auto_status
from licensing.workflow.status import (
    APPLICATION_NUMBER_PREFIXES,
    Action,
    ApplicationStatus as S,
    DocumentType,
    PositionType,
    Role,
    position_fee,
    signature_target,
    status_display_name,
)

logger = logging.getLogger(__name__)

ROLE_TITLES = {
    Role.JUNIOR_ENGINEER: "Junior Engineer",
    Role.ASSISTANT_ENGINEER: "Assistant Engineer",
    Role.EXECUTIVE_ENGINEER: "Executive Engineer",
    Role.CITY_ENGINEER: "City Engineer",
    Role.CLERK: "Clerk",
    Role.SYSTEM: "System",
    Role.APPLICANT: "Applicant",
}

DOCUMENT_TITLES = {
    DocumentType.RECOMMENDATION_FORM: "Recommendation Form",
    DocumentType.LICENSE_CERTIFICATE: "License Certificate",
}

PAYMENT_ROLES = (Role.APPLICANT, Role.SYSTEM)


@dataclass
class SideEffect:
    kind: str
    detail: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"kind": self.kind, **self.detail}


@dataclass
class TransitionResult:
    application_id: int
    action: Action
    previous_status: S
    new_status: S
    side_effects: List[SideEffect] = field(default_factory=list)
    changed: bool = True

    def to_dict(self) -> dict:
        return {
            "application_id": self.application_id,
            "action": self.action.value,
            "previous_status": int(self.previous_status),
            "new_status": int(self.new_status),
            "new_status_name": status_display_name(self.new_status),
            "changed": self.changed,
            "side_effects": [e.to_dict() for e in self.side_effects],
        }


@dataclass
class _Context:
    application: PositionApplication
    actor: Actor
    action: Action
    side_effects: List[SideEffect] = field(default_factory=list)
    outbox: List[Tuple[str, dict]] = field(default_factory=list)

    def effect(self, kind: str, **detail):
        self.side_effects.append(SideEffect(kind, detail))


class TransitionEngine:
    def __init__(
        self,
        db: Session,
        notifier: Optional[Notifier] = None,
        pdf: Optional[PDFGenerator] = None,
        payment_verifier: Optional[Callable[[str, int], dict]] = None,
    ):
        self.db = db
        self.notifier = notifier or EmailNotifier()
        self.pdf = pdf or pdf_generator
        self.payment_verifier = payment_verifier or payment_service.verify_gateway_payment
        self._handlers = {
            Action.SAVE_DRAFT: self._save_draft,
            Action.SUBMIT: self._submit,
            Action.ASSIGN: self._assign,
            Action.SCHEDULE_APPOINTMENT: self._schedule_appointment,
            Action.RESCHEDULE_APPOINTMENT: self._reschedule_appointment,
            Action.APPROVE: self._approve,
            Action.REJECT: self._reject,
            Action.GENERATE_OTP: self._generate_otp,
            Action.VERIFY_AND_SIGN: self._verify_and_sign,
            Action.INITIATE_PAYMENT: self._initiate_payment,
            Action.CONFIRM_PAYMENT: self._confirm_payment,
            Action.RESUBMIT: self._resubmit,
        }

    # ------------------------------------------------------------------ #
    # Entry point
    # ------------------------------------------------------------------ #
    def apply_transition(self, application_id: int, action, actor: Actor,
                         payload: Optional[Any] = None) -> TransitionResult:
        action = Action(action)
        payload = payload or {}

        try:
            application = self._load_for_update(application_id)
            previous = S(application.status)

            if self._already_paid(application, action, actor):
                self.db.rollback()
                logger.info(f"💳 Payment for application {application_id} already confirmed, nothing to do")
                return TransitionResult(application_id, action, previous, previous, changed=False)

            try:
                ensure_permitted(application, actor, action)
            except AuthorizationError:
                if action == Action.VERIFY_AND_SIGN and self._replays_consumed_otp(application, actor, payload):
                    logger.warning(f"❌ Consumed OTP replayed by {actor.role.value} on application {application_id}")
                    raise InvalidOtpError()
                logger.warning(
                    f"⛔ {actor.role.value} (id={actor.actor_id}) attempted {action.value} "
                    f"on application {application_id} in status {previous.name}"
                )
                raise

            ctx = _Context(application=application, actor=actor, action=action)
            self._handlers[action](ctx, payload)
            self._auto_forward(ctx)

            self.db.commit()

        except WorkflowError:
            self.db.rollback()
            raise
        except StaleDataError:
            self.db.rollback()
            logger.warning(f"⚠️ Concurrent update detected on application {application_id}")
            raise ConflictError("Application was modified concurrently, please retry")
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Integrity conflict on application {application_id}: {e.orig}")
            raise ConflictError("Transition already applied")
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ {action.value} failed on application {application_id}: {str(e)}")
            raise

        new_status = S(application.status)
        logger.info(
            f"✅ Application {application_id}: {action.value} by {actor.role.value} "
            f"{previous.name} -> {new_status.name}"
        )
        self._flush_outbox(ctx.outbox)
        return TransitionResult(application_id, action, previous, new_status, ctx.side_effects)

    def _load_for_update(self, application_id: int) -> PositionApplication:
        application = (
            self.db.query(PositionApplication)
            .filter(PositionApplication.id == application_id)
            .populate_existing()
            .with_for_update()
            .first()
        )
        if not application:
            raise NotFoundError(f"Application {application_id} not found")
        return application

    def _already_paid(self, application, action: Action, actor: Actor) -> bool:
        if action != Action.CONFIRM_PAYMENT or not application.payment_completed:
            return False
        if actor.role not in PAYMENT_ROLES:
            return False
        return actor.role == Role.SYSTEM or application.applicant_id == actor.actor_id

    def _flush_outbox(self, outbox: List[Tuple[str, dict]]):
        for kind, kwargs in outbox:
            try:
                self.notifier.dispatch(kind, **kwargs)
            except Exception as e:
                logger.error(f"❌ Failed to dispatch {kind} notification: {str(e)}")

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    @staticmethod
    def _parse(model: Type[BaseModel], payload: Any) -> BaseModel:
        if isinstance(payload, model):
            return payload
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(exclude_unset=True)
        try:
            return model.model_validate(payload)
        except PydanticValidationError as e:
            details = {}
            for error in e.errors():
                location = ".".join(str(part) for part in error["loc"]) or "payload"
                message = error["msg"]
                if message.startswith("Value error, "):
                    message = message[len("Value error, "):]
                details.setdefault(location, message)
            raise ValidationError(details)

    def _move(self, ctx: _Context, to_status: S, action: str, actor: Actor, comments: Optional[str] = None):
        application = ctx.application
        from_status = application.status
        application.status = int(to_status)
        self.db.add(StatusHistory(
            application_id=application.id,
            from_status=from_status,
            to_status=int(to_status),
            action=action,
            actor_role=actor.role.value,
            actor_id=actor.actor_id,
            comments=comments,
            changed_at=utcnow(),
        ))
        ctx.effect("status_changed", from_status=from_status, to_status=int(to_status))

    def _auto_forward(self, ctx: _Context):
        system = Actor.system()
        while True:
            target = next_auto_status(ctx.application)
            if target is None:
                break
            if target == S.PAYMENT_PENDING:
                self._request_payment(ctx)
            if target == S.APPROVED:
                self._request_certificate(ctx)
            self._move(ctx, target, "auto_forward", system)

    def _applicant_contact(self, application) -> Tuple[Optional[str], str]:
        email = application.email or (application.applicant.email if application.applicant else None)
        name = application.full_name or (application.applicant.full_name if application.applicant else "Applicant")
        return email, name

    def _notify_applicant(self, ctx: _Context, notification_type: str, title: str, message: str,
                          email_kind: str = "status_update", **email_kwargs):
        application = ctx.application
        create_notification(self.db, application, notification_type, title, message)
        to_email, name = self._applicant_contact(application)
        if email_kind == "status_update":
            email_kwargs.setdefault("title", title)
            email_kwargs.setdefault("message", message)
        ctx.outbox.append((email_kind, dict(
            to_email=to_email,
            name=name,
            application_number=application.application_number,
            **email_kwargs,
        )))
        ctx.effect("notification", type=notification_type)

    def _next_application_number(self, position_type: PositionType) -> str:
        now = utcnow()
        prefix = f"{APPLICATION_NUMBER_PREFIXES[PositionType(position_type)]}{now:%Y%m}"
        # Length first: sequences can outgrow four digits
        number = PositionApplication.application_number
        last = (
            self.db.query(number)
            .filter(number.like(f"{prefix}%"))
            .order_by(func.length(number).desc(), number.desc())
            .limit(1)
            .scalar()
        )
        sequence = int(last[len(prefix):]) + 1 if last else 1
        return f"{prefix}{sequence:04d}"

    def _signatures_for(self, application, document_type: DocumentType) -> list:
        return [
            s for s in application.signatures
            if s.submission_round == application.submission_round and s.target_document == int(document_type)
        ]

    def _render_stage_document(self, ctx: _Context, document_type: DocumentType):
        application = ctx.application
        signatures = self._signatures_for(application, document_type)
        if document_type == DocumentType.RECOMMENDATION_FORM:
            content = self.pdf.generate_recommendation_form(application, signatures)
        else:
            content = self.pdf.generate_license_certificate(application, application.certificate_number, signatures)
        document = documents.attach_system_document(application, document_type, content)
        ctx.effect("document_generated", document_type=int(document_type), signatures=len(signatures),
                   storage_handle=document.storage_handle)

    def _invalidate_sessions(self, application_id: int, signer_role: Optional[Role] = None):
        query = self.db.query(SignatureSession).filter(
            SignatureSession.application_id == application_id,
            SignatureSession.consumed_at.is_(None),
            SignatureSession.invalidated_at.is_(None),
        )
        if signer_role is not None:
            query = query.filter(SignatureSession.signer_role == signer_role.value)
        return query.update({"invalidated_at": utcnow()}, synchronize_session=False)

    # ------------------------------------------------------------------ #
    # Applicant actions
    # ------------------------------------------------------------------ #
    def _save_draft(self, ctx: _Context, payload):
        data = self._parse(DraftPayload, payload)
        application = ctx.application
        fields = data.model_dump(exclude_unset=True, exclude={"addresses", "qualifications", "experiences"})
        for name, value in fields.items():
            setattr(application, name, value)

        if data.addresses is not None:
            application.addresses = [Address(**a.model_dump()) for a in data.addresses]
        if data.qualifications is not None:
            application.qualifications = [Qualification(**q.model_dump()) for q in data.qualifications]
        if data.experiences is not None:
            application.experiences = [Experience(**e.model_dump()) for e in data.experiences]

        ctx.effect("draft_saved", fields=sorted(data.model_fields_set))

    def _submit(self, ctx: _Context, payload):
        application = ctx.application
        errors = documents.submission_errors(application)
        if errors:
            raise ValidationError(errors, "Application is incomplete")

        if not application.application_number:
            application.application_number = self._next_application_number(application.position_type)
            ctx.effect("application_number_assigned", application_number=application.application_number)

        application.fee_amount = position_fee(application.position_type)
        application.submission_round = (application.submission_round or 0) + 1
        application.submitted_at = utcnow()
        self._move(ctx, S.SUBMITTED, Action.SUBMIT.value, ctx.actor)
        self._notify_applicant(
            ctx, "application_submitted", "Application Submitted",
            f"Your application {application.application_number} has been submitted for scrutiny.",
        )

    def _resubmit(self, ctx: _Context, payload):
        """Full restart of the chain. Only a completed payment survives."""
        application = ctx.application
        errors = documents.submission_errors(application)
        if errors:
            raise ValidationError(errors, "Application is incomplete")

        application.rejection_stage = None
        application.rejected_by_role = None
        application.rejection_comments = None
        application.rejected_at = None
        application.certificate_number = None
        application.submission_round += 1
        application.submitted_at = utcnow()

        for appointment in application.appointments:
            appointment.is_active = False
        for document in application.documents:
            if not document.is_system_generated:
                document.is_verified = False
                document.verified_by = None
                document.verified_at = None
        documents.remove_system_document(application, DocumentType.RECOMMENDATION_FORM)
        documents.remove_system_document(application, DocumentType.LICENSE_CERTIFICATE)
        self._invalidate_sessions(application.id)

        self._move(ctx, S.SUBMITTED, Action.RESUBMIT.value, ctx.actor)
        ctx.effect("resubmitted", submission_round=application.submission_round,
                   payment_preserved=bool(application.payment_completed))
        self._notify_applicant(
            ctx, "application_resubmitted", "Application Resubmitted",
            f"Your application {application.application_number} has been resubmitted.",
        )

    def _assign(self, ctx: _Context, payload):
        self._move(ctx, S.JE_PENDING, Action.ASSIGN.value, ctx.actor)
        ctx.effect("assigned", queue=Role.JUNIOR_ENGINEER.value)

    # ------------------------------------------------------------------ #
    # Junior Engineer
    # ------------------------------------------------------------------ #
    def _schedule_appointment(self, ctx: _Context, payload):
        data = self._parse(SchedulePayload, payload)
        application = ctx.application

        appointment = Appointment(
            application_id=application.id,
            scheduled_by=ctx.actor.actor_id or 0,
            review_date=data.review_date,
            place=data.place,
            contact_person=data.contact_person,
            room_number=data.room_number,
            comments=data.comments,
        )
        application.appointments.append(appointment)
        self.db.flush()

        self._move(ctx, S.APPOINTMENT_SCHEDULED, Action.SCHEDULE_APPOINTMENT.value, ctx.actor, data.comments)
        ctx.effect("appointment_created", appointment_id=appointment.id)
        self._notify_applicant(
            ctx, "appointment_scheduled", "Appointment Scheduled",
            f"Document verification on {data.review_date:%d %b %Y %H:%M} at {data.place}, room {data.room_number}.",
            email_kind="appointment",
            appointment=appointment.to_dict(),
        )

    def _reschedule_appointment(self, ctx: _Context, payload):
        data = self._parse(ReschedulePayload, payload)
        application = ctx.application
        appointment = application.active_appointment
        if appointment is None or (data.appointment_id is not None and appointment.id != data.appointment_id):
            raise NotFoundError("Active appointment not found")

        appointment.reschedules.append(AppointmentReschedule(
            previous_review_date=appointment.review_date,
            new_review_date=data.new_review_date,
            reason=data.reschedule_reason,
            rescheduled_by=ctx.actor.actor_id or 0,
        ))
        appointment.review_date = data.new_review_date
        appointment.place = data.place
        appointment.contact_person = data.contact_person
        appointment.room_number = data.room_number

        ctx.effect("appointment_rescheduled", appointment_id=appointment.id,
                   reschedule_count=len(appointment.reschedules))
        self._notify_applicant(
            ctx, "appointment_rescheduled", "Appointment Rescheduled",
            f"New date {data.new_review_date:%d %b %Y %H:%M} at {data.place}. Reason: {data.reschedule_reason}",
            email_kind="appointment",
            appointment=appointment.to_dict(),
            rescheduled=True,
            reason=data.reschedule_reason,
        )

    def _complete_verification(self, ctx: _Context, data: ApprovePayload):
        application = ctx.application
        missing = documents.missing_required_documents(application)
        if missing:
            raise ValidationError({"documents": "Missing: " + ", ".join(t.name for t in missing)})

        pending = documents.unverified_required_documents(application)
        if pending and not data.verify_all:
            raise ValidationError({
                "documents": "Not verified: " + ", ".join(DocumentType(d.document_type).name for d in pending)
            })
        now = utcnow()
        for document in pending:
            document.is_verified = True
            document.verified_by = ctx.actor.actor_id
            document.verified_at = now

        appointment = application.active_appointment
        if appointment is not None:
            appointment.is_active = False
            appointment.completed_at = now
            ctx.effect("appointment_completed", appointment_id=appointment.id)

        self._move(ctx, S.JE_VERIFIED, Action.APPROVE.value, ctx.actor, data.comments)
        self._render_stage_document(ctx, DocumentType.RECOMMENDATION_FORM)

    # ------------------------------------------------------------------ #
    # Approve / reject
    # ------------------------------------------------------------------ #
    def _approve(self, ctx: _Context, payload):
        data = self._parse(ApprovePayload, payload)
        status = S(ctx.application.status)

        if status == S.APPOINTMENT_SCHEDULED:
            self._complete_verification(ctx, data)
        elif status == S.CLERK_PENDING:
            application = ctx.application
            application.certificate_number = f"CERT-{application.application_number}"
            self._move(ctx, S.CLERK_APPROVED, Action.APPROVE.value, ctx.actor, data.comments)
            self._render_stage_document(ctx, DocumentType.LICENSE_CERTIFICATE)
        else:
            raise AuthorizationError()

    def _reject(self, ctx: _Context, payload):
        data = self._parse(RejectPayload, payload)
        application = ctx.application

        application.rejection_stage = application.status
        application.rejected_by_role = ctx.actor.role.value
        application.rejection_comments = data.comments
        application.rejected_at = utcnow()
        self._invalidate_sessions(application.id)

        self._move(ctx, S.REJECTED, Action.REJECT.value, ctx.actor, data.comments)
        rejected_by = ROLE_TITLES[ctx.actor.role]
        self._notify_applicant(
            ctx, "application_rejected", "Application Returned",
            f"Returned by {rejected_by}: {data.comments}",
            email_kind="rejection",
            rejected_by=rejected_by,
            comments=data.comments,
        )

    # ------------------------------------------------------------------ #
    # OTP signatures
    # ------------------------------------------------------------------ #
    def _generate_otp(self, ctx: _Context, payload):
        application = ctx.application
        status = S(application.status)
        target = signature_target(status)

        self._invalidate_sessions(application.id, ctx.actor.role)

        otp = generate_otp()
        session = SignatureSession(
            application_id=application.id,
            signer_role=ctx.actor.role.value,
            signer_id=ctx.actor.actor_id,
            stage_status=int(status),
            target_document=int(target),
            otp_hash=hash_otp(otp, f"{application.id}:{ctx.actor.role.value}"),
        )
        self.db.add(session)
        self.db.flush()

        officer = self.db.query(Officer).filter(Officer.id == ctx.actor.actor_id).first()
        ctx.outbox.append(("signature_otp", dict(
            to_email=officer.email if officer else None,
            name=officer.full_name if officer else ROLE_TITLES[ctx.actor.role],
            otp=otp,
            application_number=application.application_number,
            document_name=DOCUMENT_TITLES[target],
        )))
        ctx.effect("otp_sent", session_id=session.id, document=DOCUMENT_TITLES[target],
                   expires_at=session.expires_at.isoformat())

    def _replays_consumed_otp(self, application, actor: Actor, payload) -> bool:
        """True when the code belongs to a session this officer already signed with."""
        otp = payload.get("otp") if isinstance(payload, dict) else getattr(payload, "otp", None)
        if not otp:
            return False
        consumed = (
            self.db.query(SignatureSession)
            .filter(
                SignatureSession.application_id == application.id,
                SignatureSession.signer_role == actor.role.value,
                SignatureSession.signer_id == actor.actor_id,
                SignatureSession.consumed_at.isnot(None),
            )
            .all()
        )
        salt = f"{application.id}:{actor.role.value}"
        return any(otp_matches(str(otp), salt, s.otp_hash) for s in consumed)

    def _verify_and_sign(self, ctx: _Context, payload):
        data = self._parse(SignPayload, payload)
        application = ctx.application
        status = S(application.status)
        now = utcnow()

        session = (
            self.db.query(SignatureSession)
            .filter(
                SignatureSession.application_id == application.id,
                SignatureSession.signer_role == ctx.actor.role.value,
                SignatureSession.stage_status == int(status),
                SignatureSession.consumed_at.is_(None),
                SignatureSession.invalidated_at.is_(None),
            )
            .order_by(SignatureSession.id.desc())
            .first()
        )
        if session is None or not session.is_open(now):
            raise InvalidOtpError()
        if session.signer_id != ctx.actor.actor_id:
            raise InvalidOtpError()
        if not otp_matches(data.otp, f"{application.id}:{ctx.actor.role.value}", session.otp_hash):
            raise InvalidOtpError()

        # Compare-and-swap: exactly one caller consumes the session.
        consumed = (
            self.db.query(SignatureSession)
            .filter(
                SignatureSession.id == session.id,
                SignatureSession.consumed_at.is_(None),
                SignatureSession.invalidated_at.is_(None),
            )
            .update({"consumed_at": now}, synchronize_session=False)
        )
        if consumed != 1:
            raise InvalidOtpError()

        signature = DigitalSignature(
            application_id=application.id,
            session_id=session.id,
            signer_role=ctx.actor.role.value,
            signer_id=ctx.actor.actor_id,
            stage_status=int(status),
            submission_round=application.submission_round,
            target_document=session.target_document,
            comments=data.comments,
            signed_at=now,
        )
        application.signatures.append(signature)
        self.db.flush()
        ctx.effect("signature_recorded", signature_id=signature.id, stage=int(status))

        self._move(ctx, SIGN_TRANSITIONS[status], Action.VERIFY_AND_SIGN.value, ctx.actor, data.comments)
        self._render_stage_document(ctx, DocumentType(session.target_document))

    # ------------------------------------------------------------------ #
    # Payment
    # ------------------------------------------------------------------ #
    def _request_payment(self, ctx: _Context):
        application = ctx.application
        self._notify_applicant(
            ctx, "payment_required", "Payment Required",
            f"Please pay the registration fee of ₹{application.fee_amount:,} "
            f"for application {application.application_number}.",
        )

    def _initiate_payment(self, ctx: _Context, payload):
        application = ctx.application
        reference = f"PAY-{application.id}-{secrets.token_hex(4).upper()}"
        payment = Payment(
            application_id=application.id,
            amount=application.fee_amount,
            status="pending",
            payment_reference=reference,
            initiated_by=ctx.actor.role.value,
        )
        self.db.add(payment)
        ctx.effect("payment_initiated", payment_reference=reference, amount=application.fee_amount)

    def _confirm_payment(self, ctx: _Context, payload):
        data = self._parse(ConfirmPaymentPayload, payload)
        application = ctx.application
        if data.amount is not None and data.amount != application.fee_amount:
            raise ValidationError({"amount": f"Expected {application.fee_amount}"})

        claimed = (
            self.db.query(Payment)
            .filter(
                Payment.gateway_reference == data.gateway_reference,
                Payment.status == "success",
                Payment.application_id != application.id,
            )
            .first()
        )
        if claimed is not None:
            logger.warning(
                f"❌ Gateway reference {data.gateway_reference} already paid application {claimed.application_id}"
            )
            raise ConflictError("Gateway transaction already used for another application")

        gateway_data = self.payment_verifier(data.gateway_reference, application.fee_amount)
        if not payment_service.is_successful(gateway_data):
            raise ValidationError({"gateway_reference": "Payment not successful at gateway"})
        if not payment_service.amount_matches(gateway_data, application.fee_amount):
            raise ValidationError({"amount": f"Gateway reported {gateway_data.get('amount')}, expected {application.fee_amount}"})

        now = utcnow()
        payment = (
            self.db.query(Payment)
            .filter(Payment.application_id == application.id, Payment.status == "pending")
            .order_by(Payment.created_at.desc())
            .first()
        )
        if payment is None:
            payment = Payment(
                application_id=application.id,
                amount=application.fee_amount,
                payment_reference=f"PAY-{application.id}-{secrets.token_hex(4).upper()}",
                initiated_by=ctx.actor.role.value,
            )
            self.db.add(payment)
        payment.status = "success"
        payment.gateway_reference = data.gateway_reference
        payment.verification_data = gateway_data
        payment.paid_at = now

        application.payment_completed = True
        application.payment_completed_at = now
        application.payment_reference = data.gateway_reference
        application.payment_amount = application.fee_amount
        application.challan_number = f"CHN{now:%Y%m%d}{application.id}"

        content = self.pdf.generate_payment_challan(
            application, application.fee_amount, application.challan_number, data.gateway_reference
        )
        documents.attach_system_document(application, DocumentType.PAYMENT_CHALLAN, content)
        ctx.effect("payment_recorded", amount=application.fee_amount, challan_number=application.challan_number)

        self._move(ctx, S.PAID, Action.CONFIRM_PAYMENT.value, ctx.actor)
        self._notify_applicant(
            ctx, "payment_received", "Payment Received",
            f"Payment of ₹{application.fee_amount:,} received. Challan {application.challan_number}.",
            email_kind="payment_received",
            amount=application.fee_amount,
            challan_number=application.challan_number,
        )

    # ------------------------------------------------------------------ #
    # Certificate
    # ------------------------------------------------------------------ #
    def _request_certificate(self, ctx: _Context):
        application = ctx.application
        application.approved_at = utcnow()
        if application.certificate is None:
            application.certificate = Certificate(
                certificate_number=application.certificate_number or f"CERT-{application.application_number}",
                status="pending",
            )
        ctx.effect("certificate_requested", certificate_number=application.certificate.certificate_number)
        self._notify_applicant(
            ctx, "application_approved", "Application Approved",
            f"Application {application.application_number} is approved. Your certificate is being prepared.",
        )

    # ------------------------------------------------------------------ #
    # Named commands
    # ------------------------------------------------------------------ #
    def save_draft(self, application_id: int, actor: Actor, payload) -> TransitionResult:
        return self.apply_transition(application_id, Action.SAVE_DRAFT, actor, payload)

    def submit(self, application_id: int, actor: Actor) -> TransitionResult:
        return self.apply_transition(application_id, Action.SUBMIT, actor)

    def assign(self, application_id: int) -> TransitionResult:
        return self.apply_transition(application_id, Action.ASSIGN, Actor.system())

    def approve(self, application_id: int, actor: Actor, payload=None) -> TransitionResult:
        return self.apply_transition(application_id, Action.APPROVE, actor, payload)

    def reject(self, application_id: int, actor: Actor, comments: str) -> TransitionResult:
        return self.apply_transition(application_id, Action.REJECT, actor, {"comments": comments})

    def schedule_appointment(self, application_id: int, actor: Actor, payload) -> TransitionResult:
        return self.apply_transition(application_id, Action.SCHEDULE_APPOINTMENT, actor, payload)

    def reschedule_appointment(self, appointment_id: int, actor: Actor, payload) -> TransitionResult:
        appointment = self.db.query(Appointment).filter(Appointment.id == appointment_id).first()
        if appointment is None:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        data = self._payload_dict(payload)
        data["appointment_id"] = appointment_id
        return self.apply_transition(appointment.application_id, Action.RESCHEDULE_APPOINTMENT, actor, data)

    def generate_otp(self, application_id: int, actor: Actor) -> TransitionResult:
        return self.apply_transition(application_id, Action.GENERATE_OTP, actor)

    def verify_and_sign(self, application_id: int, actor: Actor, otp: str,
                        comments: Optional[str] = None) -> TransitionResult:
        return self.apply_transition(application_id, Action.VERIFY_AND_SIGN, actor,
                                     {"otp": otp, "comments": comments})

    def initiate_payment(self, application_id: int, actor: Actor) -> TransitionResult:
        return self.apply_transition(application_id, Action.INITIATE_PAYMENT, actor)

    def confirm_payment(self, application_id: int, actor: Actor, gateway_reference: str,
                        amount: Optional[int] = None) -> TransitionResult:
        return self.apply_transition(application_id, Action.CONFIRM_PAYMENT, actor,
                                     {"gateway_reference": gateway_reference, "amount": amount})

    def resubmit(self, application_id: int, actor: Actor) -> TransitionResult:
        return self.apply_transition(application_id, Action.RESUBMIT, actor)

    @staticmethod
    def _payload_dict(payload) -> dict:
        if payload is None:
            return {}
        if isinstance(payload, BaseModel):
            return payload.model_dump(exclude_unset=True)
        return dict(payload)
