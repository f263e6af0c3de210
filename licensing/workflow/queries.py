"""Read side of the workflow: application views, officer queues and dashboards."""
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from licensing.models.application import PositionApplication
from licensing.models.status_history import StatusHistory
from licensing.workflow.errors import AuthorizationError, NotFoundError
from licensing.workflow.policy import Actor, allowed_actions, states_for_role
from licensing.workflow.status import (
    ApplicationStatus,
    POSITION_DISPLAY_NAMES,
    PositionType,
    Role,
    signature_target,
    status_display_name,
)


def _load(db: Session, application_id: int, actor: Actor) -> PositionApplication:
    application = db.query(PositionApplication).filter(PositionApplication.id == application_id).first()
    if not application:
        raise NotFoundError(f"Application {application_id} not found")
    if actor.role == Role.APPLICANT and application.applicant_id != actor.actor_id:
        raise AuthorizationError()
    return application


def _address_dict(address):
    if address is None:
        return None
    return {
        "address_type": address.address_type,
        "address_line1": address.address_line1,
        "address_line2": address.address_line2,
        "address_line3": address.address_line3,
        "city": address.city,
        "state": address.state,
        "country": address.country,
        "pin_code": address.pin_code,
    }


def summary(application: PositionApplication) -> dict:
    return {
        "id": application.id,
        "application_number": application.application_number,
        "applicant_name": application.full_name,
        "position_type": application.position_type,
        "position_name": POSITION_DISPLAY_NAMES[PositionType(application.position_type)],
        "status": application.status,
        "status_name": status_display_name(application.status),
        "submitted_at": application.submitted_at.isoformat() if application.submitted_at else None,
    }


def get_application(db: Session, application_id: int, actor: Actor) -> dict:
    """Full view of one application, including its workflow sub-state."""
    application = _load(db, application_id, actor)
    status = ApplicationStatus(application.status)
    appointment = application.active_appointment
    target = signature_target(status)

    view = summary(application)
    view.update({
        "personal": {
            "first_name": application.first_name,
            "middle_name": application.middle_name,
            "last_name": application.last_name,
            "mother_name": application.mother_name,
            "email": application.email,
            "mobile_number": application.mobile_number,
            "gender": application.gender,
            "date_of_birth": application.date_of_birth.isoformat() if application.date_of_birth else None,
            "blood_group": application.blood_group,
            "pan_number": application.pan_number,
            "aadhar_number": application.aadhar_number,
            "coa_number": application.coa_number,
        },
        "addresses": {
            "local": _address_dict(application.get_address("local")),
            "permanent": _address_dict(application.get_address("permanent")),
            "permanent_same_as_local": application.permanent_same_as_local,
        },
        "qualifications": [
            {
                "institute_name": q.institute_name,
                "university_name": q.university_name,
                "specialization": q.specialization,
                "degree_name": q.degree_name,
                "year_of_passing": q.year_of_passing,
            }
            for q in application.qualifications
        ],
        "experiences": [
            {
                "company_name": e.company_name,
                "position": e.position,
                "from_date": e.from_date.isoformat(),
                "to_date": e.to_date.isoformat(),
                "years": e.years_of_experience,
            }
            for e in application.experiences
        ],
        "documents": [d.to_dict() for d in application.documents],
        "workflow": {
            "submission_round": application.submission_round,
            "allowed_actions": sorted(a.value for a in allowed_actions(status, actor.role)),
            "active_appointment": appointment.to_dict() if appointment else None,
            "signature_document": target.name if target is not None else None,
            "signatures": [
                s.to_dict() for s in application.signatures
                if s.submission_round == application.submission_round
            ],
            "rejection": {
                "stage": application.rejection_stage,
                "stage_name": status_display_name(application.rejection_stage),
                "rejected_by": application.rejected_by_role,
                "reason": application.rejection_reason,
                "rejected_at": application.rejected_at.isoformat() if application.rejected_at else None,
            } if application.rejection_stage is not None else None,
        },
        "payment": {
            "fee_amount": application.fee_amount,
            "completed": application.payment_completed,
            "amount": application.payment_amount,
            "reference": application.payment_reference,
            "challan_number": application.challan_number,
            "completed_at": application.payment_completed_at.isoformat() if application.payment_completed_at else None,
        },
        "certificate_number": application.certificate_number,
    })
    return view


def _queue_statuses(actor: Actor) -> list:
    if actor.role in (Role.APPLICANT, Role.SYSTEM):
        return []
    return [int(s) for s in states_for_role(actor.role)]


def _queue_filter(query, actor: Actor, statuses: list):
    """Restrict a query to the actor's queue, or None when the actor has no queue."""
    if not statuses:
        return None
    if actor.role == Role.ASSISTANT_ENGINEER:
        if actor.position_type is None:
            return None
        query = query.filter(PositionApplication.position_type == int(actor.position_type))
    return query.filter(PositionApplication.status.in_(statuses))


def get_pending_applications(db: Session, actor: Actor, position_type: Optional[int] = None) -> list:
    """Applications currently waiting on the actor's role."""
    query = _queue_filter(db.query(PositionApplication), actor, _queue_statuses(actor))
    if query is None:
        return []
    if position_type is not None:
        query = query.filter(PositionApplication.position_type == int(position_type))

    applications = query.order_by(PositionApplication.submitted_at.asc(), PositionApplication.id.asc()).all()
    return [summary(a) for a in applications]


def get_applicant_applications(db: Session, applicant_id: int) -> list:
    applications = (
        db.query(PositionApplication)
        .filter(PositionApplication.applicant_id == applicant_id)
        .order_by(PositionApplication.id.desc())
        .all()
    )
    return [summary(a) for a in applications]


def get_status_history(db: Session, application_id: int, actor: Actor) -> list:
    _load(db, application_id, actor)
    entries = (
        db.query(StatusHistory)
        .filter(StatusHistory.application_id == application_id)
        .order_by(StatusHistory.id.asc())
        .all()
    )
    history = []
    for entry in entries:
        item = entry.to_dict()
        item["to_status_name"] = status_display_name(entry.to_status)
        history.append(item)
    return history


def dashboard_stats(db: Session, actor: Actor) -> dict:
    """Pending counts for the actor's role, grouped by status."""
    statuses = _queue_statuses(actor)
    query = _queue_filter(
        db.query(PositionApplication.status, func.count(PositionApplication.id)), actor, statuses
    )
    counts = dict(query.group_by(PositionApplication.status).all()) if query is not None else {}

    by_status = {status_display_name(s): counts.get(s, 0) for s in statuses}
    return {
        "role": actor.role.value,
        "total_pending": sum(by_status.values()),
        "by_status": by_status,
    }
