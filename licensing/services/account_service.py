# licensing/services/account_service.py
import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from licensing.models.applicant import Applicant
from licensing.models.application import PositionApplication
from licensing.models.officer import Officer
from licensing.utils.dates import utcnow
from licensing.utils.hash import hash_password, verify_password
from licensing.utils.token import create_access_token
from licensing.workflow.policy import Actor
from licensing.workflow.status import ApplicationStatus, OFFICER_ROLES, PositionType, Role, position_fee

logger = logging.getLogger(__name__)


class ApplicantService:
    """Applicant accounts and the applications they own"""

    @staticmethod
    def register(db: Session, full_name: str, email: str, mobile_number: str, password: str) -> Applicant:
        email = email.strip().lower()
        existing = db.query(Applicant).filter(func.lower(Applicant.email) == email).first()
        if existing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="An account with this email already exists"
            )

        applicant = Applicant(
            full_name=full_name.strip(),
            email=email,
            mobile_number=mobile_number.strip(),
            password_hash=hash_password(password),
        )
        try:
            db.add(applicant)
            db.commit()
            db.refresh(applicant)
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to register applicant {email}: {str(e)}")
            raise
        logger.info(f"👤 Applicant registered: {email}")
        return applicant

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> Optional[Applicant]:
        applicant = db.query(Applicant).filter(func.lower(Applicant.email) == email.strip().lower()).first()
        if not applicant or not applicant.is_active or not verify_password(password, applicant.password_hash):
            return None
        applicant.last_login = utcnow()
        db.commit()
        return applicant

    @staticmethod
    def issue_token(applicant: Applicant) -> str:
        return create_access_token({"sub": str(applicant.id), "role": Role.APPLICANT.value})

    @staticmethod
    def create_application(db: Session, applicant: Applicant, position_type: int) -> PositionApplication:
        try:
            position = PositionType(int(position_type))
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown position type")

        application = PositionApplication(
            applicant_id=applicant.id,
            position_type=int(position),
            status=int(ApplicationStatus.DRAFT),
            fee_amount=position_fee(position),
            email=applicant.email,
            mobile_number=applicant.mobile_number,
        )
        try:
            db.add(application)
            db.commit()
            db.refresh(application)
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to create application for {applicant.email}: {str(e)}")
            raise
        logger.info(f"📝 Draft application {application.id} created for {applicant.email} ({position.name})")
        return application


class OfficerService:
    """Officer accounts. Officers are provisioned, not self-registered."""

    @staticmethod
    def create_officer(db: Session, full_name: str, email: str, password: str, role: Role,
                       position_type: Optional[int] = None, phone: Optional[str] = None) -> Officer:
        role = Role(role)
        if role not in OFFICER_ROLES:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Not an officer role")
        if role == Role.ASSISTANT_ENGINEER and position_type is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Assistant Engineers must be assigned a position type"
            )

        officer = Officer(
            full_name=full_name,
            email=email.strip().lower(),
            phone=phone,
            password_hash=hash_password(password),
            role=role.value,
            position_type=int(position_type) if position_type is not None else None,
        )
        try:
            db.add(officer)
            db.commit()
            db.refresh(officer)
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to create officer {email}: {str(e)}")
            raise
        logger.info(f"👮 Officer created: {officer.email} ({role.value})")
        return officer

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> Optional[Officer]:
        officer = db.query(Officer).filter(func.lower(Officer.email) == email.strip().lower()).first()
        if not officer or not officer.is_active or not verify_password(password, officer.password_hash):
            return None
        officer.last_login = utcnow()
        db.commit()
        return officer

    @staticmethod
    def issue_token(officer: Officer) -> str:
        return create_access_token({
            "sub": str(officer.id),
            "role": officer.role,
            "position_type": officer.position_type,
        })

    @staticmethod
    def actor_for(officer: Officer) -> Actor:
        position = PositionType(officer.position_type) if officer.position_type is not None else None
        return Actor(role=Role(officer.role), actor_id=officer.id, position_type=position)
