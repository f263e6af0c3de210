# licensing/auth/dependencies.py
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from licensing.database import get_db
from sqlalchemy.orm import Session
from licensing.models.applicant import Applicant
from licensing.models.officer import Officer
from licensing.config import settings
from licensing.workflow.policy import Actor
from licensing.workflow.status import PositionType, Role
import logging

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer()


def _decode(credentials: HTTPAuthorizationCredentials) -> dict:
    try:
        return jwt.decode(credentials.credentials, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"❌ JWT decode error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def _subject_id(payload: dict) -> int:
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token subject")


def get_current_applicant(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> Applicant:
    payload = _decode(credentials)
    if payload.get("role") != Role.APPLICANT.value:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid applicant token")

    applicant = db.query(Applicant).filter(Applicant.id == _subject_id(payload)).first()
    if not applicant or not applicant.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Applicant not found")
    return applicant


def get_current_officer(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> Officer:
    payload = _decode(credentials)
    if payload.get("role") == Role.APPLICANT.value:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid officer token")

    officer = db.query(Officer).filter(Officer.id == _subject_id(payload)).first()
    if not officer or not officer.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Officer not found")
    return officer


def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> Actor:
    """Resolve whoever holds the token into a workflow Actor. Role comes from the database, not the token."""
    payload = _decode(credentials)
    subject = _subject_id(payload)

    if payload.get("role") == Role.APPLICANT.value:
        applicant = db.query(Applicant).filter(Applicant.id == subject).first()
        if not applicant or not applicant.is_active:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Applicant not found")
        return Actor(role=Role.APPLICANT, actor_id=applicant.id)

    officer = db.query(Officer).filter(Officer.id == subject).first()
    if not officer or not officer.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Officer not found")
    position = PositionType(officer.position_type) if officer.position_type is not None else None
    return Actor(role=Role(officer.role), actor_id=officer.id, position_type=position)
