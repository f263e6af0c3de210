# licensing/routes/officer_auth.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from licensing.auth.dependencies import get_current_officer
from licensing.database import get_db
from licensing.models.officer import Officer
from licensing.schemas.officer import OfficerLogin, OfficerResponse
from licensing.schemas.token import Token
from licensing.services.account_service import OfficerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/officer", tags=["Officer Auth"])


@router.post("/login", response_model=Token)
def login(data: OfficerLogin, db: Session = Depends(get_db)):
    officer = OfficerService.authenticate(db, data.email, data.password)
    if not officer:
        logger.warning(f"❌ Failed officer login for {data.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    logger.info(f"✅ Officer {officer.email} logged in as {officer.role}")
    return Token(access_token=OfficerService.issue_token(officer), role=officer.role, user_id=officer.id)


@router.get("/me", response_model=OfficerResponse)
def me(current_officer: Officer = Depends(get_current_officer)):
    return current_officer
