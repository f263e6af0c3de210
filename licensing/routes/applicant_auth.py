# licensing/routes/applicant_auth.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from licensing.auth.dependencies import get_current_applicant
from licensing.database import get_db
from licensing.models.applicant import Applicant
from licensing.schemas.applicant import ApplicantLogin, ApplicantRegister, ApplicantResponse
from licensing.schemas.token import Token
from licensing.services.account_service import ApplicantService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applicant", tags=["Applicant Auth"])


@router.post("/register", response_model=ApplicantResponse, status_code=status.HTTP_201_CREATED)
def register(data: ApplicantRegister, db: Session = Depends(get_db)):
    return ApplicantService.register(db, data.full_name, data.email, data.mobile_number, data.password)


@router.post("/login", response_model=Token)
def login(data: ApplicantLogin, db: Session = Depends(get_db)):
    applicant = ApplicantService.authenticate(db, data.email, data.password)
    if not applicant:
        logger.warning(f"❌ Failed applicant login for {data.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Token(access_token=ApplicantService.issue_token(applicant), role="applicant", user_id=applicant.id)


@router.get("/me", response_model=ApplicantResponse)
def me(current_applicant: Applicant = Depends(get_current_applicant)):
    return current_applicant
