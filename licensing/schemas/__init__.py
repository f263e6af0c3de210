# licensing/schemas/__init__.py
from .applicant import ApplicantRegister, ApplicantLogin, ApplicantResponse, ApplicationCreate
from .officer import OfficerLogin, OfficerCreate, OfficerResponse
from .payment import GatewayCallback
from .token import Token

__all__ = [
    "ApplicantRegister",
    "ApplicantLogin",
    "ApplicantResponse",
    "ApplicationCreate",
    "OfficerLogin",
    "OfficerCreate",
    "OfficerResponse",
    "GatewayCallback",
    "Token",
]
