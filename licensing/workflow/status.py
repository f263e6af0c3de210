"""
Canonical lifecycle vocabulary for position applications.

Status codes are stored and exchanged as integers. The values are part of the
public contract (notification templates and dashboards branch on them), so
they must never be renumbered. Codes 1-23 keep the meaning of the legacy
status table; 24-37 are the workflow stages added with the officer chain.
"""
from enum import Enum, IntEnum
from typing import Dict, Optional

from licensing.config import settings


class ApplicationStatus(IntEnum):
    DRAFT = 1
    SUBMITTED = 2
    AE_SIGNED = 7
    EE_STAGE1_SIGNED = 10
    CE_STAGE1_SIGNED = 13
    PAYMENT_PENDING = 15
    PAID = 16
    CLERK_APPROVED = 18
    EE_STAGE2_SIGNED = 20
    CE_STAGE2_SIGNED = 22
    JE_PENDING = 24
    APPOINTMENT_SCHEDULED = 25
    JE_VERIFIED = 28
    AE_PENDING = 30
    EE_STAGE1_PENDING = 31
    EE_STAGE2_PENDING = 32
    CE_STAGE1_PENDING = 33
    CE_STAGE2_PENDING = 34
    CLERK_PENDING = 35
    APPROVED = 36
    REJECTED = 37


STATUS_DISPLAY_NAMES: Dict[ApplicationStatus, str] = {
    ApplicationStatus.DRAFT: "Draft",
    ApplicationStatus.SUBMITTED: "Submitted",
    ApplicationStatus.JE_PENDING: "Pending with Junior Engineer",
    ApplicationStatus.APPOINTMENT_SCHEDULED: "Appointment Scheduled",
    ApplicationStatus.JE_VERIFIED: "Documents Verified",
    ApplicationStatus.AE_PENDING: "Pending with Assistant Engineer",
    ApplicationStatus.AE_SIGNED: "Signed by Assistant Engineer",
    ApplicationStatus.EE_STAGE1_PENDING: "Pending with Executive Engineer",
    ApplicationStatus.EE_STAGE1_SIGNED: "Signed by Executive Engineer",
    ApplicationStatus.CE_STAGE1_PENDING: "Pending with City Engineer",
    ApplicationStatus.CE_STAGE1_SIGNED: "Signed by City Engineer",
    ApplicationStatus.PAYMENT_PENDING: "Payment Pending",
    ApplicationStatus.PAID: "Payment Completed",
    ApplicationStatus.CLERK_PENDING: "Pending with Clerk",
    ApplicationStatus.CLERK_APPROVED: "Processed by Clerk",
    ApplicationStatus.EE_STAGE2_PENDING: "Pending Executive Engineer Certificate Signature",
    ApplicationStatus.EE_STAGE2_SIGNED: "Certificate Signed by Executive Engineer",
    ApplicationStatus.CE_STAGE2_PENDING: "Pending City Engineer Certificate Signature",
    ApplicationStatus.CE_STAGE2_SIGNED: "Certificate Signed by City Engineer",
    ApplicationStatus.APPROVED: "Approved",
    ApplicationStatus.REJECTED: "Rejected",
}


def status_display_name(status) -> str:
    """Translate a status code (enum member or raw int) to its display label."""
    try:
        return STATUS_DISPLAY_NAMES[ApplicationStatus(int(status))]
    except (TypeError, ValueError, KeyError):
        return "Unknown"


class PositionType(IntEnum):
    ARCHITECT = 0
    LICENCE_ENGINEER = 1
    STRUCTURAL_ENGINEER = 2
    SUPERVISOR1 = 3
    SUPERVISOR2 = 4


POSITION_DISPLAY_NAMES = {
    PositionType.ARCHITECT: "Architect",
    PositionType.LICENCE_ENGINEER: "Licence Engineer",
    PositionType.STRUCTURAL_ENGINEER: "Structural Engineer",
    PositionType.SUPERVISOR1: "Supervisor 1",
    PositionType.SUPERVISOR2: "Supervisor 2",
}

APPLICATION_NUMBER_PREFIXES = {
    PositionType.ARCHITECT: "ARC",
    PositionType.LICENCE_ENGINEER: "LIC",
    PositionType.STRUCTURAL_ENGINEER: "SE",
    PositionType.SUPERVISOR1: "SUP1",
    PositionType.SUPERVISOR2: "SUP2",
}


def position_fee(position_type: PositionType) -> int:
    fees = {
        PositionType.ARCHITECT: settings.FEE_ARCHITECT,
        PositionType.LICENCE_ENGINEER: settings.FEE_LICENCE_ENGINEER,
        PositionType.STRUCTURAL_ENGINEER: settings.FEE_STRUCTURAL_ENGINEER,
        PositionType.SUPERVISOR1: settings.FEE_SUPERVISOR1,
        PositionType.SUPERVISOR2: settings.FEE_SUPERVISOR2,
    }
    return fees[PositionType(position_type)]


class Role(str, Enum):
    APPLICANT = "applicant"
    JUNIOR_ENGINEER = "junior_engineer"
    ASSISTANT_ENGINEER = "assistant_engineer"
    EXECUTIVE_ENGINEER = "executive_engineer"
    CITY_ENGINEER = "city_engineer"
    CLERK = "clerk"
    SYSTEM = "system"


OFFICER_ROLES = (
    Role.JUNIOR_ENGINEER,
    Role.ASSISTANT_ENGINEER,
    Role.EXECUTIVE_ENGINEER,
    Role.CITY_ENGINEER,
    Role.CLERK,
)

SIGNING_ROLES = (Role.ASSISTANT_ENGINEER, Role.EXECUTIVE_ENGINEER, Role.CITY_ENGINEER)


class Action(str, Enum):
    SAVE_DRAFT = "save_draft"
    SUBMIT = "submit"
    ASSIGN = "assign"
    SCHEDULE_APPOINTMENT = "schedule_appointment"
    RESCHEDULE_APPOINTMENT = "reschedule_appointment"
    APPROVE = "approve"
    REJECT = "reject"
    GENERATE_OTP = "generate_otp"
    VERIFY_AND_SIGN = "verify_and_sign"
    INITIATE_PAYMENT = "initiate_payment"
    CONFIRM_PAYMENT = "confirm_payment"
    RESUBMIT = "resubmit"


class DocumentType(IntEnum):
    ADDRESS_PROOF = 0
    PAN_CARD = 1
    AADHAR_CARD = 2
    DEGREE_CERTIFICATE = 3
    MARKSHEET = 4
    EXPERIENCE_CERTIFICATE = 5
    ISSE_CERTIFICATE = 6
    PROPERTY_TAX_RECEIPT = 7
    PROFILE_PICTURE = 8
    SELF_DECLARATION = 9
    COA_CERTIFICATE = 10
    ADDITIONAL_DOCUMENT = 11
    RECOMMENDATION_FORM = 12
    LICENSE_CERTIFICATE = 13
    PAYMENT_CHALLAN = 14


SYSTEM_DOCUMENT_TYPES = (
    DocumentType.RECOMMENDATION_FORM,
    DocumentType.LICENSE_CERTIFICATE,
    DocumentType.PAYMENT_CHALLAN,
)

BASE_REQUIRED_DOCUMENTS = (
    DocumentType.PAN_CARD,
    DocumentType.AADHAR_CARD,
    DocumentType.DEGREE_CERTIFICATE,
    DocumentType.MARKSHEET,
    DocumentType.PROFILE_PICTURE,
    DocumentType.SELF_DECLARATION,
)


def required_documents(position_type: PositionType):
    if PositionType(position_type) == PositionType.ARCHITECT:
        return BASE_REQUIRED_DOCUMENTS + (DocumentType.COA_CERTIFICATE,)
    return BASE_REQUIRED_DOCUMENTS


# Which document a signature at a given pending stage lands on.
SIGNATURE_TARGETS: Dict[ApplicationStatus, DocumentType] = {
    ApplicationStatus.AE_PENDING: DocumentType.RECOMMENDATION_FORM,
    ApplicationStatus.EE_STAGE1_PENDING: DocumentType.RECOMMENDATION_FORM,
    ApplicationStatus.CE_STAGE1_PENDING: DocumentType.RECOMMENDATION_FORM,
    ApplicationStatus.EE_STAGE2_PENDING: DocumentType.LICENSE_CERTIFICATE,
    ApplicationStatus.CE_STAGE2_PENDING: DocumentType.LICENSE_CERTIFICATE,
}


def signature_target(status: ApplicationStatus) -> Optional[DocumentType]:
    return SIGNATURE_TARGETS.get(ApplicationStatus(status))
