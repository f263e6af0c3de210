from datetime import date, datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, field_validator

from licensing.utils.dates import to_naive_utc, utcnow


def _required_text(value: Optional[str]) -> str:
    if value is None or not str(value).strip():
        raise ValueError("must not be empty")
    return str(value).strip()


def _optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class TransitionPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SchedulePayload(TransitionPayload):
    review_date: datetime
    place: str
    contact_person: str
    room_number: str
    comments: Optional[str] = None

    clean_required = field_validator("place", "contact_person", "room_number", mode="before")(_required_text)
    clean_comments = field_validator("comments")(_optional_text)

    @field_validator("review_date")
    @classmethod
    def review_date_not_in_past(cls, value: datetime) -> datetime:
        value = to_naive_utc(value)
        if value < utcnow():
            raise ValueError("review date must not be in the past")
        return value


class ReschedulePayload(TransitionPayload):
    appointment_id: Optional[int] = None
    new_review_date: datetime
    reschedule_reason: str
    place: str
    contact_person: str
    room_number: str

    clean_required = field_validator(
        "reschedule_reason", "place", "contact_person", "room_number", mode="before"
    )(_required_text)

    @field_validator("new_review_date")
    @classmethod
    def review_date_not_in_past(cls, value: datetime) -> datetime:
        value = to_naive_utc(value)
        if value < utcnow():
            raise ValueError("review date must not be in the past")
        return value


class RejectPayload(TransitionPayload):
    comments: str

    clean_comments = field_validator("comments", mode="before")(_required_text)


class ApprovePayload(TransitionPayload):
    comments: Optional[str] = None
    # Document verification: mark every outstanding mandatory document verified.
    verify_all: bool = True

    clean_comments = field_validator("comments")(_optional_text)


class SignPayload(TransitionPayload):
    otp: str
    comments: Optional[str] = None

    clean_otp = field_validator("otp", mode="before")(_required_text)
    clean_comments = field_validator("comments")(_optional_text)


class ConfirmPaymentPayload(TransitionPayload):
    gateway_reference: str
    amount: Optional[int] = None

    clean_reference = field_validator("gateway_reference", mode="before")(_required_text)


class AddressInput(BaseModel):
    address_type: str
    address_line1: str
    address_line2: Optional[str] = None
    address_line3: Optional[str] = None
    city: str
    state: str
    country: str = "India"
    pin_code: str

    @field_validator("address_type")
    @classmethod
    def known_address_type(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ("local", "permanent"):
            raise ValueError("address_type must be 'local' or 'permanent'")
        return value


class QualificationInput(BaseModel):
    institute_name: str
    university_name: str
    specialization: Optional[str] = None
    degree_name: str
    passing_month: Optional[int] = None
    year_of_passing: int


class ExperienceInput(BaseModel):
    company_name: str
    position: str
    from_date: date
    to_date: date


class DraftPayload(TransitionPayload):
    """Partial update of an application's editable fields. Unset fields are left alone."""
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    mother_name: Optional[str] = None
    email: Optional[str] = None
    mobile_number: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    blood_group: Optional[str] = None
    height: Optional[float] = None
    pan_number: Optional[str] = None
    aadhar_number: Optional[str] = None
    coa_number: Optional[str] = None
    permanent_same_as_local: Optional[bool] = None
    addresses: Optional[List[AddressInput]] = None
    qualifications: Optional[List[QualificationInput]] = None
    experiences: Optional[List[ExperienceInput]] = None

    @field_validator("pan_number")
    @classmethod
    def normalise_pan(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().upper() if value else value
