# licensing/models/__init__.py

from .applicant import Applicant
from .officer import Officer
from .application import PositionApplication, Address, Qualification, Experience
from .document import ApplicationDocument
from .appointment import Appointment, AppointmentReschedule
from .signature import SignatureSession, DigitalSignature
from .payment import Payment
from .certificate import Certificate
from .notification import Notification
from .status_history import StatusHistory

__all__ = [
    "Applicant", "Officer", "PositionApplication", "Address", "Qualification", "Experience",
    "ApplicationDocument", "Appointment", "AppointmentReschedule", "SignatureSession",
    "DigitalSignature", "Payment", "Certificate", "Notification", "StatusHistory",
]
