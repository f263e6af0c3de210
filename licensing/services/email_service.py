from pathlib import Path

from fastapi_mail import FastMail, MessageSchema, ConnectionConfig
from jinja2 import Environment, FileSystemLoader, select_autoescape
from licensing.config import settings
import logging

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"

# ✅ Always include a professional display name
MAIL_FROM_NAME = "PMC Licensing"

env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), autoescape=select_autoescape(["html"]))


# Two configs: one for TLS (587), one for SSL (465)
def _connection_config(use_ssl: bool) -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=settings.EMAIL_HOST_USER,
        MAIL_PASSWORD=settings.EMAIL_HOST_PASSWORD,
        MAIL_FROM=settings.EMAIL_FROM,
        MAIL_FROM_NAME=MAIL_FROM_NAME,
        MAIL_PORT=465 if use_ssl else 587,
        MAIL_SERVER=settings.EMAIL_HOST,
        MAIL_STARTTLS=not use_ssl,
        MAIL_SSL_TLS=use_ssl,
        USE_CREDENTIALS=True,
        VALIDATE_CERTS=True,
        TEMPLATE_FOLDER=TEMPLATE_DIR,
    )


# 🔁 Central retry wrapper
async def send_email_with_retry(message: MessageSchema, subject: str, to_email: str):
    """Try sending via TLS first (587), then SSL (465) if it fails"""
    try:
        fm = FastMail(_connection_config(use_ssl=False))
        await fm.send_message(message)
        logger.info(f"{subject} email sent to {to_email} via port 587")
        return True
    except Exception as e:
        logger.warning(f"Failed to send {subject} via port 587: {str(e)}")
        try:
            fm = FastMail(_connection_config(use_ssl=True))
            await fm.send_message(message)
            logger.info(f"{subject} email sent to {to_email} via port 465")
            return True
        except Exception as e2:
            logger.error(f"Failed to send {subject} email via both ports: {str(e2)}")
            return False


def render_template(template: str, **context) -> str:
    return env.get_template(template).render(frontend_url=settings.FRONTEND_URL, **context)


async def send_templated_email(to_email: str, subject: str, template: str, **context):
    try:
        html = render_template(template, **context)
    except Exception as e:
        logger.error(f"Failed to render {template} for {to_email}: {str(e)}")
        return False

    message = MessageSchema(
        subject=subject,
        recipients=[to_email],
        body=html,
        subtype="html"
    )
    return await send_email_with_retry(message, subject, to_email)


# 🔑 Signature OTP email
async def send_signature_otp_email(to_email: str, name: str, otp: str, application_number: str,
                                   document_name: str):
    return await send_templated_email(
        to_email,
        "PMC Licensing - Digital Signature OTP",
        "signature_otp.html",
        name=name,
        otp=otp,
        application_number=application_number,
        document_name=document_name,
        expire_minutes=settings.SIGNATURE_OTP_EXPIRE_MINUTES,
    )


async def send_appointment_email(to_email: str, name: str, application_number: str, appointment: dict,
                                 rescheduled: bool = False, reason: str = None):
    template = "appointment_rescheduled.html" if rescheduled else "appointment_scheduled.html"
    subject = "PMC Licensing - Appointment Rescheduled" if rescheduled else "PMC Licensing - Appointment Scheduled"
    return await send_templated_email(
        to_email, subject, template,
        name=name, application_number=application_number, appointment=appointment, reason=reason,
    )


async def send_rejection_email(to_email: str, name: str, application_number: str, rejected_by: str,
                               comments: str):
    return await send_templated_email(
        to_email,
        "PMC Licensing - Application Returned",
        "application_rejected.html",
        name=name, application_number=application_number, rejected_by=rejected_by, comments=comments,
    )


async def send_payment_received_email(to_email: str, name: str, application_number: str, amount: int,
                                      challan_number: str):
    return await send_templated_email(
        to_email,
        "PMC Licensing - Payment Received",
        "payment_received.html",
        name=name, application_number=application_number, amount=amount, challan_number=challan_number,
    )


async def send_certificate_ready_email(to_email: str, name: str, application_number: str,
                                       certificate_number: str):
    return await send_templated_email(
        to_email,
        "PMC Licensing - Licence Certificate Issued",
        "certificate_ready.html",
        name=name, application_number=application_number, certificate_number=certificate_number,
    )


async def send_status_update_email(to_email: str, name: str, application_number: str, title: str,
                                   message: str):
    return await send_templated_email(
        to_email,
        f"PMC Licensing - {title}",
        "status_update.html",
        name=name, application_number=application_number, title=title, message=message,
    )
