import hashlib
import hmac
import logging

import httpx

from licensing.config import settings
from licensing.workflow.errors import ExternalServiceError

logger = logging.getLogger(__name__)


def verify_gateway_payment(reference: str, amount: int) -> dict:
    """
    Ask the payment gateway whether a transaction succeeded.

    Returns the gateway's transaction data. Raises ExternalServiceError when the
    gateway cannot be reached or answers with an error status; callers decide
    what a non-success transaction means.
    """
    if settings.PAYMENT_MOCK_MODE:
        logger.info(f"[Gateway] Mock mode, accepting {reference} for ₹{amount}")
        return {"status": "success", "reference": reference, "amount": amount, "mock": True}

    headers = {"Authorization": f"Bearer {settings.PAYMENT_GATEWAY_SECRET_KEY}"}
    url = f"{settings.PAYMENT_GATEWAY_VERIFY_URL.rstrip('/')}/{reference}"

    try:
        response = httpx.get(url, headers=headers, timeout=15.0)
        response.raise_for_status()
        return response.json().get("data", {})

    except httpx.RequestError as e:
        logger.error(f"[Gateway] Request error: {e}")
        raise ExternalServiceError("Payment gateway unreachable")
    except httpx.HTTPStatusError as e:
        logger.error(f"[Gateway] HTTP error: {e}")
        raise ExternalServiceError("Payment gateway returned an error")
    except ValueError as e:
        logger.error(f"[Gateway] Malformed response: {e}")
        raise ExternalServiceError("Payment gateway returned a malformed response")


def is_successful(gateway_data: dict) -> bool:
    return str(gateway_data.get("status", "")).lower() in ("success", "successful", "captured")


def amount_matches(gateway_data: dict, expected: int) -> bool:
    """A gateway that reports no amount is trusted on the status alone."""
    reported = gateway_data.get("amount")
    if reported is None:
        return True
    try:
        return float(reported) == float(expected)
    except (TypeError, ValueError):
        return False


def callback_signature(application_id: int, reference: str, amount) -> str:
    message = f"{application_id}:{reference}:{amount if amount is not None else ''}"
    return hmac.new(settings.PAYMENT_GATEWAY_SECRET_KEY.encode(), message.encode(), hashlib.sha256).hexdigest()


def verify_callback_signature(application_id: int, reference: str, amount, signature: str) -> bool:
    """Gateway callbacks are signed with the shared secret; mock mode accepts anything."""
    if settings.PAYMENT_MOCK_MODE:
        return True
    if not signature:
        return False
    return hmac.compare_digest(callback_signature(application_id, reference, amount), signature)
