# licensing/utils/otp.py
import hashlib
import hmac
import secrets
import string

from licensing.config import settings


# -------------------- OTP GENERATOR --------------------
def generate_otp(length: int = None) -> str:
    """Generate a numeric OTP (SIGNATURE_OTP_LENGTH digits by default)."""
    length = length or settings.SIGNATURE_OTP_LENGTH
    return ''.join(secrets.choice(string.digits) for _ in range(length))


# -------------------- OTP HASHING --------------------
def hash_otp(code: str, session_salt: str) -> str:
    """Keyed digest of an OTP; the plain code is never stored."""
    message = f"{session_salt}:{code.strip()}".encode()
    return hmac.new(settings.SECRET_KEY.encode(), message, hashlib.sha256).hexdigest()


def otp_matches(code: str, session_salt: str, stored_hash: str) -> bool:
    if not code:
        return False
    return hmac.compare_digest(hash_otp(code, session_salt), stored_hash)
