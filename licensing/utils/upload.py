import hashlib
import os

from licensing.config import settings

UPLOAD_SUBDIR = "uploads"


def storage_path(handle: str) -> str:
    return os.path.join(settings.STORAGE_DIR, UPLOAD_SUBDIR, handle[:2], handle)


def store_bytes(content: bytes) -> str:
    """Write content into the content-addressed store and return its sha256 handle."""
    handle = hashlib.sha256(content).hexdigest()
    file_path = storage_path(handle)
    if not os.path.exists(file_path):
        os.makedirs(os.path.dirname(file_path), exist_ok=True)
        with open(file_path, "wb") as buffer:
            buffer.write(content)
    return handle


def read_stored(handle: str) -> bytes:
    with open(storage_path(handle), "rb") as f:
        return f.read()
