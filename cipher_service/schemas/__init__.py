"""Pydantic schemas exposed by the application API."""
from .encryption import EncryptionRequest, EncryptionResponse

__all__ = [
    "EncryptionRequest",
    "EncryptionResponse",
]
