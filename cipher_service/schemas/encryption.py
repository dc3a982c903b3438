"""Request/response schemas for the encryption endpoint."""
from pydantic import BaseModel, ConfigDict, Field


class EncryptionRequest(BaseModel):
    """Plaintext secret submitted to `/encrypt`."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"password": "hello"}}
    )

    password: str = Field(..., description="Plaintext to encrypt; may be empty")


class EncryptionResponse(BaseModel):
    """Base64 ciphertext returned by `/encrypt`."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={"example": {"encrypted_password": "mE4pV0t0k3n2bXlWb0FKQQ=="}},
    )

    encrypted_password: str = Field(..., description="Standard base64 of the AES-CBC ciphertext")
