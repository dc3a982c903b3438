"""Encryption service backing the `/encrypt` endpoint."""
from __future__ import annotations

import base64
import binascii

from cipher_service.core.cipher import AesCbcCipher, CipherKeyMaterial
from cipher_service.core.exceptions import DecryptionError
from cipher_service.schemas import EncryptionRequest, EncryptionResponse


class CipherService:
    """Encrypt submitted secrets under the process-wide key material.

    Stateless apart from the immutable cipher; never touches metrics and
    never logs payloads.
    """

    def __init__(self, material: CipherKeyMaterial) -> None:
        self._cipher = AesCbcCipher(material)

    def encrypt(self, request: EncryptionRequest) -> EncryptionResponse:
        ciphertext = self._cipher.encrypt(request.password.encode("utf-8", "surrogatepass"))
        encoded = base64.b64encode(ciphertext).decode("ascii")
        return EncryptionResponse(encrypted_password=encoded)

    def decrypt(self, encrypted_password: str) -> str:
        """Reverse :meth:`encrypt`; raises ``DecryptionError`` on bad input."""

        try:
            ciphertext = base64.b64decode(encrypted_password, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DecryptionError("Ciphertext is not valid base64") from exc
        plaintext = self._cipher.decrypt(ciphertext)
        try:
            return plaintext.decode("utf-8", "surrogatepass")
        except UnicodeDecodeError as exc:
            raise DecryptionError("Plaintext is not valid UTF-8") from exc
