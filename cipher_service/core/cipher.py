"""AES-128-CBC primitives with PKCS#7 padding."""
from __future__ import annotations

from dataclasses import dataclass

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from cipher_service.core.config import Settings
from cipher_service.core.exceptions import DecryptionError, KeyMaterialError

BLOCK_SIZE_BYTES = algorithms.AES.block_size // 8
KEY_SIZE_BYTES = 16


@dataclass(frozen=True)
class CipherKeyMaterial:
    """Fixed key/IV pair shared by every request for the process lifetime."""

    key: bytes
    iv: bytes

    def __post_init__(self) -> None:
        if len(self.key) != KEY_SIZE_BYTES:
            raise KeyMaterialError(
                f"Cipher key must be {KEY_SIZE_BYTES} bytes, got {len(self.key)}",
                extra={"field": "key", "length": len(self.key)},
            )
        if len(self.iv) != BLOCK_SIZE_BYTES:
            raise KeyMaterialError(
                f"Cipher IV must be {BLOCK_SIZE_BYTES} bytes, got {len(self.iv)}",
                extra={"field": "iv", "length": len(self.iv)},
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CipherKeyMaterial":
        return cls(
            key=settings.cipher_key.get_secret_value().encode("utf-8"),
            iv=settings.cipher_iv.get_secret_value().encode("utf-8"),
        )

    def __repr__(self) -> str:
        return "CipherKeyMaterial(key=<redacted>, iv=<redacted>)"


class AesCbcCipher:
    """Deterministic AES-CBC cipher bound to one key/IV pair.

    The underlying ``Cipher`` object is built once; each call creates its own
    encryption context, so a single instance can serve concurrent requests.
    """

    def __init__(self, material: CipherKeyMaterial) -> None:
        self._cipher = Cipher(algorithms.AES(material.key), modes.CBC(material.iv))

    def encrypt(self, plaintext: bytes) -> bytes:
        """Pad ``plaintext`` to the block size and encrypt it.

        Args:
            plaintext: Arbitrary-length data, empty included.

        Returns:
            Raw ciphertext, always a positive multiple of the block size.
        """

        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext) + padder.finalize()
        encryptor = self._cipher.encryptor()
        return encryptor.update(padded) + encryptor.finalize()

    def decrypt(self, ciphertext: bytes) -> bytes:
        """Decrypt ``ciphertext`` and strip its padding.

        Raises:
            DecryptionError: The input is not whole blocks or the padding is invalid.
        """

        if not ciphertext or len(ciphertext) % BLOCK_SIZE_BYTES:
            raise DecryptionError(
                f"Ciphertext length must be a positive multiple of {BLOCK_SIZE_BYTES}",
                extra={"length": len(ciphertext)},
            )
        decryptor = self._cipher.decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        try:
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as exc:
            raise DecryptionError("Invalid padding") from exc
