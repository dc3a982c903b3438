"""Encryption endpoint."""
from fastapi import APIRouter, Depends

from cipher_service.api.dependencies import get_cipher_service
from cipher_service.schemas import EncryptionRequest, EncryptionResponse
from cipher_service.services.cipher_service import CipherService

router = APIRouter()


@router.post(
    "/encrypt",
    response_model=EncryptionResponse,
    summary="Encrypt a secret with the service key",
)
async def encrypt(
    payload: EncryptionRequest,
    cipher_service: CipherService = Depends(get_cipher_service),
) -> EncryptionResponse:
    return cipher_service.encrypt(payload)
