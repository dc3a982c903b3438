"""Root API router that aggregates all endpoint modules."""
from fastapi import APIRouter

from cipher_service.api.routes import encrypt, metrics

api_router = APIRouter()
api_router.include_router(encrypt.router, tags=["encryption"])
api_router.include_router(metrics.router, tags=["metrics"])
