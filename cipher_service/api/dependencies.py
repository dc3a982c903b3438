"""FastAPI dependency providers."""
from fastapi import Depends, Request

from cipher_service.core.metrics import MetricsRegistry
from cipher_service.services.cipher_service import CipherService
from cipher_service.services.registry import ServiceRegistry


def get_service_registry(request: Request) -> ServiceRegistry:
    """Return the service registry stored on the FastAPI application state."""

    registry = getattr(request.app.state, "services", None)
    if not isinstance(registry, ServiceRegistry):
        raise RuntimeError("Service registry not initialised")
    return registry


def get_cipher_service(registry: ServiceRegistry = Depends(get_service_registry)) -> CipherService:
    return registry.cipher_service


def get_metrics_registry(registry: ServiceRegistry = Depends(get_service_registry)) -> MetricsRegistry:
    return registry.metrics
