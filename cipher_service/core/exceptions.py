"""Common exception helpers for the cipher service."""
from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base exception for application specific errors."""

    status_code = 500
    error_code = "app_error"
    default_detail = "An unexpected error occurred."

    def __init__(self, detail: str | None = None, *, extra: dict[str, Any] | None = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail
        self.extra = extra or {}


class ConfigurationError(AppError):
    """Raised at startup when the service cannot be wired; always fatal."""

    error_code = "configuration_error"
    default_detail = "Invalid service configuration."


class KeyMaterialError(ConfigurationError):
    error_code = "invalid_key_material"
    default_detail = "Cipher key or IV has the wrong length."


class MetricsError(ConfigurationError):
    error_code = "metrics_error"
    default_detail = "Metrics registry misuse."


class DuplicateMetricError(MetricsError):
    error_code = "duplicate_metric"

    def __init__(self, name: str) -> None:
        self.metric_name = name
        super().__init__(f"Metric '{name}' is already registered", extra={"metric": name})


class DomainError(AppError):
    """Normalized domain error surfaced to API handlers."""


class BadRequestError(DomainError):
    status_code = 400
    error_code = "bad_request"
    default_detail = "Invalid request."


class DecryptionError(BadRequestError):
    error_code = "invalid_ciphertext"
    default_detail = "Ciphertext could not be decrypted."

