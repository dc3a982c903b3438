"""Command-line entry point that validates configuration and runs uvicorn."""
from __future__ import annotations

import logging

import uvicorn
from pydantic import ValidationError

from cipher_service.core.cipher import CipherKeyMaterial
from cipher_service.core.config import get_settings
from cipher_service.core.exceptions import ConfigurationError
from cipher_service.core.logging import LOGGER_NAME


def main() -> None:
    """Run the ASGI application using uvicorn."""
    try:
        settings = get_settings()
        CipherKeyMaterial.from_settings(settings)
    except (ConfigurationError, ValidationError) as exc:
        logging.basicConfig(level=logging.INFO)
        logging.getLogger(LOGGER_NAME).critical("Startup aborted: %s", exc)
        raise SystemExit(1) from exc
    uvicorn.run(
        "cipher_service.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=2,
        reload=False,
        access_log=False,
    )


if __name__ == "__main__":
    main()
