"""Service registry that wires all application services together."""
import asyncio
import logging

from cipher_service.core.cipher import CipherKeyMaterial
from cipher_service.core.config import Settings
from cipher_service.core.metrics import MetricsRegistry
from cipher_service.core.request_context import background_context
from cipher_service.services.cipher_service import CipherService
from cipher_service.services.resource_sampler import ResourceSampler, build_memory_reader

logger = logging.getLogger(__name__)


class ServiceRegistry:
    """Container object for dependency injection.

    Construction fails fast on invalid key material so the process never
    starts serving with a broken cipher.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.metrics = MetricsRegistry(namespace=settings.metrics_namespace)
        self.cipher_service = CipherService(CipherKeyMaterial.from_settings(settings))
        self.resource_sampler = ResourceSampler(
            self.metrics,
            interval=settings.sample_interval,
            reader=build_memory_reader(settings.memory_source),
        )
        self._lock = asyncio.Lock()
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    async def startup(self) -> None:
        async with self._lock:
            if self._started:
                return
            with background_context("registry"):
                logger.info("Starting background services")
                if not self.metrics.start_time_recorded:
                    self.metrics.record_start_time()
                await self.resource_sampler.start()
                self._started = True
                logger.info("Background services started")

    async def shutdown(self) -> None:
        async with self._lock:
            if not self._started:
                return
            with background_context("registry"):
                logger.info("Stopping background services")
                self._started = False
                try:
                    await self.resource_sampler.stop()
                except Exception as exc:  # noqa: BLE001
                    logger.error("Resource sampler stop failed: %s", exc, exc_info=exc)
                logger.info("Background services stopped")
