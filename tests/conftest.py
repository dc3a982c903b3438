"""Shared fixtures: isolated settings and a fresh application per test."""
import os
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from cipher_service.core.config import CONFIG_FILE_ENV, ENV_PREFIX, Settings, get_settings
from cipher_service.core.metrics import MetricsRegistry
from cipher_service.main import create_app


@pytest.fixture(autouse=True)
def _isolate_config(tmp_path, monkeypatch) -> Iterator[None]:
    """Keep the developer's environment and app.json out of the tests."""
    for name in list(os.environ):
        if name.startswith(ENV_PREFIX):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv(CONFIG_FILE_ENV, str(tmp_path / "app.json"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def settings() -> Settings:
    return Settings(sample_interval=0.05)


@pytest.fixture()
def metrics() -> MetricsRegistry:
    return MetricsRegistry(namespace="app")


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app) -> Iterator[TestClient]:
    """A test client with the lifespan (and the sampler) running."""
    with TestClient(app) as test_client:
        yield test_client
