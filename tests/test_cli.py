from unittest.mock import patch

import pytest

from cipher_service import cli


def test_short_key_aborts_before_serving(monkeypatch):
    monkeypatch.setenv("CIPHER_SERVICE_CIPHER_KEY", "short")

    with patch.object(cli.uvicorn, "run") as run:
        with pytest.raises(SystemExit) as excinfo:
            cli.main()

    assert excinfo.value.code == 1
    run.assert_not_called()


def test_invalid_setting_aborts_before_serving(monkeypatch):
    monkeypatch.setenv("CIPHER_SERVICE_SAMPLE_INTERVAL", "0")

    with patch.object(cli.uvicorn, "run") as run:
        with pytest.raises(SystemExit) as excinfo:
            cli.main()

    assert excinfo.value.code == 1
    run.assert_not_called()


def test_valid_config_runs_uvicorn_on_configured_address(monkeypatch):
    monkeypatch.setenv("CIPHER_SERVICE_PORT", "9001")

    with patch.object(cli.uvicorn, "run") as run:
        cli.main()

    run.assert_called_once()
    args, kwargs = run.call_args
    assert args == ("cipher_service.main:app",)
    assert kwargs["host"] == "0.0.0.0"
    assert kwargs["port"] == 9001
    assert kwargs["log_level"] == "info"
