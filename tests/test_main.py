"""Tests for the whatsapp_relay entry point."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from whatsapp_relay.__main__ import main
from whatsapp_relay.errors import ConfigurationError, RelayCrashedError


class TestMain:
    def test_runs_service_with_env_config(self, monkeypatch):
        monkeypatch.setenv("RELAY_NAME", "main-relay")
        service_cls = MagicMock()
        service_cls.return_value.run = AsyncMock()

        with (
            patch("whatsapp_relay.__main__.setup_logging") as mock_logging,
            patch("whatsapp_relay.__main__.RelayService", service_cls),
        ):
            main()

        mock_logging.assert_called_once_with(json=True, level="INFO", service="main-relay")
        config = service_cls.call_args.args[0]
        assert config.name == "main-relay"
        service_cls.return_value.run.assert_awaited_once()

    def test_configuration_error_exits_non_zero(self):
        service_cls = MagicMock()
        service_cls.return_value.run = AsyncMock(side_effect=ConfigurationError("whitelist file not found"))

        with (
            patch("whatsapp_relay.__main__.setup_logging"),
            patch("whatsapp_relay.__main__.RelayService", service_cls),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 1

    def test_crash_exits_non_zero(self):
        service_cls = MagicMock()
        service_cls.return_value.run = AsyncMock(side_effect=RelayCrashedError("relay stopped after a task failure"))

        with (
            patch("whatsapp_relay.__main__.setup_logging"),
            patch("whatsapp_relay.__main__.RelayService", service_cls),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 1
