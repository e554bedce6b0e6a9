"""Entry point for the relay service.

Usage::

    python -m whatsapp_relay
"""

from __future__ import annotations

import asyncio
import sys

import structlog

from .config import RelayConfig
from .errors import ConfigurationError, RelayCrashedError
from .logging import setup_logging
from .service import RelayService

logger = structlog.get_logger()


def main() -> None:
    config = RelayConfig()
    setup_logging(json=config.log_json, level=config.log_level, service=config.name)
    service = RelayService(config)
    try:
        asyncio.run(service.run())
    except ConfigurationError as exc:
        logger.critical("startup_configuration_error", error=str(exc))
        sys.exit(1)
    except RelayCrashedError as exc:
        logger.critical("relay_crashed", error=repr(exc.__cause__))
        sys.exit(1)


if __name__ == "__main__":
    main()
