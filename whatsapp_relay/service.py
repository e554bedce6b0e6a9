"""RelayService: wires up the pipeline and runs it until shutdown."""

from __future__ import annotations

import asyncio
import signal
import time

import structlog
import uvicorn

from .api import create_app
from .channel import BatchChannel
from .config import RelayConfig
from .coordinator import IngestionCoordinator
from .errors import RelayCrashedError
from .models import RelayStatus
from .publisher import MessagePublisher
from .whitelist import WhitelistRegistry

logger = structlog.get_logger()


class RelayService:
    """Relay WhatsApp notification batches to Kafka.

    ``run()`` loads the whitelist, connects the publisher, and then runs
    the following concurrently via :class:`asyncio.TaskGroup`:

    * the ingestion coordinator, consuming the batch channel
    * the FastAPI server (health probes and batch webhook)

    On SIGTERM / SIGINT the webhook stops accepting batches, the
    coordinator drains what is already queued, and the producer is
    stopped, flushing any pending sends.  A crashed HTTP server takes the
    same path, after which ``run()`` raises :class:`RelayCrashedError`.
    """

    def __init__(self, config: RelayConfig, registry: WhitelistRegistry | None = None) -> None:
        self.config = config
        self.status: RelayStatus = RelayStatus.STARTING
        self.start_time: float = time.monotonic()
        self.channel = BatchChannel(config.ingestion.channel_max_size)

        self._registry = registry
        self._publisher = MessagePublisher(config.kafka, config.retry)
        self._coordinator: IngestionCoordinator | None = None
        self._shutdown_event = asyncio.Event()
        self._failure: BaseException | None = None

    # ------------------------------------------------------------------
    # Public properties (used by the API)
    # ------------------------------------------------------------------

    @property
    def accepting_batches(self) -> bool:
        return self.status == RelayStatus.RUNNING and not self._shutdown_event.is_set()

    def health_details(self) -> dict[str, object]:
        details: dict[str, object] = {
            "kafka_connected": self._publisher.is_started,
            "topic": self._publisher.topic,
            "queued_batches": self.channel.qsize(),
            "whitelisted_participants": len(self._registry) if self._registry is not None else 0,
        }
        if self._coordinator is not None:
            details.update(self._coordinator.stats.as_dict())
        return details

    def request_shutdown(self) -> None:
        self._shutdown_event.set()

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Start all subsystems and relay batches until shutdown.

        Raises :class:`~whatsapp_relay.errors.ConfigurationError` before
        connecting to Kafka if the whitelist cannot be loaded, and
        :class:`~whatsapp_relay.errors.RelayCrashedError` after a clean
        stop if one of the tasks failed.
        """
        self._install_signal_handlers()
        self.start_time = time.monotonic()
        logger.info("relay_starting")

        if self._registry is None:
            self._registry = WhitelistRegistry.from_file(self.config.whitelist.path)
        self._coordinator = IngestionCoordinator(
            self._registry,
            self._publisher,
            max_concurrency=self.config.ingestion.max_concurrency,
        )

        await self._publisher.start()

        try:
            async with asyncio.TaskGroup() as tg:
                tg.create_task(self._run_coordinator())
                tg.create_task(self._run_server())
        except* Exception as eg:
            self._fail(eg)
            logger.exception("relay_task_group_error")
        finally:
            self.status = RelayStatus.STOPPING
            await self._publisher.stop()
            self.status = RelayStatus.STOPPED
            logger.info("relay_stopped", failed=self._failure is not None)

        if self._failure is not None:
            raise RelayCrashedError("relay stopped after a task failure") from self._failure

    async def _run_coordinator(self) -> None:
        assert self._coordinator is not None
        self.status = RelayStatus.RUNNING
        logger.info("relay_running", port=self.config.port)
        await self._coordinator.run(self.channel, self._shutdown_event)

    def _fail(self, exc: BaseException) -> None:
        self._failure = exc
        self.status = RelayStatus.DEGRADED

    # ------------------------------------------------------------------
    # HTTP server
    # ------------------------------------------------------------------

    async def _run_server(self) -> None:
        """Serve until shutdown; a server failure shuts the relay down.

        The failure is recorded instead of raised so the coordinator is not
        cancelled and can drain the batches it has already accepted.
        """
        try:
            await self._serve()
        # uvicorn calls sys.exit() when it cannot bind
        except (Exception, SystemExit) as exc:
            self._fail(exc)
            logger.exception("http_server_failed", port=self.config.port)
        finally:
            self._shutdown_event.set()

    async def _serve(self) -> None:
        app = create_app(self)
        config = uvicorn.Config(
            app,
            host="0.0.0.0",
            port=self.config.port,
            log_level="warning",
        )
        server = uvicorn.Server(config)

        serve_task = asyncio.create_task(server.serve())
        shutdown_wait = asyncio.create_task(self._shutdown_event.wait())
        try:
            await asyncio.wait({serve_task, shutdown_wait}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            shutdown_wait.cancel()
        server.should_exit = True
        await serve_task

    # ------------------------------------------------------------------
    # Signal handling
    # ------------------------------------------------------------------

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()

        def _handle(sig: signal.Signals) -> None:
            logger.info("shutdown_signal_received", signal=sig.name)
            self._shutdown_event.set()

        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, _handle, sig)
