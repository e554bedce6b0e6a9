"""IngestionCoordinator: fan a notification batch out through
normalize → authorize → publish, one independent task per event.
"""

from __future__ import annotations

import asyncio
from dataclasses import asdict, dataclass
from typing import Any

import structlog

from .authorization import Rejected, authorize
from .channel import BatchChannel
from .errors import NormalizationError, PublishError
from .models import NotificationBatch
from .normalizer import MessageNormalizer
from .publisher import MessagePublisher
from .whitelist import WhitelistRegistry

logger = structlog.get_logger()


@dataclass
class IngestionStats:
    """Running counters, reported by the /health endpoint."""

    batches_processed: int = 0
    batches_skipped: int = 0
    events_published: int = 0
    events_rejected: int = 0
    events_malformed: int = 0
    events_failed: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class IngestionCoordinator:
    """Relay live notification batches to the broker.

    Per-event failures (malformed events, rejected participants, failed
    publishes) are logged and counted; they never abort sibling events and
    never propagate out of :meth:`ingest`.  At most *max_concurrency* events
    are in flight at once.
    """

    def __init__(
        self,
        registry: WhitelistRegistry,
        publisher: MessagePublisher,
        *,
        max_concurrency: int = 32,
        normalizer: MessageNormalizer | None = None,
    ) -> None:
        self._registry = registry
        self._publisher = publisher
        self._normalizer = normalizer or MessageNormalizer()
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self.stats = IngestionStats()

    # ------------------------------------------------------------------
    # Batch ingestion
    # ------------------------------------------------------------------

    async def ingest(self, batch: NotificationBatch) -> None:
        """Process every event of a live batch; ignore replay batches entirely.

        Returns once every event has been published, dropped, or has failed.
        """
        if not batch.is_live:
            self.stats.batches_skipped += 1
            logger.debug("batch_skipped", mode=batch.type, events=len(batch.messages))
            return

        async with asyncio.TaskGroup() as tg:
            for event in batch.messages:
                tg.create_task(self._process_event(event))

        self.stats.batches_processed += 1

    async def _process_event(self, event: dict[str, Any]) -> None:
        async with self._semaphore:
            try:
                await self._relay(event)
            except Exception:
                self.stats.events_failed += 1
                logger.exception("event_processing_failed", event_id=_event_id(event))

    async def _relay(self, event: dict[str, Any]) -> None:
        event_id = _event_id(event)
        try:
            message = self._normalizer.normalize(event)
        except NormalizationError as exc:
            self.stats.events_malformed += 1
            logger.warning("event_malformed", event_id=event_id, error=str(exc))
            return

        result = authorize(message, self._registry)
        if isinstance(result, Rejected):
            self.stats.events_rejected += 1
            logger.info(
                "event_rejected",
                event_id=event_id,
                participant=message.participant_mobile_number,
                reason=result.reason.value,
            )
            return

        try:
            await self._publisher.publish(result.message)
        except PublishError as exc:
            self.stats.events_failed += 1
            logger.error(
                "publish_failed",
                event_id=event_id,
                participant=exc.message.participant_mobile_number,
                payload=exc.payload.decode("utf-8"),
                error=repr(exc.__cause__),
            )
            return

        self.stats.events_published += 1
        logger.info(
            "message_relayed",
            event_id=event_id,
            participant=result.message.participant_mobile_number,
            from_me=result.message.from_me,
        )

    # ------------------------------------------------------------------
    # Channel consumer loop
    # ------------------------------------------------------------------

    async def run(self, channel: BatchChannel, shutdown_event: asyncio.Event) -> None:
        """Consume batches from *channel* until *shutdown_event* is set.

        Batches already queued when shutdown is signalled are still
        processed before returning.
        """
        logger.info("coordinator_started")
        shutdown_wait = asyncio.create_task(shutdown_event.wait())
        get_task: asyncio.Task[NotificationBatch] | None = None
        try:
            while True:
                get_task = asyncio.create_task(channel.get())
                await asyncio.wait(
                    {get_task, shutdown_wait},
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if not get_task.done():
                    get_task.cancel()
                    break
                await self._consume(channel, get_task.result())

            drained = 0
            while not channel.empty():
                await self._consume(channel, channel.get_nowait())
                drained += 1
            logger.info("coordinator_drained", batches=drained)
        finally:
            if get_task is not None and not get_task.done():
                get_task.cancel()
            shutdown_wait.cancel()
            logger.info("coordinator_stopped", **self.stats.as_dict())

    async def _consume(self, channel: BatchChannel, batch: NotificationBatch) -> None:
        try:
            await self.ingest(batch)
        finally:
            channel.task_done()


def _event_id(event: dict[str, Any]) -> str | None:
    """Best-effort event id for log lines; the event may be malformed."""
    key = event.get("key")
    return key.get("id") if isinstance(key, dict) else None
