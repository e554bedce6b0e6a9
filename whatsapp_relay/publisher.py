"""Kafka publisher for canonical messages."""

from __future__ import annotations

import structlog
from aiokafka import AIOKafkaProducer
from aiokafka.errors import KafkaConnectionError, KafkaError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .config import KafkaConfig, RetryConfig
from .errors import PublishError
from .models import CanonicalMessage

logger = structlog.get_logger()


class MessagePublisher:
    """Thin async wrapper around a single long-lived :class:`AIOKafkaProducer`.

    Each :meth:`publish` makes exactly one send attempt.  Messages are keyed
    by participant mobile number so that one participant's messages land on
    the same partition.
    """

    def __init__(self, config: KafkaConfig, retry: RetryConfig | None = None) -> None:
        self._config = config
        self._retry = retry or RetryConfig()
        self._producer: AIOKafkaProducer | None = None

    @property
    def topic(self) -> str:
        return self._config.topic

    @property
    def is_started(self) -> bool:
        return self._producer is not None

    async def start(self) -> None:
        """Connect to the brokers, retrying with backoff while they are unreachable.

        Raises :class:`KafkaConnectionError` once the attempts configured in
        :class:`RetryConfig` are exhausted.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._retry.max_attempts),
            wait=wait_exponential(
                multiplier=self._retry.multiplier,
                min=self._retry.initial_wait_seconds,
                max=self._retry.max_wait_seconds,
            ),
            retry=retry_if_exception_type(KafkaConnectionError),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                self._producer = await self._connect()

        logger.info(
            "kafka_producer_started",
            servers=self._config.bootstrap_servers,
            topic=self._config.topic,
        )

    async def _connect(self) -> AIOKafkaProducer:
        producer = AIOKafkaProducer(
            bootstrap_servers=self._config.bootstrap_servers,
            client_id=self._config.client_id,
            acks=self._config.producer_acks,
            compression_type=self._config.producer_compression,
        )
        try:
            await producer.start()
        except KafkaConnectionError:
            logger.warning("kafka_connect_failed", servers=self._config.bootstrap_servers)
            await producer.stop()
            raise
        return producer

    async def stop(self) -> None:
        """Flush pending sends and close the connection."""
        if self._producer is not None:
            await self._producer.stop()
            self._producer = None
            logger.info("kafka_producer_stopped")

    async def publish(self, message: CanonicalMessage) -> None:
        """Publish *message* to the topic.

        Raises :class:`PublishError` if the broker send fails.  The message
        is not retried or persisted.
        """
        assert self._producer is not None, "Producer not started"
        payload = message.to_payload()
        try:
            await self._producer.send_and_wait(
                self._config.topic,
                value=payload,
                key=message.participant_mobile_number.encode("utf-8"),
            )
        except KafkaError as exc:
            raise PublishError(message, payload) from exc

        logger.debug(
            "message_published",
            topic=self._config.topic,
            participant=message.participant_mobile_number,
        )
