"""Shared test fixtures for the whatsapp_relay test suite."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from whatsapp_relay.config import (
    IngestionConfig,
    KafkaConfig,
    RelayConfig,
    RetryConfig,
    WhitelistConfig,
)
from whatsapp_relay.models import NotificationBatch, WhitelistedParticipant
from whatsapp_relay.whitelist import WhitelistRegistry

# 2024-06-01T12:00:00Z
SENT_AT_EPOCH = 1717243200

ALICE_NUMBER = "6512345678"
BOB_NUMBER = "9876543210"
STRANGER_NUMBER = "5550001111"


def jid(number: str, country_code: str = "91") -> str:
    return f"{country_code}{number}@s.whatsapp.net"


@pytest.fixture
def kafka_config() -> KafkaConfig:
    return KafkaConfig(
        bootstrap_servers="localhost:9092",
        topic="whatsapp-messages",
    )


@pytest.fixture
def retry_config() -> RetryConfig:
    return RetryConfig(
        max_attempts=3,
        initial_wait_seconds=0.01,
        max_wait_seconds=0.05,
        multiplier=2.0,
    )


@pytest.fixture
def participants() -> list[WhitelistedParticipant]:
    return [
        WhitelistedParticipant(mobile_number=ALICE_NUMBER, display_name="Alice"),
        WhitelistedParticipant(mobile_number=BOB_NUMBER, display_name="Bob"),
    ]


@pytest.fixture
def registry(participants: list[WhitelistedParticipant]) -> WhitelistRegistry:
    return WhitelistRegistry(participants)


@pytest.fixture
def whitelist_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "whitelistedParticipants": [
                    {"mobileNumber": ALICE_NUMBER, "displayName": "Alice"},
                    {"mobileNumber": BOB_NUMBER, "displayName": "Bob"},
                ]
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def relay_config(
    kafka_config: KafkaConfig,
    retry_config: RetryConfig,
    whitelist_file: Path,
) -> RelayConfig:
    return RelayConfig(
        name="test-relay",
        port=18080,
        kafka=kafka_config,
        retry=retry_config,
        whitelist=WhitelistConfig(path=str(whitelist_file)),
        ingestion=IngestionConfig(max_concurrency=4),
    )


@pytest.fixture
def event_factory():
    """Factory for inbound events in the transport's JSON shape.

    Passing ``None`` leaves the field out.  Values are not validated, so
    wrong-typed fields can be produced too.
    """

    def _make(
        *,
        remote_jid: Any = jid(ALICE_NUMBER),
        push_name: Any = "Ally",
        from_me: Any = False,
        conversation: str | None = "hello",
        reply_text: str | None = None,
        timestamp: Any = SENT_AT_EPOCH,
        event_id: str = "evt-1",
    ) -> dict[str, Any]:
        message: dict = {}
        if conversation is not None:
            message["conversation"] = conversation
        if reply_text is not None:
            message["extendedTextMessage"] = {"text": reply_text}

        data: dict = {"key": {"id": event_id}, "message": message}
        if remote_jid is not None:
            data["key"]["remoteJid"] = remote_jid
        if from_me is not None:
            data["key"]["fromMe"] = from_me
        if push_name is not None:
            data["pushName"] = push_name
        if timestamp is not None:
            data["messageTimestamp"] = timestamp
        return data

    return _make


@pytest.fixture
def live_batch():
    def _make(*events: dict[str, Any]) -> NotificationBatch:
        return NotificationBatch(type="notify", messages=list(events))

    return _make


@pytest.fixture
def mock_publisher() -> AsyncMock:
    publisher = AsyncMock()
    publisher.publish = AsyncMock()
    return publisher


@pytest.fixture
def mock_kafka_producer() -> AsyncMock:
    """A mock AIOKafkaProducer with async start/stop/send_and_wait."""
    producer = AsyncMock()
    producer.start = AsyncMock()
    producer.stop = AsyncMock()
    producer.send_and_wait = AsyncMock()
    return producer
