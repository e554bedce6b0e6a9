"""Relay configuration loaded from environment variables.

Uses pydantic-settings so every field can be overridden via env vars,
which is the natural config mechanism in Kubernetes.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class KafkaConfig(BaseSettings):
    """Kafka connection and topic settings."""

    model_config = {"env_prefix": "KAFKA_"}

    bootstrap_servers: str = Field(
        default="localhost:9092",
        description="Comma-separated Kafka bootstrap servers",
    )
    topic: str = Field(
        default="whatsapp-messages",
        description="Topic that canonical messages are published to",
    )
    client_id: str = Field(
        default="whatsapp-service",
        description="Client id reported to the brokers",
    )
    producer_acks: str = Field(
        default="all",
        description="Producer acknowledgement level",
    )
    producer_compression: str = Field(
        default="gzip",
        description="Compression codec for produced messages",
    )


class RetryConfig(BaseSettings):
    """Backoff settings for establishing the broker connection at startup.

    Individual publishes are never retried.
    """

    model_config = {"env_prefix": "RETRY_"}

    max_attempts: int = Field(default=5, description="Maximum connection attempts")
    initial_wait_seconds: float = Field(
        default=1.0,
        description="Initial backoff wait in seconds",
    )
    max_wait_seconds: float = Field(
        default=60.0,
        description="Maximum backoff wait in seconds",
    )
    multiplier: float = Field(default=2.0, description="Exponential backoff multiplier")


class WhitelistConfig(BaseSettings):
    """Location of the whitelist file."""

    model_config = {"env_prefix": "WHITELIST_"}

    path: str = Field(
        default="config.json",
        description="Path to the JSON file listing whitelisted participants",
    )


class IngestionConfig(BaseSettings):
    """Fan-out and channel limits for the ingestion coordinator."""

    model_config = {"env_prefix": "INGESTION_"}

    max_concurrency: int = Field(
        default=32,
        ge=1,
        description="Maximum number of events processed concurrently",
    )
    channel_max_size: int = Field(
        default=0,
        ge=0,
        description="Maximum queued batches before the transport is made to wait (0 = unbounded)",
    )


class RelayConfig(BaseSettings):
    """Root configuration for a relay instance.

    Nested configs are populated from their own env-var prefixes.
    """

    model_config = {"env_prefix": "RELAY_"}

    name: str = Field(default="whatsapp-relay", description="Service name used in logs and /health")
    port: int = Field(default=8080, description="Port for the health probes and batch webhook")
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=True, description="Emit JSON log lines instead of console output")

    kafka: KafkaConfig = Field(default_factory=KafkaConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    whitelist: WhitelistConfig = Field(default_factory=WhitelistConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
