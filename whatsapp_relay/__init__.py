"""WhatsApp relay: normalize, authorize and publish chat messages to Kafka.

Public API re-exported here for convenience::

    from whatsapp_relay import IngestionCoordinator, MessageNormalizer, WhitelistRegistry
"""

from .authorization import Accepted, Rejected, RejectionReason, authorize
from .channel import BatchChannel
from .config import IngestionConfig, KafkaConfig, RelayConfig, RetryConfig, WhitelistConfig
from .coordinator import IngestionCoordinator, IngestionStats
from .errors import (
    ConfigurationError,
    InvalidFieldError,
    MissingFieldError,
    NoContentError,
    NormalizationError,
    PublishError,
    RelayCrashedError,
    RelayError,
)
from .logging import setup_logging
from .models import (
    CanonicalMessage,
    DeliveryMode,
    NotificationBatch,
    RawInboundEvent,
    RelayStatus,
    WhitelistedParticipant,
)
from .normalizer import MessageNormalizer
from .publisher import MessagePublisher
from .service import RelayService
from .whitelist import WhitelistRegistry

__all__ = [
    "Accepted",
    "BatchChannel",
    "CanonicalMessage",
    "ConfigurationError",
    "DeliveryMode",
    "IngestionConfig",
    "IngestionCoordinator",
    "IngestionStats",
    "InvalidFieldError",
    "KafkaConfig",
    "MessageNormalizer",
    "MessagePublisher",
    "MissingFieldError",
    "NoContentError",
    "NormalizationError",
    "NotificationBatch",
    "PublishError",
    "RawInboundEvent",
    "Rejected",
    "RejectionReason",
    "RelayConfig",
    "RelayCrashedError",
    "RelayError",
    "RelayService",
    "RelayStatus",
    "RetryConfig",
    "WhitelistConfig",
    "WhitelistRegistry",
    "WhitelistedParticipant",
    "authorize",
    "setup_logging",
]
