"""Data models for the relay pipeline."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MOBILE_NUMBER_LENGTH = 10


class RelayStatus(str, Enum):
    """Runtime status of the relay process."""

    STARTING = "starting"
    RUNNING = "running"
    DEGRADED = "degraded"
    STOPPING = "stopping"
    STOPPED = "stopped"


class DeliveryMode(str, Enum):
    """Delivery-mode tags attached to a notification batch by the transport."""

    NOTIFY = "notify"
    APPEND = "append"


# ---------------------------------------------------------------------------
# Whitelist
# ---------------------------------------------------------------------------


class WhitelistedParticipant(BaseModel):
    """A participant whose messages may be relayed."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    mobile_number: str = Field(
        pattern=rf"^\d{{{MOBILE_NUMBER_LENGTH}}}$",
        description="Digits-only mobile number without country code",
    )
    display_name: str = Field(min_length=1, description="Name used on relayed messages")


class WhitelistDocument(BaseModel):
    """Shape of the whitelist JSON file."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    whitelisted_participants: list[WhitelistedParticipant]


# ---------------------------------------------------------------------------
# Inbound (transport) models
# ---------------------------------------------------------------------------


class EventKey(BaseModel):
    """Addressing part of an inbound event."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    remote_jid: str | None = None
    from_me: bool | None = None
    id: str | None = None


class ExtendedTextMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str | None = None


class EventContent(BaseModel):
    """Message body variants.  Only the two text variants are relayed."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    conversation: str | None = None
    extended_text_message: ExtendedTextMessage | None = None


class RawInboundEvent(BaseModel):
    """One message notification as emitted by the chat-protocol transport.

    Every field is optional here so that malformed events can still be
    represented; the normalizer decides what is mandatory.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    key: EventKey = Field(default_factory=EventKey)
    push_name: str | None = None
    message: EventContent | None = None
    message_timestamp: int | None = Field(
        default=None,
        description="Seconds since epoch",
    )

    @property
    def reply_text(self) -> str | None:
        if self.message is None or self.message.extended_text_message is None:
            return None
        return self.message.extended_text_message.text

    @property
    def plain_text(self) -> str | None:
        if self.message is None:
            return None
        return self.message.conversation


class NotificationBatch(BaseModel):
    """A group of inbound events delivered together, tagged with a delivery mode.

    Events are kept as raw JSON objects.  Each one is validated on its own
    by the normalizer, so a single malformed event cannot reject the batch.
    """

    model_config = ConfigDict(frozen=True)

    type: str = Field(description="Delivery-mode tag (e.g. notify, append)")
    messages: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def is_live(self) -> bool:
        return self.type == DeliveryMode.NOTIFY.value


# ---------------------------------------------------------------------------
# Canonical message
# ---------------------------------------------------------------------------


class CanonicalMessage(BaseModel):
    """The validated, normalized representation published to the broker.

    Serialized with camelCase keys (``participantMobileNumber``,
    ``sentAt`` ...), which is what downstream consumers of the topic read.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    participant_mobile_number: str
    participant_name: str = ""
    sender_push_name: str
    from_me: bool
    content: str = Field(min_length=1)
    sent_at: datetime = Field(description="When the message was sent (UTC, second precision)")

    def to_payload(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthStatus(BaseModel):
    """Response model for the /health probe endpoint."""

    service_name: str
    status: RelayStatus
    uptime_seconds: float
    details: dict[str, Any] = Field(default_factory=dict)
