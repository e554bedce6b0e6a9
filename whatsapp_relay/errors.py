"""Exception hierarchy for the relay pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import CanonicalMessage


class RelayError(Exception):
    """Base class for all relay errors."""


class ConfigurationError(RelayError):
    """Startup configuration is missing or malformed. Always fatal."""


class NormalizationError(RelayError):
    """A raw inbound event could not be turned into a canonical message."""


class MissingFieldError(NormalizationError):
    """A protocol-mandatory field is absent from the inbound event."""

    def __init__(self, field: str) -> None:
        super().__init__(f"inbound event is missing required field: {field}")
        self.field = field


class InvalidFieldError(NormalizationError):
    """A field of the inbound event is present but has an unusable value."""

    def __init__(self, field: str, detail: str) -> None:
        super().__init__(f"inbound event has an invalid {field}: {detail}")
        self.field = field
        self.detail = detail


class NoContentError(NormalizationError):
    """Neither reply-text nor plain-text is present on the inbound event."""

    def __init__(self) -> None:
        super().__init__("inbound event carries no text content")


class PublishError(RelayError):
    """A single publish attempt to the broker failed.

    The original message and its serialized payload are kept so the caller
    can log exactly what was lost.  The transport error is chained as
    ``__cause__``.
    """

    def __init__(self, message: CanonicalMessage, payload: bytes) -> None:
        super().__init__(
            f"failed to publish message for {message.participant_mobile_number}"
        )
        self.message = message
        self.payload = payload


class RelayCrashedError(RelayError):
    """A relay task failed.  Raised once queued batches are drained and the
    producer is stopped, so the process can exit non-zero.
    """
