"""Authorization filter: only whitelisted participants are relayed."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .models import CanonicalMessage
from .whitelist import WhitelistRegistry


class RejectionReason(str, Enum):
    NOT_WHITELISTED = "not_whitelisted"


@dataclass(frozen=True)
class Accepted:
    message: CanonicalMessage


@dataclass(frozen=True)
class Rejected:
    reason: RejectionReason
    message: CanonicalMessage


AuthorizationResult = Accepted | Rejected


def authorize(message: CanonicalMessage, registry: WhitelistRegistry) -> AuthorizationResult:
    """Accept *message* if its participant is whitelisted.

    An accepted message carries the registry's display name as
    ``participant_name``; everything else passes through unchanged.
    Rejection is an expected outcome, not an error.
    """
    participant = registry.lookup(message.participant_mobile_number)
    if participant is None:
        return Rejected(reason=RejectionReason.NOT_WHITELISTED, message=message)
    return Accepted(message.model_copy(update={"participant_name": participant.display_name}))
