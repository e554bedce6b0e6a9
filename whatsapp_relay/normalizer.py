"""Message normalizer: turns a raw inbound event into a CanonicalMessage."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from .errors import InvalidFieldError, MissingFieldError, NoContentError
from .models import MOBILE_NUMBER_LENGTH, CanonicalMessage, RawInboundEvent

# Remote identifiers look like "<2-digit country code><number>@s.whatsapp.net".
_ADDRESS_PREFIX_LENGTH = 2 + MOBILE_NUMBER_LENGTH


class MessageNormalizer:
    """Extract a canonical message record from a raw inbound event.

    Synchronous and stateless: normalization is pure data transformation,
    no I/O.  The participant name is left empty; it is filled from the
    whitelist by the authorization filter.
    """

    def normalize(self, event: RawInboundEvent | Mapping[str, Any]) -> CanonicalMessage:
        """Convert *event* into a :class:`CanonicalMessage`.

        *event* is either a parsed :class:`RawInboundEvent` or the raw JSON
        object from a notification batch.

        Raises :class:`InvalidFieldError` when a field has the wrong type or
        an unusable value, :class:`MissingFieldError` when the remote
        identifier, push-name, self-origin flag or timestamp is absent, and
        :class:`NoContentError` when the event carries no text.
        """
        if not isinstance(event, RawInboundEvent):
            event = self.parse(event)

        remote_jid = event.key.remote_jid
        if not remote_jid:
            raise MissingFieldError("remoteJid")
        if event.push_name is None:
            raise MissingFieldError("pushName")
        if event.key.from_me is None:
            raise MissingFieldError("fromMe")
        if event.message_timestamp is None:
            raise MissingFieldError("messageTimestamp")

        return CanonicalMessage(
            participant_mobile_number=self.extract_mobile_number(remote_jid),
            sender_push_name=event.push_name,
            from_me=event.key.from_me,
            content=self._resolve_content(event),
            sent_at=self._to_utc(event.message_timestamp),
        )

    @staticmethod
    def parse(raw: Mapping[str, Any]) -> RawInboundEvent:
        """Validate one raw event object.

        Only the first validation error is reported, by its JSON path
        (e.g. ``key.fromMe``).
        """
        try:
            return RawInboundEvent.model_validate(raw)
        except ValidationError as exc:
            error = exc.errors()[0]
            field = ".".join(str(part) for part in error["loc"]) or "event"
            raise InvalidFieldError(field, error["msg"]) from exc

    # ------------------------------------------------------------------
    # Field extraction
    # ------------------------------------------------------------------

    @staticmethod
    def extract_mobile_number(remote_jid: str) -> str:
        """Return characters 3-12 of *remote_jid*.

        Assumes a 2-digit country code.  Identifiers with other country code
        lengths produce a wrong number; this is a known limitation.
        """
        return remote_jid[:_ADDRESS_PREFIX_LENGTH][-MOBILE_NUMBER_LENGTH:]

    @staticmethod
    def _resolve_content(event: RawInboundEvent) -> str:
        # Reply text wins; empty strings count as absent.
        content = event.reply_text or event.plain_text
        if not content:
            raise NoContentError()
        return content

    @staticmethod
    def _to_utc(timestamp: int) -> datetime:
        try:
            return datetime.fromtimestamp(int(timestamp), tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise InvalidFieldError("messageTimestamp", str(exc)) from exc
