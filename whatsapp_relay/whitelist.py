"""Whitelist registry: the participants whose messages may be relayed."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType

import structlog
from pydantic import ValidationError

from .errors import ConfigurationError
from .models import WhitelistDocument, WhitelistedParticipant

logger = structlog.get_logger()


class WhitelistRegistry:
    """Immutable, exact-match lookup of whitelisted participants.

    Built once at startup and passed by reference to whatever needs it.
    There is no mutation API; picking up a new whitelist means restarting
    the process.
    """

    def __init__(self, participants: Iterable[WhitelistedParticipant]) -> None:
        entries: dict[str, WhitelistedParticipant] = {}
        for participant in participants:
            if participant.mobile_number in entries:
                raise ConfigurationError(
                    f"duplicate whitelisted mobile number: {participant.mobile_number}"
                )
            entries[participant.mobile_number] = participant
        self._entries: Mapping[str, WhitelistedParticipant] = MappingProxyType(entries)

    @classmethod
    def from_file(cls, path: str | Path) -> WhitelistRegistry:
        """Load the registry from a JSON whitelist file.

        Raises :class:`ConfigurationError` if the file is missing, is not
        valid JSON, or does not match the whitelist schema.
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigurationError(f"whitelist file not found: {path}")

        try:
            document = WhitelistDocument.model_validate(
                json.loads(path.read_text(encoding="utf-8"))
            )
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"failed to parse whitelist file {path}: {exc}") from exc
        except ValidationError as exc:
            raise ConfigurationError(f"invalid whitelist configuration in {path}: {exc}") from exc

        registry = cls(document.whitelisted_participants)
        logger.info("whitelist_loaded", path=str(path), participants=len(registry))
        return registry

    def lookup(self, mobile_number: str) -> WhitelistedParticipant | None:
        """Return the participant for *mobile_number*, or None if not whitelisted."""
        return self._entries.get(mobile_number)

    @property
    def mobile_numbers(self) -> list[str]:
        return list(self._entries.keys())

    def __contains__(self, mobile_number: object) -> bool:
        return mobile_number in self._entries

    def __len__(self) -> int:
        return len(self._entries)
