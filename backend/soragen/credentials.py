"""API key validation and persistence."""

from __future__ import annotations

import logging

from soragen.storage import KeyValueStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "sk-"
KEY_LENGTH = 51


def validate_key(candidate: str | None) -> bool:
    """Structural check only: exact length and fixed ``sk-`` prefix."""
    return (
        isinstance(candidate, str)
        and len(candidate) == KEY_LENGTH
        and candidate.startswith(KEY_PREFIX)
    )


def mask_key(key: str) -> str:
    """Mask an API key for safe logging: show first 8 and last 4 chars."""
    if len(key) <= 16:
        return "***"
    return f"{key[:8]}...{key[-4:]}"


class CredentialStore:
    """Owns the API key. The only component that reads or writes it in storage.

    ``is_valid`` is tri-state: ``None`` means nothing has been checked yet.
    """

    def __init__(self, store: KeyValueStore, storage_key: str = "x_api_key") -> None:
        self._store = store
        self._storage_key = storage_key
        self.is_valid: bool | None = None

    @staticmethod
    def validate(candidate: str | None) -> bool:
        return validate_key(candidate)

    def commit(self, candidate: str | None) -> bool:
        """Persist ``candidate`` if it is structurally valid.

        An invalid candidate leaves the previously persisted key untouched.
        An empty candidate resets ``is_valid`` to unknown.
        """
        if not candidate:
            self.is_valid = None
            return False

        self.is_valid = self.validate(candidate)
        if self.is_valid:
            self._store.set(self._storage_key, candidate)
            logger.info("API key stored: %s", mask_key(candidate))
        else:
            logger.info("Rejected malformed API key")
        return self.is_valid

    def clear(self) -> None:
        self._store.delete(self._storage_key)
        self.is_valid = None
        logger.info("API key cleared")

    def current(self) -> str | None:
        return self._store.get(self._storage_key) or None

    def load(self) -> str | None:
        """Read the persisted key on startup and mark it valid by structure alone."""
        key = self.current()
        self.is_valid = self.validate(key) if key else None
        return key

    def masked(self) -> str | None:
        key = self.current()
        return mask_key(key) if key else None
