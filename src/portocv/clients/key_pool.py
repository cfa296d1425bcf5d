"""Ordered pool of Gemini API keys with one-way rotation."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from portocv.errors import AllKeysExhausted, NoKeyAvailable

logger = logging.getLogger(__name__)

MIN_KEY_LENGTH = 10

PLACEHOLDER_KEYS = frozenset({
    "undefined",
    "null",
    "none",
    "api_key",
    "your_api_key",
    "your-api-key",
    "your_api_key_here",
    "your-api-key-here",
    "placeholder",
    "changeme",
    "xxx",
})


def clean_key(raw: str | None) -> str | None:
    """Strip quotes/whitespace and reject empty, short, or placeholder keys."""
    if raw is None:
        return None
    key = raw.strip().strip("\"'").strip()
    if not key or key.lower() in PLACEHOLDER_KEYS:
        return None
    if len(key) < MIN_KEY_LENGTH:
        return None
    return key


def split_keys(raw: str | None) -> list[str]:
    """Split a comma or newline separated list of keys."""
    if not raw:
        return []
    return [part for part in raw.replace("\r", "\n").replace(",", "\n").split("\n")]


class KeyPool:
    """Keys tried strictly in order; the cursor never moves backwards."""

    def __init__(self, keys: Iterable[str | None] = ()):
        cleaned: list[str] = []
        for raw in keys:
            key = clean_key(raw)
            if key is not None and key not in cleaned:
                cleaned.append(key)
        self._keys: tuple[str, ...] = tuple(cleaned)
        self._index = 0

    @classmethod
    def from_sources(
        cls,
        default: str | None = None,
        backups: Iterable[str | None] = (),
        override: str | None = None,
    ) -> KeyPool:
        """Build a pool; a well-formed override goes ahead of everything else."""
        return cls([override, default, *backups])

    @property
    def keys(self) -> tuple[str, ...]:
        return self._keys

    @property
    def index(self) -> int:
        return self._index

    def __len__(self) -> int:
        return len(self._keys)

    @property
    def exhausted(self) -> bool:
        return self._index >= len(self._keys)

    def resolve_current(self) -> str:
        """Return the active key."""
        if not self._keys:
            raise NoKeyAvailable()
        if self.exhausted:
            raise AllKeysExhausted()
        return self._keys[self._index]

    def rotate(self) -> bool:
        """Advance to the next key. Returns False once the pool is used up."""
        if self.exhausted:
            return False
        self._index += 1
        if self.exhausted:
            logger.warning("Key pool exhausted after %d key(s)", len(self._keys))
            return False
        logger.warning("Rotating to API key %d of %d", self._index + 1, len(self._keys))
        return True
