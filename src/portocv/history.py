"""Capped history of published portfolios and CVs, kept in one JSON blob."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from portocv.models.history import HistoryItem

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_PATH = Path.home() / ".portocv" / "history.json"
STORAGE_KEY = "portocv_history_v7_final"
MAX_ENTRIES = 8

_ITEMS = TypeAdapter(list[HistoryItem])


class HistoryStore:
    """Newest-first list, read once at startup and rewritten on every add.

    Missing or corrupt data reads as empty history. Write failures are
    ignored; the in-memory list stays authoritative for the session.
    """

    def __init__(self, path: str | Path = DEFAULT_HISTORY_PATH, max_entries: int = MAX_ENTRIES):
        self.path = Path(path)
        self.max_entries = max_entries
        self._items: list[HistoryItem] = self._load()

    @property
    def items(self) -> list[HistoryItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def _load(self) -> list[HistoryItem]:
        try:
            blob = json.loads(self.path.read_text(encoding="utf-8"))
            return _ITEMS.validate_python(blob.get(STORAGE_KEY, []))[: self.max_entries]
        except FileNotFoundError:
            return []
        except (OSError, ValueError, AttributeError, ValidationError):
            logger.warning("Failed to load history from %s", self.path, exc_info=True)
            return []

    def add(self, item: HistoryItem) -> list[HistoryItem]:
        """Insert at the front, evicting the oldest beyond max_entries."""
        self._items = [item, *self._items][: self.max_entries]
        self._save()
        return self.items

    def _save(self) -> None:
        payload = {STORAGE_KEY: _ITEMS.dump_python(self._items, mode="json", by_alias=True)}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError:
            pass
