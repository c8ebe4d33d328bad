"""JSON file store for legacy custom foods."""

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar
from uuid import uuid4

from nutrition_catalog.domain.catalog import CatalogItem
from nutrition_catalog.domain.errors import MalformedRecord
from nutrition_catalog.services.catalog import LegacyFoodStore
from nutrition_catalog.services.records import decode_item, encode_item

LEGACY_FOODS_KEY = "customFoods"

_logger = logging.getLogger(__name__)


@dataclass
class JsonFileLegacyStore(LegacyFoodStore):
    """Keeps the whole list of legacy foods under one key in a JSON file."""

    path: Path
    key: str = LEGACY_FOODS_KEY

    # Shared by every instance so two stores on the same file never interleave.
    _write_lock: ClassVar[threading.Lock] = threading.Lock()

    def load_all(self) -> list[CatalogItem]:
        """Read every stored item, skipping malformed entries."""
        items = []
        for row in self._read_rows():
            try:
                items.append(decode_item(row))
            except MalformedRecord as exc:
                _logger.warning("Dropping malformed legacy food: %s", exc)
        return items

    def add(self, item: CatalogItem) -> None:
        """Append an item and rewrite the file."""
        with self._write_lock:
            rows = self._read_rows()
            rows.append(encode_item(item))
            self._write_rows(rows)

    def remove(self, item_id: str) -> bool:
        """Remove an item by id and rewrite the file."""
        with self._write_lock:
            rows = self._read_rows()
            remaining = [row for row in rows if row.get("id") != item_id]
            if len(remaining) == len(rows):
                return False
            self._write_rows(remaining)
            return True

    def _read_rows(self) -> list[dict[str, object]]:
        if not self.path.exists():
            return []
        payload = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"Legacy store {self.path} does not hold an object")
        rows = payload.get(self.key, [])
        if not isinstance(rows, list):
            raise ValueError(f"Legacy store key {self.key!r} is not a list")
        return [row for row in rows if isinstance(row, dict)]

    def _write_rows(self, rows: list[dict[str, object]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.{uuid4().hex}.tmp")
        try:
            tmp_path.write_text(
                json.dumps({self.key: rows}, ensure_ascii=False), encoding="utf-8"
            )
            tmp_path.replace(self.path)
        finally:
            tmp_path.unlink(missing_ok=True)
