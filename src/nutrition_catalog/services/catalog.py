"""Catalog aggregation across reference, approved, local and pending foods."""

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum, IntEnum
from typing import Protocol

from nutrition_catalog.domain.catalog import (
    CatalogItem,
    FoodCategory,
    identity_key,
)
from nutrition_catalog.domain.errors import (
    AuthRequired,
    CatalogError,
    RemoteReadFailed,
    RemoteWriteFailed,
)
from nutrition_catalog.domain.models import Identity
from nutrition_catalog.domain.reference_foods import REFERENCE_FOODS
from nutrition_catalog.domain.submissions import PendingSubmission
from nutrition_catalog.services.approved_catalog import ApprovedCatalogRepository
from nutrition_catalog.services.submissions import SubmissionRepository

_logger = logging.getLogger(__name__)

ANONYMOUS_CALLER = "anonymous"


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class LegacyFoodStore(Protocol):
    """Persistence interface for pre-migration custom foods kept on the device."""

    def load_all(self) -> list[CatalogItem]:
        """Return every stored item."""

    def add(self, item: CatalogItem) -> None:
        """Append an item to the stored list."""

    def remove(self, item_id: str) -> bool:
        """Remove an item by id and return whether it existed."""


class CatalogSource(IntEnum):
    """Catalog sources, lower values win identity-key ties."""

    REFERENCE = 0
    APPROVED = 1
    LEGACY_LOCAL = 2
    OWN_PENDING = 3


@dataclass(frozen=True)
class CatalogEntry:
    """Catalog item tagged with the source it came from."""

    item: CatalogItem
    source: CatalogSource


@dataclass(frozen=True)
class CatalogSnapshot:
    """Immutable, fully merged view of the catalog."""

    version: int
    entries: tuple[CatalogEntry, ...]

    @property
    def items(self) -> tuple[CatalogItem, ...]:
        """Return the items in display order."""
        return tuple(entry.item for entry in self.entries)


class SubmitOutcome(str, Enum):
    """How a new food reached the catalog."""

    SUBMITTED = "submitted"
    SAVED_LOCALLY = "saved_locally"


@dataclass(frozen=True)
class SubmitResult:
    """Result of submitting a new food."""

    outcome: SubmitOutcome
    item: CatalogItem
    submission: PendingSubmission | None = None
    error: CatalogError | None = None


def merge_entries(entries: Iterable[CatalogEntry]) -> tuple[CatalogEntry, ...]:
    """Deduplicate entries by identity key and sort them for display.

    The first entry per key wins after a stable sort on source priority, so the
    result does not depend on the order in which sources were fetched.
    """
    by_priority = sorted(entries, key=lambda entry: entry.source)
    seen: set[str] = set()
    merged = []
    for entry in by_priority:
        key = identity_key(entry.item)
        if key in seen:
            continue
        seen.add(key)
        merged.append(entry)
    return tuple(
        sorted(merged, key=lambda entry: (entry.item.name.casefold(), entry.item.id))
    )


def filter_items(
    snapshot: CatalogSnapshot,
    category: FoodCategory | None = None,
    search_text: str = "",
) -> list[CatalogItem]:
    """Return snapshot items matching the category and name substring."""
    needle = search_text.casefold()
    return [
        item
        for item in snapshot.items
        if (category is None or item.category == category)
        and (not needle or needle in item.name.casefold())
    ]


@dataclass
class CatalogAggregator:
    """Publishes merged catalog snapshots for one acting user."""

    approved_catalog: ApprovedCatalogRepository
    submissions: SubmissionRepository
    legacy_store: LegacyFoodStore
    reference_items: Sequence[CatalogItem] = REFERENCE_FOODS
    _snapshot: CatalogSnapshot = field(init=False, repr=False)
    _version: int = field(default=0, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _category: FoodCategory | None = field(default=None, init=False, repr=False)
    _search_text: str = field(default="", init=False, repr=False)
    _filtered: list[CatalogItem] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self._publish(
            CatalogSnapshot(
                version=0,
                entries=merge_entries(
                    CatalogEntry(item, CatalogSource.REFERENCE)
                    for item in self.reference_items
                ),
            )
        )

    @property
    def snapshot(self) -> CatalogSnapshot:
        """Return the currently published snapshot."""
        return self._snapshot

    @property
    def filtered_items(self) -> list[CatalogItem]:
        """Return the current snapshot filtered by the active filter."""
        return list(self._filtered)

    async def load(self, identity: Identity | None) -> CatalogSnapshot:
        """Fetch every source concurrently and publish the merged snapshot."""
        ticket = self._next_version()
        approved, pending, legacy = await asyncio.gather(
            self._fetch_approved(),
            self._fetch_own_pending(identity),
            self._fetch_legacy(),
        )
        entries = [
            *(CatalogEntry(item, CatalogSource.REFERENCE) for item in self.reference_items),
            *(CatalogEntry(item, CatalogSource.APPROVED) for item in approved),
            *(CatalogEntry(item, CatalogSource.LEGACY_LOCAL) for item in legacy),
            *(CatalogEntry(item, CatalogSource.OWN_PENDING) for item in pending),
        ]
        async with self._lock:
            if self._snapshot.version > ticket:
                _logger.info(
                    "Discarding stale catalog load: version=%s current=%s",
                    ticket,
                    self._snapshot.version,
                )
                return self._snapshot
            snapshot = CatalogSnapshot(version=ticket, entries=merge_entries(entries))
            self._publish(snapshot)
        _logger.info(
            "Catalog loaded: version=%s items=%s approved=%s local=%s pending=%s",
            ticket,
            len(snapshot.entries),
            len(approved),
            len(legacy),
            len(pending),
        )
        return snapshot

    def apply_filter(
        self, category: FoodCategory | None = None, search_text: str = ""
    ) -> list[CatalogItem]:
        """Remember the active filter and return the matching items."""
        self._category = category
        self._search_text = search_text
        self._filtered = filter_items(self._snapshot, category, search_text)
        return self.filtered_items

    async def submit_new(
        self, draft: CatalogItem, identity: Identity | None
    ) -> SubmitResult:
        """Submit a food for review, falling back to the local store on failure."""
        try:
            submission = await asyncio.to_thread(
                self.submissions.submit,
                draft,
                identity.user_id if identity else None,
                identity.email if identity else None,
            )
        except (AuthRequired, RemoteWriteFailed) as exc:
            _logger.warning("Submission failed, saving locally: %s", exc)
            async with self._lock:
                try:
                    await asyncio.to_thread(self.legacy_store.add, draft)
                except (OSError, ValueError) as local_exc:
                    _logger.error(
                        "Local fallback failed for %s: %s", draft.name, local_exc
                    )
                    raise exc from local_exc
                self._append_locked(CatalogEntry(draft, CatalogSource.LEGACY_LOCAL))
            return SubmitResult(
                outcome=SubmitOutcome.SAVED_LOCALLY, item=draft, error=exc
            )
        await self._append(CatalogEntry(submission.item, CatalogSource.OWN_PENDING))
        return SubmitResult(
            outcome=SubmitOutcome.SUBMITTED,
            item=submission.item,
            submission=submission,
        )

    async def remove_local_item(self, item_id: str) -> bool:
        """Remove a legacy local item from the store and the snapshot."""
        async with self._lock:
            removed = await asyncio.to_thread(self.legacy_store.remove, item_id)
            if not removed:
                return False
            entries = tuple(
                entry
                for entry in self._snapshot.entries
                if not (
                    entry.item.id == item_id
                    and entry.source is CatalogSource.LEGACY_LOCAL
                )
            )
            self._publish(
                CatalogSnapshot(version=self._next_version(), entries=entries)
            )
        return True

    def get_by_id(self, item_id: str) -> CatalogItem | None:
        """Return an item from the current snapshot by id."""
        return next(
            (item for item in self._snapshot.items if item.id == item_id), None
        )

    def get_by_barcode(self, barcode: str) -> CatalogItem | None:
        """Return an item from the current snapshot by barcode."""
        return next(
            (item for item in self._snapshot.items if item.barcode == barcode), None
        )

    async def _append(self, entry: CatalogEntry) -> None:
        async with self._lock:
            self._append_locked(entry)

    def _append_locked(self, entry: CatalogEntry) -> None:
        self._publish(
            CatalogSnapshot(
                version=self._next_version(),
                entries=merge_entries([*self._snapshot.entries, entry]),
            )
        )

    def _publish(self, snapshot: CatalogSnapshot) -> None:
        self._snapshot = snapshot
        self._filtered = filter_items(snapshot, self._category, self._search_text)

    def _next_version(self) -> int:
        self._version += 1
        return self._version

    async def _fetch_approved(self) -> list[CatalogItem]:
        try:
            return await asyncio.to_thread(self.approved_catalog.fetch_all)
        except RemoteReadFailed as exc:
            _logger.warning("Approved catalog unavailable: %s", exc)
            return []

    async def _fetch_own_pending(self, identity: Identity | None) -> list[CatalogItem]:
        if identity is None:
            return []
        try:
            submissions = await asyncio.to_thread(
                self.submissions.list_mine, identity.user_id
            )
        except RemoteReadFailed as exc:
            _logger.warning("Pending submissions unavailable: %s", exc)
            return []
        return [submission.item for submission in submissions]

    async def _fetch_legacy(self) -> list[CatalogItem]:
        try:
            return await asyncio.to_thread(self.legacy_store.load_all)
        except (OSError, ValueError) as exc:
            _logger.warning("Legacy local foods unavailable: %s", exc)
            return []


def caller_key(identity: Identity | None, device_id: str | None = None) -> str:
    """Return the key that owns a caller's aggregator and legacy store.

    Signed-in users are keyed by user id. Anonymous callers are keyed by their
    device id and share the ``anonymous`` key when they send none.
    """
    if identity is not None:
        return f"user:{identity.user_id}"
    if device_id:
        return f"device:{device_id}"
    return ANONYMOUS_CALLER


@dataclass
class _PoolEntry:
    aggregator: CatalogAggregator
    expires_at: datetime


@dataclass
class CatalogAggregatorPool:
    """Keeps recently used catalog aggregators, one per caller key.

    Entries expire ``ttl_seconds`` after their last use and the least recently
    used entry is dropped once ``max_size`` is exceeded.
    """

    factory: Callable[[str], CatalogAggregator]
    ttl_seconds: int = 900
    max_size: int = 1000
    clock: Callable[[], datetime] = _utcnow
    _entries: dict[str, _PoolEntry] = field(
        default_factory=dict, init=False, repr=False
    )

    def __len__(self) -> int:
        return len(self._entries)

    def for_caller(
        self, identity: Identity | None, device_id: str | None = None
    ) -> CatalogAggregator:
        """Return the caller's aggregator, creating it when absent or expired."""
        now = self.clock()
        self._evict_expired(now)
        key = caller_key(identity, device_id)
        entry = self._entries.pop(key, None)
        aggregator = entry.aggregator if entry else self.factory(key)
        self._entries[key] = _PoolEntry(
            aggregator=aggregator,
            expires_at=now + timedelta(seconds=self.ttl_seconds),
        )
        while len(self._entries) > self.max_size:
            oldest = next(iter(self._entries))
            self._entries.pop(oldest)
        return aggregator

    def _evict_expired(self, now: datetime) -> None:
        expired = [
            key for key, entry in self._entries.items() if now >= entry.expires_at
        ]
        for key in expired:
            self._entries.pop(key)
        if expired:
            _logger.info("Evicted %s idle catalog aggregators", len(expired))
