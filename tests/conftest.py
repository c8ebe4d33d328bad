"""Shared test fixtures."""

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path
from uuid import uuid4

import pytest

from nutrition_catalog.config import Settings
from nutrition_catalog.containers import AppContainer
from nutrition_catalog.domain.catalog import CatalogItem, FoodCategory
from nutrition_catalog.domain.errors import AssetNotFound
from nutrition_catalog.domain.models import Identity
from nutrition_catalog.services.approved_catalog import ApprovedCatalogRepository
from nutrition_catalog.services.assets import AssetStore, LocalBlobStore, RemoteBlobStore
from nutrition_catalog.services.catalog import (
    CatalogAggregator,
    CatalogAggregatorPool,
    LegacyFoodStore,
)
from nutrition_catalog.services.documents import DocumentStore
from nutrition_catalog.services.identity import IdentityProvider
from nutrition_catalog.services.submissions import SubmissionRepository
from nutrition_catalog.services.verification import (
    ModeratorAllowList,
    VerificationWorkflow,
)

MODERATOR = Identity(user_id="moderator-1", email="mod@example.com")
USER = Identity(user_id="user-1", email="user@example.com")


@dataclass
class FakeClock:
    """Clock returning strictly increasing timestamps."""

    current: datetime = field(
        default_factory=lambda: datetime(2025, 5, 1, 12, 0, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


@dataclass
class InMemoryDocumentStore(DocumentStore):
    """In-memory document store for tests."""

    collections: dict[str, dict[str, dict[str, object]]] = field(default_factory=dict)
    fail_writes: bool = False
    fail_updates: bool = False
    fail_puts: bool = False
    fail_reads: set[str] = field(default_factory=set)
    created: list[str] = field(default_factory=list)

    def create(self, collection: str, record: dict[str, object]) -> str:
        if self.fail_writes:
            raise ConnectionError("store unavailable")
        record_id = str(uuid4())
        self._collection(collection)[record_id] = {**record, "id": record_id}
        self.created.append(record_id)
        return record_id

    def put(self, collection: str, record_id: str, record: dict[str, object]) -> None:
        if self.fail_writes or self.fail_puts:
            raise ConnectionError("store unavailable")
        self._collection(collection)[record_id] = {**record, "id": record_id}

    def get(self, collection: str, record_id: str) -> dict[str, object] | None:
        if collection in self.fail_reads:
            raise ConnectionError("store unavailable")
        row = self._collection(collection).get(record_id)
        return dict(row) if row is not None else None

    def query(
        self,
        collection: str,
        filters: Mapping[str, object] | None = None,
        order_by: str | None = None,
        desc: bool = False,
    ) -> list[dict[str, object]]:
        if collection in self.fail_reads:
            raise ConnectionError("store unavailable")
        rows = [
            dict(row)
            for row in self._collection(collection).values()
            if all(row.get(key) == value for key, value in (filters or {}).items())
        ]
        if order_by:
            rows.sort(key=lambda row: str(row.get(order_by) or ""), reverse=desc)
        return rows

    def update(
        self,
        collection: str,
        record_id: str,
        partial: dict[str, object],
        conditions: Mapping[str, object] | None = None,
    ) -> bool:
        if self.fail_writes or self.fail_updates:
            raise ConnectionError("store unavailable")
        row = self._collection(collection).get(record_id)
        if row is None:
            return False
        if not all(row.get(key) == value for key, value in (conditions or {}).items()):
            return False
        row.update(partial)
        return True

    def insert_raw(self, collection: str, record: dict[str, object]) -> None:
        self._collection(collection)[str(record["id"])] = dict(record)

    def _collection(self, name: str) -> dict[str, dict[str, object]]:
        return self.collections.setdefault(name, {})


@dataclass
class FakeRemoteBlobStore(RemoteBlobStore):
    """Remote blob store double with switchable failures and latency."""

    blobs: dict[str, bytes] = field(default_factory=dict)
    upload_delay_seconds: float = 0.0
    fail_uploads: int = 0
    fail_downloads: bool = False
    fail_deletes: bool = False
    upload_attempts: int = 0

    async def upload(self, asset_id: str, data: bytes) -> None:
        self.upload_attempts += 1
        if self.fail_uploads:
            self.fail_uploads -= 1
            raise ConnectionError("network down")
        if self.upload_delay_seconds:
            await asyncio.sleep(self.upload_delay_seconds)
        self.blobs[asset_id] = data

    async def download(self, asset_id: str) -> bytes:
        if self.fail_downloads:
            raise ConnectionError("network down")
        if asset_id not in self.blobs:
            raise AssetNotFound(asset_id)
        return self.blobs[asset_id]

    def get_url(self, asset_id: str) -> str:
        return f"https://storage.example.com/food-images/{asset_id}.jpg"

    async def delete(self, asset_id: str) -> None:
        if self.fail_deletes:
            raise ConnectionError("network down")
        self.blobs.pop(asset_id, None)


@dataclass
class InMemoryLocalBlobStore(LocalBlobStore):
    """Local blob store kept in memory."""

    blobs: dict[str, bytes] = field(default_factory=dict)
    fail_writes: bool = False

    def write(self, asset_id: str, data: bytes) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.blobs[asset_id] = data

    def read(self, asset_id: str) -> bytes | None:
        return self.blobs.get(asset_id)

    def delete(self, asset_id: str) -> None:
        self.blobs.pop(asset_id, None)


@dataclass
class InMemoryLegacyStore(LegacyFoodStore):
    """Legacy food store kept in memory."""

    items: list[CatalogItem] = field(default_factory=list)
    fail_writes: bool = False
    fail_reads: bool = False

    def load_all(self) -> list[CatalogItem]:
        if self.fail_reads:
            raise OSError("unreadable")
        return list(self.items)

    def add(self, item: CatalogItem) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.items.append(item)

    def remove(self, item_id: str) -> bool:
        remaining = [item for item in self.items if item.id != item_id]
        removed = len(remaining) != len(self.items)
        self.items = remaining
        return removed


@dataclass
class FakeIdentityProvider(IdentityProvider):
    """Identity provider mapping fixed tokens to identities."""

    tokens: dict[str, Identity] = field(
        default_factory=lambda: {"user-token": USER, "moderator-token": MODERATOR}
    )

    def current_user(self, access_token: str | None) -> Identity | None:
        if not access_token:
            return None
        return self.tokens.get(access_token)


def make_item(name: str, **overrides: object) -> CatalogItem:
    """Build a catalog item with sensible defaults."""
    values: dict[str, object] = {
        "id": str(uuid4()),
        "name": name,
        "category": FoodCategory.CUSTOM,
        "calories": 100.0,
        "protein": 5.0,
        "carbs": 10.0,
        "fat": 2.0,
    }
    values.update(overrides)
    return CatalogItem(**values)  # type: ignore[arg-type]


def approved_row(name: str, **overrides: object) -> dict[str, object]:
    """Build a raw approved catalog record."""
    row: dict[str, object] = {
        "id": str(uuid4()),
        "name": name,
        "category": "custom",
        "calories": 120.0,
        "protein": 4.0,
        "carbs": 20.0,
        "fat": 1.0,
        "verified_at": "2025-05-01T10:00:00+00:00",
    }
    row.update(overrides)
    return row


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def legacy_store() -> InMemoryLegacyStore:
    return InMemoryLegacyStore()


@pytest.fixture
def submission_repository(
    document_store: InMemoryDocumentStore, clock: FakeClock
) -> SubmissionRepository:
    return SubmissionRepository(document_store, clock=clock)


@pytest.fixture
def approved_catalog(document_store: InMemoryDocumentStore) -> ApprovedCatalogRepository:
    return ApprovedCatalogRepository(document_store)


@pytest.fixture
def workflow(
    submission_repository: SubmissionRepository,
    approved_catalog: ApprovedCatalogRepository,
    clock: FakeClock,
) -> VerificationWorkflow:
    return VerificationWorkflow(
        submissions=submission_repository,
        approved_catalog=approved_catalog,
        moderators=ModeratorAllowList.create(
            user_ids=[MODERATOR.user_id], emails=["Admin@Example.com"]
        ),
        clock=clock,
    )


@pytest.fixture
def aggregator(
    submission_repository: SubmissionRepository,
    approved_catalog: ApprovedCatalogRepository,
    legacy_store: InMemoryLegacyStore,
) -> CatalogAggregator:
    return CatalogAggregator(
        approved_catalog=approved_catalog,
        submissions=submission_repository,
        legacy_store=legacy_store,
    )


@pytest.fixture
def remote_blobs() -> FakeRemoteBlobStore:
    return FakeRemoteBlobStore()


@pytest.fixture
def local_blobs() -> InMemoryLocalBlobStore:
    return InMemoryLocalBlobStore()


@pytest.fixture
def asset_store(
    remote_blobs: FakeRemoteBlobStore, local_blobs: InMemoryLocalBlobStore
) -> AssetStore:
    return AssetStore(
        remote_store=remote_blobs,
        local_store=local_blobs,
        upload_timeout_seconds=0.05,
        retry_attempts=1,
        retry_delay_seconds=0.0,
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key=(
            "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
            "eyJyb2xlIjoic2VydmljZV9yb2xlIn0."
            "c2lnbmF0dXJl"
        ),
        asset_local_dir=str(tmp_path / "assets"),
        legacy_store_dir=str(tmp_path / "legacy"),
        moderator_user_ids=MODERATOR.user_id,
    )


@pytest.fixture
def container(
    settings: Settings,
    document_store: InMemoryDocumentStore,
    submission_repository: SubmissionRepository,
    approved_catalog: ApprovedCatalogRepository,
    workflow: VerificationWorkflow,
    asset_store: AssetStore,
) -> AppContainer:
    legacy_stores: dict[str, InMemoryLegacyStore] = {}

    def build_aggregator(owner_key: str) -> CatalogAggregator:
        return CatalogAggregator(
            approved_catalog=approved_catalog,
            submissions=submission_repository,
            legacy_store=legacy_stores.setdefault(owner_key, InMemoryLegacyStore()),
        )

    async def close_resources() -> None:
        await asset_store.aclose()

    return AppContainer(
        settings=settings,
        identity_provider=FakeIdentityProvider(),
        asset_store=asset_store,
        submission_repository=submission_repository,
        approved_catalog=approved_catalog,
        verification_workflow=workflow,
        catalogs=CatalogAggregatorPool(build_aggregator),
        close_resources=close_resources,
    )
