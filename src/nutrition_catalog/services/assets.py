"""Blob persistence for food photographs with a local fallback."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol
from uuid import uuid4

from nutrition_catalog.domain.errors import AssetNotFound

_logger = logging.getLogger(__name__)


class RemoteBlobStore(Protocol):
    """Interface for the shared remote blob store."""

    async def upload(self, asset_id: str, data: bytes) -> None:
        """Store bytes under the given id, overwriting any previous copy."""

    async def download(self, asset_id: str) -> bytes:
        """Return stored bytes or raise AssetNotFound."""

    def get_url(self, asset_id: str) -> str:
        """Return a URL serving the asset."""

    async def delete(self, asset_id: str) -> None:
        """Delete an asset."""


class LocalBlobStore(Protocol):
    """Interface for device-local blob persistence."""

    def write(self, asset_id: str, data: bytes) -> None:
        """Durably write bytes under the given id."""

    def read(self, asset_id: str) -> bytes | None:
        """Return stored bytes, if present."""

    def delete(self, asset_id: str) -> None:
        """Delete stored bytes if present."""


@dataclass
class AssetStore:
    """Dual-write asset store with read-through fallback to local copies."""

    remote_store: RemoteBlobStore
    local_store: LocalBlobStore
    upload_timeout_seconds: float = 5.0
    retry_attempts: int = 1
    retry_delay_seconds: float = 3.0
    _pending_uploads: set[asyncio.Task[None]] = field(
        default_factory=set, init=False, repr=False
    )

    @property
    def pending_uploads(self) -> tuple[asyncio.Task[None], ...]:
        """Background upload retries that have not finished yet."""
        return tuple(self._pending_uploads)

    async def put(self, data: bytes) -> str:
        """Store bytes locally, then remotely within the timeout, and return the id."""
        asset_id = str(uuid4())
        self.local_store.write(asset_id, data)
        try:
            await asyncio.wait_for(
                self.remote_store.upload(asset_id, data),
                timeout=self.upload_timeout_seconds,
            )
        except TimeoutError:
            _logger.warning("Asset upload timed out, retrying later: id=%s", asset_id)
            self._schedule_retry(asset_id, data)
        except Exception as exc:
            _logger.warning("Asset upload failed, retrying later: id=%s: %s", asset_id, exc)
            self._schedule_retry(asset_id, data)
        return asset_id

    async def get(self, asset_id: str) -> bytes:
        """Return asset bytes from the remote store, falling back to local."""
        if not asset_id:
            raise AssetNotFound("Empty asset id")
        try:
            return await asyncio.wait_for(
                self.remote_store.download(asset_id),
                timeout=self.upload_timeout_seconds,
            )
        except AssetNotFound:
            pass
        except Exception as exc:
            _logger.warning("Remote asset read failed: id=%s: %s", asset_id, exc)
        data = self.local_store.read(asset_id)
        if data is None:
            raise AssetNotFound(asset_id)
        return data

    def get_url(self, asset_id: str) -> str:
        """Return the remote URL for an asset."""
        return self.remote_store.get_url(asset_id)

    async def delete(self, asset_id: str) -> None:
        """Delete an asset from both stores without failing on errors."""
        try:
            await self.remote_store.delete(asset_id)
        except Exception as exc:
            _logger.warning("Remote asset delete failed: id=%s: %s", asset_id, exc)
        try:
            self.local_store.delete(asset_id)
        except OSError as exc:
            _logger.warning("Local asset delete failed: id=%s: %s", asset_id, exc)

    async def aclose(self) -> None:
        """Cancel outstanding upload retries."""
        tasks = list(self._pending_uploads)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def _schedule_retry(self, asset_id: str, data: bytes) -> None:
        task = asyncio.create_task(self._retry_upload(asset_id, data))
        self._pending_uploads.add(task)
        task.add_done_callback(self._pending_uploads.discard)

    async def _retry_upload(self, asset_id: str, data: bytes) -> None:
        for attempt in range(1, self.retry_attempts + 1):
            await asyncio.sleep(self.retry_delay_seconds)
            try:
                await asyncio.wait_for(
                    self.remote_store.upload(asset_id, data),
                    timeout=self.upload_timeout_seconds,
                )
            except Exception as exc:
                _logger.warning(
                    "Asset upload retry failed (attempt %s/%s): id=%s: %s",
                    attempt,
                    self.retry_attempts,
                    asset_id,
                    exc,
                )
                continue
            _logger.info("Asset upload retry succeeded: id=%s", asset_id)
            return
