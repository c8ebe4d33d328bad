"""Supabase Storage blob store for food photographs."""

import asyncio
from dataclasses import dataclass

import httpx
from supabase import Client

from nutrition_catalog.domain.errors import AssetNotFound
from nutrition_catalog.services.assets import RemoteBlobStore

_CONTENT_TYPE = "image/jpeg"


@dataclass
class SupabaseBlobStore(RemoteBlobStore):
    """Uploads through Supabase Storage and downloads public URLs with httpx."""

    client: Client
    bucket: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, client: Client, bucket: str) -> "SupabaseBlobStore":
        """Create a blob store with a managed httpx session."""
        return cls(client=client, bucket=bucket, http_client=httpx.AsyncClient())

    async def upload(self, asset_id: str, data: bytes) -> None:
        """Upload bytes, overwriting an earlier attempt for the same id."""
        await asyncio.to_thread(
            self.client.storage.from_(self.bucket).upload,
            path=_object_path(asset_id),
            file=data,
            file_options={"content-type": _CONTENT_TYPE, "upsert": "true"},
        )

    async def download(self, asset_id: str) -> bytes:
        """Download asset bytes from the public URL."""
        response = await self.http_client.get(self.get_url(asset_id), timeout=10)
        if response.status_code in {400, 404}:
            raise AssetNotFound(asset_id)
        response.raise_for_status()
        return response.content

    def get_url(self, asset_id: str) -> str:
        """Return the public URL of an asset."""
        return self.client.storage.from_(self.bucket).get_public_url(
            _object_path(asset_id)
        )

    async def delete(self, asset_id: str) -> None:
        """Remove an asset from the bucket."""
        await asyncio.to_thread(
            self.client.storage.from_(self.bucket).remove, [_object_path(asset_id)]
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _object_path(asset_id: str) -> str:
    return f"{asset_id}.jpg"
