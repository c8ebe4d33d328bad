"""Local filesystem copy of food photographs."""

from dataclasses import dataclass
from pathlib import Path
from uuid import UUID

from nutrition_catalog.services.assets import LocalBlobStore


@dataclass
class FileSystemAssetStore(LocalBlobStore):
    """Stores one file per asset id inside a directory."""

    directory: Path

    def write(self, asset_id: str, data: bytes) -> None:
        """Write bytes to disk, replacing the file atomically."""
        path = self._path(asset_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_bytes(data)
        tmp_path.replace(path)

    def read(self, asset_id: str) -> bytes | None:
        """Return stored bytes, if present."""
        try:
            path = self._path(asset_id)
        except ValueError:
            return None
        if not path.is_file():
            return None
        return path.read_bytes()

    def delete(self, asset_id: str) -> None:
        """Delete stored bytes if present."""
        try:
            path = self._path(asset_id)
        except ValueError:
            return
        path.unlink(missing_ok=True)

    def _path(self, asset_id: str) -> Path:
        # Ids are always UUIDs, which keeps paths inside the directory.
        return self.directory / str(UUID(asset_id))
