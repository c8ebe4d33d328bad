"""Dependency container wiring for the application."""

import hashlib
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from nutrition_catalog.adapters.filesystem_asset_store import FileSystemAssetStore
from nutrition_catalog.adapters.json_legacy_store import JsonFileLegacyStore
from nutrition_catalog.adapters.supabase_blob_store import SupabaseBlobStore
from nutrition_catalog.adapters.supabase_document_store import SupabaseDocumentStore
from nutrition_catalog.adapters.supabase_identity_provider import (
    SupabaseIdentityProvider,
)
from nutrition_catalog.config import Settings, parse_csv_values
from nutrition_catalog.services.approved_catalog import ApprovedCatalogRepository
from nutrition_catalog.services.assets import AssetStore
from nutrition_catalog.services.catalog import CatalogAggregator, CatalogAggregatorPool
from nutrition_catalog.services.identity import IdentityProvider
from nutrition_catalog.services.submissions import SubmissionRepository
from nutrition_catalog.services.verification import (
    ModeratorAllowList,
    VerificationWorkflow,
)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    identity_provider: IdentityProvider
    asset_store: AssetStore
    submission_repository: SubmissionRepository
    approved_catalog: ApprovedCatalogRepository
    verification_workflow: VerificationWorkflow
    catalogs: CatalogAggregatorPool
    close_resources: Callable[[], Awaitable[None]]


def legacy_store_path(directory: Path, owner_key: str) -> Path:
    """Return the legacy food file for a caller key."""
    digest = hashlib.sha256(owner_key.encode("utf-8")).hexdigest()
    return directory / f"{digest}.json"


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    document_store = SupabaseDocumentStore(supabase_client)
    blob_store = SupabaseBlobStore.create(
        supabase_client, resolved_settings.asset_bucket
    )
    asset_store = AssetStore(
        remote_store=blob_store,
        local_store=FileSystemAssetStore(Path(resolved_settings.asset_local_dir)),
        upload_timeout_seconds=resolved_settings.asset_upload_timeout_seconds,
        retry_attempts=resolved_settings.asset_upload_retry_attempts,
        retry_delay_seconds=resolved_settings.asset_upload_retry_delay_seconds,
    )
    submission_repository = SubmissionRepository(document_store)
    approved_catalog = ApprovedCatalogRepository(document_store)
    verification_workflow = VerificationWorkflow(
        submissions=submission_repository,
        approved_catalog=approved_catalog,
        moderators=ModeratorAllowList.create(
            user_ids=parse_csv_values(resolved_settings.moderator_user_ids),
            emails=parse_csv_values(resolved_settings.moderator_emails),
        ),
    )
    legacy_dir = Path(resolved_settings.legacy_store_dir)

    def build_aggregator(owner_key: str) -> CatalogAggregator:
        return CatalogAggregator(
            approved_catalog=approved_catalog,
            submissions=submission_repository,
            legacy_store=JsonFileLegacyStore(legacy_store_path(legacy_dir, owner_key)),
        )

    async def close_resources() -> None:
        await asset_store.aclose()
        await blob_store.close()

    return AppContainer(
        settings=resolved_settings,
        identity_provider=SupabaseIdentityProvider(supabase_client),
        asset_store=asset_store,
        submission_repository=submission_repository,
        approved_catalog=approved_catalog,
        verification_workflow=verification_workflow,
        catalogs=CatalogAggregatorPool(
            build_aggregator,
            ttl_seconds=resolved_settings.catalog_cache_ttl_seconds,
            max_size=resolved_settings.catalog_cache_max_size,
        ),
        close_resources=close_resources,
    )
