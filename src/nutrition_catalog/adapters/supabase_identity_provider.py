"""Supabase Auth identity provider."""

import logging
from dataclasses import dataclass

from supabase import Client

from nutrition_catalog.domain.models import Identity
from nutrition_catalog.services.identity import IdentityProvider

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Resolves bearer tokens to users with Supabase Auth."""

    client: Client

    def current_user(self, access_token: str | None) -> Identity | None:
        """Return the user owning the access token, if it is valid."""
        if not access_token:
            return None
        try:
            response = self.client.auth.get_user(access_token)
        except Exception as exc:
            _logger.warning("Access token rejected: %s", exc)
            return None
        user = getattr(response, "user", None)
        if user is None:
            return None
        return Identity(user_id=str(user.id), email=user.email)
