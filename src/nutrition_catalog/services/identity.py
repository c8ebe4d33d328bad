"""Identity provider interface."""

from typing import Protocol

from nutrition_catalog.domain.models import Identity


class IdentityProvider(Protocol):
    """Resolves the acting user from a request credential."""

    def current_user(self, access_token: str | None) -> Identity | None:
        """Return the signed-in user, if the credential is valid."""
