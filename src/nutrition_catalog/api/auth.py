"""Request identity resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Depends, Header, HTTPException, Request, status

from nutrition_catalog.domain.models import Identity  # noqa: TC001

if TYPE_CHECKING:
    from nutrition_catalog.containers import AppContainer

_BEARER_PREFIX = "bearer "


def get_container(request: Request) -> AppContainer:
    """Return the container attached to the app."""
    return request.app.state.container


def current_identity(
    request: Request, authorization: str | None = Header(default=None)
) -> Identity | None:
    """Resolve the caller from an optional bearer token."""
    if not authorization or not authorization.lower().startswith(_BEARER_PREFIX):
        return None
    token = authorization[len(_BEARER_PREFIX) :].strip()
    return get_container(request).identity_provider.current_user(token)


def require_identity(
    identity: Identity | None = Depends(current_identity),
) -> Identity:
    """Ensure the request carries a valid identity."""
    if identity is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return identity


def require_moderator(
    request: Request, identity: Identity = Depends(require_identity)
) -> Identity:
    """Ensure the caller is on the moderator allow-list."""
    workflow = get_container(request).verification_workflow
    if not workflow.is_moderator(identity):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)
    return identity


def current_device_id(
    x_device_id: str | None = Header(default=None, max_length=128),
) -> str | None:
    """Return the caller's device id, used to key anonymous local storage."""
    if x_device_id is None or not x_device_id.strip():
        return None
    return x_device_id.strip()
