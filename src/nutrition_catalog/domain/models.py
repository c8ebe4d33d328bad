"""Domain models for the acting user."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """Represents the user performing an action."""

    user_id: str
    email: str | None = None
