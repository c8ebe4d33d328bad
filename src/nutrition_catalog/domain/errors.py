"""Error taxonomy for the catalog pipeline."""


class CatalogError(Exception):
    """Base class for catalog pipeline errors."""


class AuthRequired(CatalogError):
    """Raised when a write is attempted without an identity."""


class RemoteWriteFailed(CatalogError):
    """Raised when the backing store rejects or times out a write."""


class RemoteReadFailed(CatalogError):
    """Raised when a fetch from the backing store errors."""


class NotFound(CatalogError):
    """Raised when an asset or record is absent."""


class AssetNotFound(NotFound):
    """Raised when neither the remote nor the local store holds an asset."""


class SubmissionNotFound(NotFound):
    """Raised when a pending submission does not exist."""


class MalformedRecord(CatalogError):
    """Raised by decoders when a record is missing required fields."""


class InvalidTransition(CatalogError):
    """Raised when a submission is moved out of a terminal state."""
