from __future__ import annotations

"""Error kinds raised by the question-answering core."""


class ValidationError(ValueError):
    """Raised when a request is missing required input."""
    pass


class NotFoundError(LookupError):
    """Raised when a document id is unknown to the store."""
    pass


class UpstreamModelError(RuntimeError):
    """Raised when the remote completion call fails or returns garbage."""
    pass


class StorageIOError(OSError):
    """Raised when an uploaded file cannot be written, read or removed."""
    pass
