"""Named errors raised by the proxy core.

Authorization failures are NOT errors: they are rewritten into a 403 response.
"""

from __future__ import annotations


class DockgateError(Exception):
    """Base class for all dockgate errors."""


class ContainerIdentifierNotFoundError(DockgateError):
    """A container object does not carry its `Id` field (upstream schema violated)."""

    def __init__(self, message: str = "Docker container identifier not found") -> None:
        super().__init__(message)


class ResponseDecodingError(DockgateError):
    """Upstream body is not valid JSON, or not the JSON shape the operation expects."""


class AccessFileError(DockgateError):
    """The access file exists but cannot be read or parsed."""


class UpstreamError(DockgateError):
    """The Docker engine could not be reached."""
