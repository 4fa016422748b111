"""Error types raised by the upstream HTTP clients."""

from __future__ import annotations


class UpstreamClientError(Exception):
    """Base error for upstream collaborator failures."""


class UpstreamError(UpstreamClientError):
    """Transport failure, non-2xx status or undecodable body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LocationNotFoundError(UpstreamClientError):
    """The lookup service answered but knows no place for the postal code."""
