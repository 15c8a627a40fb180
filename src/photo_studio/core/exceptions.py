"""Domain exceptions raised by the service layer.

Services raise these; the web layer maps each class to an HTTP status once,
in :mod:`photo_studio.web.errors`.
"""

from typing import Any, Optional


class StudioError(Exception):
    """Base class for all photo studio errors."""

    status_code = 500

    def __init__(self, message: str, detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(StudioError):
    """Request data failed a business rule."""

    status_code = 400


class AuthenticationError(StudioError):
    """Missing, invalid or expired credentials."""

    status_code = 401


class PermissionDeniedError(StudioError):
    """Authenticated, but not allowed to touch the resource."""

    status_code = 403


class NotFoundError(StudioError):
    """Requested record does not exist."""

    status_code = 404

    def __init__(self, resource: str, identifier: Optional[str] = None):
        message = f"{resource} not found"
        super().__init__(message, detail={"id": identifier} if identifier else None)
        self.resource = resource
        self.identifier = identifier


class IntegrationError(StudioError):
    """A third-party API (CDN, Instagram) answered with an error."""

    status_code = 502

    def __init__(self, message: str, detail: Optional[Any] = None, upstream_status: Optional[int] = None):
        super().__init__(message, detail)
        self.upstream_status = upstream_status


class ConfigurationError(StudioError):
    """A feature was used without the credentials it needs."""

    status_code = 503
