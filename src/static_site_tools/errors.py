"""Error taxonomy for the site translation and contact tools."""

from __future__ import annotations

from typing import Optional


class SiteToolsError(Exception):
    """Base exception for all custom errors."""


class ConfigurationError(SiteToolsError):
    """Raised when settings are missing or malformed."""


class TransportUnavailable(SiteToolsError):
    """Raised when no HTTP transport can be constructed."""


class RequestFailed(SiteToolsError):
    """Raised when a translation request does not return HTTP 200."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class ResponseParseError(SiteToolsError):
    """Raised when a provider response cannot be turned into translated text."""


class MailDeliveryFailed(SiteToolsError):
    """Raised when the mail sender fails to deliver a contact message."""


class InvalidSubmission(SiteToolsError):
    """Raised when a contact form submission is incomplete or malformed."""
