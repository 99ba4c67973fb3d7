"""Error taxonomy shared by the matcher, the protocol layer and the orchestrator."""

from __future__ import annotations

from typing import Iterable


class CalDavError(RuntimeError):
    """Base class for every failure surfaced by caldav-bridge."""


class MalformedInputError(CalDavError):
    """Raised when an identifier violates the scheme or basic shape."""


class NoMatchError(CalDavError):
    """Raised when no resource template fits an identifier."""


class TemplateValidationError(CalDavError):
    """Raised when a template shape matches but its variables are invalid."""

    def __init__(self, errors: Iterable[str], *, prefix: str = "Invalid URI variables") -> None:
        self.errors = list(errors)
        super().__init__(f"{prefix}: {', '.join(self.errors)}")


class MissingVariablesError(CalDavError):
    """Raised when a built identifier still carries unresolved placeholders."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = list(names)
        super().__init__(f"Missing variables: {', '.join(self.names)}")


class UnknownTemplateError(CalDavError):
    """Raised when a template name is not part of the catalog."""


class NotFoundError(CalDavError):
    """Raised when a referenced calendar is absent from discovery."""


class UpstreamTimeoutError(CalDavError):
    """Raised when the CalDAV server does not answer within the budget."""


class UpstreamFailureError(CalDavError):
    """Raised for network or protocol failures reported by the CalDAV client."""


class DiscoveryError(UpstreamFailureError):
    """Raised when principal or calendar home discovery comes back empty."""
