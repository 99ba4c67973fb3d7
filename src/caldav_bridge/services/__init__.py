"""Application services orchestrating discovery, queries and filtering."""

from __future__ import annotations

from .context import ServiceContext
from .handler import CalDavRequestHandler, RequestContext, build_filters_from_options
from .models import CalendarMetadataPayload, ErrorPayload, ResourceResponse
from .resources import ResourceService

__all__ = [
    "CalDavRequestHandler",
    "CalendarMetadataPayload",
    "ErrorPayload",
    "RequestContext",
    "ResourceResponse",
    "ResourceService",
    "ServiceContext",
    "build_filters_from_options",
]
