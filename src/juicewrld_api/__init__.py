"""Juice WRLD API -- Python client for the Juice WRLD discography API.

Core modules:
    config       -- Client configuration via pydantic-settings (JUICEWRLD_* env vars)
                    and loguru setup.
    models       -- Typed records (pydantic), open payload maps, result tags.
    errors       -- Exception hierarchy and status-code mapping.
    timeparse    -- Tolerant multi-format timestamp parsing, RFC3339 output.
    cancellation -- CancelToken for caller-driven cancellation and deadlines.
    storage      -- Atomic file writes for downloads.
    cli          -- Click CLI entry point (`juicewrld`).

Subpackages:
    api -- Transport, endpoint client, playback resolution, search params.
"""

from .api.client import JuiceWRLDClient
from .cancellation import CancelToken
from .config import ClientConfig
from .errors import (
    APIError,
    AuthenticationError,
    JuiceWRLDError,
    NotFoundError,
    RateLimitError,
    RequestCancelledError,
    ResponseDecodeError,
    TransportError,
    ValidationError,
)
from .models import API_VERSION, PlaybackStatus, StreamStatus

__version__ = API_VERSION

__all__ = [
    "APIError",
    "AuthenticationError",
    "CancelToken",
    "ClientConfig",
    "JuiceWRLDClient",
    "JuiceWRLDError",
    "NotFoundError",
    "PlaybackStatus",
    "RateLimitError",
    "RequestCancelledError",
    "ResponseDecodeError",
    "StreamStatus",
    "TransportError",
    "ValidationError",
]
