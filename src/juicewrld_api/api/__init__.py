"""HTTP side of the client.

Submodules:
    transport -- httpx wrapper: headers, status mapping, JSON decoding, cancellation
    client    -- JuiceWRLDClient, one method per endpoint
    playback  -- Song playback URL resolution by range probing
    search    -- Offset/limit to page translation and query assembly
"""

from .client import JuiceWRLDClient

__all__ = ["JuiceWRLDClient"]
