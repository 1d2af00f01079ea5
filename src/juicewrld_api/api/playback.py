"""Playback URL resolution by range probing.

The metadata endpoints do not expose where a song's audio actually lives
on the file server. Resolution renders a list of known storage layouts
(DEFAULT_PATH_TEMPLATES) with the song's title and album, then range-probes
each candidate until one exists. If none do, the path reported in the
song's `file` URL is returned unverified so callers can still try it.

Templates are data: if the server layout changes, pass a new list to the
client (or set JUICEWRLD_PATH_TEMPLATES) rather than editing this module.
"""

from collections.abc import Iterable, Mapping
from string import Formatter
from typing import Any

import httpx
from loguru import logger

from ..cancellation import CancelToken
from ..errors import TransportError
from ..models import (
    MEDIA_MARKER,
    PlaybackResult,
    PlaybackStatus,
    StreamInfo,
    StreamStatus,
)
from .transport import Transport

log = logger.bind(stage="playback")

DOWNLOAD_PATH = "/files/download/"

_OK_STATUSES = frozenset({httpx.codes.OK, httpx.codes.PARTIAL_CONTENT})


def extract_media_path(file_ref: Any) -> str | None:
    """Return the storage path after the first /media/ marker, or None."""
    if not isinstance(file_ref, str) or not file_ref:
        return None
    idx = file_ref.find(MEDIA_MARKER)
    if idx == -1:
        return None
    return file_ref[idx + len(MEDIA_MARKER):]


def render_candidates(song: Mapping[str, Any], templates: Iterable[str]) -> list[str]:
    """Render each template with the song's fields, in order.

    Templates referencing a field the song lacks (missing, null or empty)
    are skipped rather than rendered with a blank.
    """
    candidates = []
    for template in templates:
        fields = {name for _, name, _, _ in Formatter().parse(template) if name}
        values = {name: song.get(name) for name in fields}
        missing = [name for name, value in values.items() if value in (None, "")]
        if missing:
            log.debug(f"Skipping template {template!r}: song lacks {missing}")
            continue
        candidates.append(template.format_map({k: str(v) for k, v in values.items()}))
    return candidates


def download_url(transport: Transport, file_path: str) -> str:
    return transport.url_for(DOWNLOAD_PATH, {"path": file_path})


def resolve_playback(
    transport: Transport,
    song_id: int,
    song: Mapping[str, Any],
    templates: Iterable[str],
    token: CancelToken | None = None,
) -> PlaybackResult:
    """Find a streamable URL for an already-fetched player song.

    Never raises for a missing file reference or failed probes; the
    result's status says how much was verified. Cancellation propagates.
    """
    if "file" not in song:
        log.info(f"Song {song_id} has no file information")
        return PlaybackResult(
            status=PlaybackStatus.NO_FILE_INFO,
            song_id=song_id,
            error="Song file information not found",
        )

    reported_path = extract_media_path(song.get("file"))
    if reported_path is None:
        log.info(f"Song {song_id} file URL lacks {MEDIA_MARKER!r}: {song.get('file')!r}")
        return PlaybackResult(
            status=PlaybackStatus.INVALID_URL,
            song_id=song_id,
            error="Invalid file URL format",
        )

    for candidate in render_candidates(song, templates):
        try:
            response = transport.probe(DOWNLOAD_PATH, {"path": candidate}, token=token)
        except TransportError as exc:
            log.debug(f"Probe failed for {candidate!r}: {exc}")
            continue
        if response.status_code in _OK_STATUSES:
            log.info(f"Song {song_id} resolved to {candidate!r}")
            return PlaybackResult(
                status=PlaybackStatus.SUCCESS,
                song_id=song_id,
                stream_url=download_url(transport, candidate),
                file_path=candidate,
                content_type=response.headers.get("content-type"),
            )

    log.info(f"Song {song_id}: no candidate path matched, using reported path")
    return PlaybackResult(
        status=PlaybackStatus.FILE_NOT_FOUND_BUT_URL_PROVIDED,
        song_id=song_id,
        stream_url=download_url(transport, reported_path),
        file_path=reported_path,
        note="File may not exist at this path, but streaming URL is provided",
    )


def probe_stream(
    transport: Transport,
    file_path: str,
    token: CancelToken | None = None,
) -> StreamInfo:
    """Range-probe one path and report whether it can be streamed."""
    stream_url = download_url(transport, file_path)
    try:
        response = transport.probe(DOWNLOAD_PATH, {"path": file_path}, token=token)
    except TransportError as exc:
        return StreamInfo(
            status=StreamStatus.REQUEST_ERROR,
            file_path=file_path,
            error=f"Request failed: {exc}",
        )

    if response.status_code in _OK_STATUSES:
        accept_ranges = response.headers.get("accept-ranges", "")
        length = response.headers.get("content-length")
        return StreamInfo(
            status=StreamStatus.SUCCESS,
            file_path=file_path,
            stream_url=stream_url,
            content_type=response.headers.get("content-type"),
            content_length=int(length) if length and length.isdigit() else None,
            supports_range=accept_ranges not in ("", "none"),
        )
    if response.status_code == httpx.codes.NOT_FOUND:
        return StreamInfo(
            status=StreamStatus.FILE_NOT_FOUND,
            file_path=file_path,
            error="Audio file not found",
        )
    return StreamInfo(
        status=StreamStatus.HTTP_ERROR,
        file_path=file_path,
        error=f"HTTP {response.status_code}",
    )
