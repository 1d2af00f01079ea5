"""Juice WRLD API client.

One method per endpoint. Every method accepts an optional keyword-only
`token` (CancelToken) and raises the errors in juicewrld_api.errors.
The client owns a pooled HTTP connection; call close() or use it as a
context manager when done.
"""

from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx
from loguru import logger

from ..cancellation import CancelToken
from ..config import ClientConfig
from ..errors import ResponseDecodeError, ValidationError
from ..models import (
    API_VERSION,
    Album,
    APIOverview,
    Artist,
    Category,
    DirectoryInfo,
    Era,
    FileInfo,
    OpenPayload,
    PaginatedSongsResponse,
    PlaybackResult,
    PlayerSong,
    PlayerSongPage,
    SearchResult,
    Song,
    Stats,
    StreamInfo,
    ZipJob,
    ZipJobStatus,
)
from ..storage import atomic_write_stream
from .playback import DOWNLOAD_PATH, probe_stream, resolve_playback
from .search import build_listing_params, build_search_params
from .transport import Transport

log = logger.bind(stage="client")


def _results(payload: OpenPayload) -> list[Any]:
    return list(payload.get("results") or [])


def _require_paths(paths: Iterable[str]) -> list[str]:
    path_list = list(paths)
    if not path_list:
        raise ValidationError("At least one file path is required")
    return path_list


def _job_path(prefix: str, job_id: str) -> str:
    if not job_id or not job_id.strip():
        raise ValidationError("job_id must not be empty")
    return f"{prefix}{quote(job_id, safe='')}/"


class JuiceWRLDClient:
    """Synchronous client for the Juice WRLD discography API."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        config: ClientConfig | None = None,
        path_templates: Iterable[str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        if base_url:
            self.config = self.config.model_copy(update={"base_url": base_url})
        self.path_templates = tuple(
            path_templates if path_templates is not None else self.config.path_templates
        )
        self._transport = Transport(self.config, transport=transport)
        log.debug(f"Client ready for {self.config.api_root}")

    @property
    def base_url(self) -> str:
        return self.config.api_root

    def close(self) -> None:
        """Release idle pooled connections."""
        self._transport.close()

    def __enter__(self) -> "JuiceWRLDClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- Catalog --

    def get_api_overview(self, *, token: CancelToken | None = None) -> APIOverview:
        endpoints = self._transport.get("/", Any, token=token)
        return APIOverview({
            "endpoints": endpoints,
            "title": "Juice WRLD API",
            "description": "Comprehensive API for Juice WRLD discography and content",
            "version": API_VERSION,
        })

    def get_artists(self, *, token: CancelToken | None = None) -> list[Artist]:
        payload = self._transport.get("/artists/", OpenPayload, token=token)
        return [Artist.model_validate(item) for item in _results(payload)]

    def get_artist(self, artist_id: int, *, token: CancelToken | None = None) -> Artist:
        return self._transport.get(f"/artists/{artist_id}/", Artist, token=token)

    def get_albums(self, *, token: CancelToken | None = None) -> list[Album]:
        payload = self._transport.get("/albums/", OpenPayload, token=token)
        return [Album.model_validate(item) for item in _results(payload)]

    def get_album(self, album_id: int, *, token: CancelToken | None = None) -> Album:
        return self._transport.get(f"/albums/{album_id}/", Album, token=token)

    def get_songs(
        self,
        page: int = 1,
        category: str | None = None,
        era: str | None = None,
        search: str | None = None,
        page_size: int = 20,
        *,
        token: CancelToken | None = None,
    ) -> PaginatedSongsResponse:
        """List songs with optional filters.

        Raises ResponseDecodeError (carrying the body) if the server answers 2xx
        without a `results` list.
        """
        params = build_listing_params(page, page_size, category, era, search)
        payload = self._transport.get("/songs/", OpenPayload, params=params, token=token)
        if "results" not in payload:
            raise ResponseDecodeError(
                f"GET /songs/: response has no 'results': {payload.to_dict()}"
            )
        return PaginatedSongsResponse.model_validate(payload.to_dict())

    def get_songs_by_category(
        self,
        category: str,
        page: int = 1,
        page_size: int = 20,
        *,
        token: CancelToken | None = None,
    ) -> PaginatedSongsResponse:
        return self.get_songs(page, category=category, page_size=page_size, token=token)

    def iter_songs(
        self,
        category: str | None = None,
        era: str | None = None,
        search: str | None = None,
        page_size: int = 100,
        *,
        token: CancelToken | None = None,
    ) -> Iterator[Song]:
        """Yield every matching song, fetching pages while `next` is set."""
        page = 1
        while True:
            response = self.get_songs(page, category, era, search, page_size, token=token)
            yield from response.results
            if not response.has_next or not response.results:
                return
            page += 1

    def get_song(self, song_id: int, *, token: CancelToken | None = None) -> Song:
        return self._transport.get(f"/songs/{song_id}/", Song, token=token)

    def get_eras(self, *, token: CancelToken | None = None) -> list[Era]:
        payload = self._transport.get("/eras/", OpenPayload, token=token)
        return [Era.model_validate(item) for item in _results(payload)]

    def get_era(self, era_id: int, *, token: CancelToken | None = None) -> Era:
        return self._transport.get(f"/eras/{era_id}/", Era, token=token)

    def get_stats(self, *, token: CancelToken | None = None) -> Stats:
        return self._transport.get("/stats/", Stats, token=token)

    def get_categories(self, *, token: CancelToken | None = None) -> list[Category]:
        payload = self._transport.get("/categories/", OpenPayload, token=token)
        return [Category(item) for item in payload.get("categories") or []]

    def search_songs(
        self,
        query: str,
        category: str | None = None,
        year: int | None = None,
        tags: Iterable[str] | None = None,
        limit: int = 20,
        offset: int = 0,
        *,
        token: CancelToken | None = None,
    ) -> SearchResult:
        """Search songs; offset/limit are mapped onto page/page_size."""
        params = build_search_params(query, category, year, tags, limit, offset)
        raw = self._transport.get(
            "/songs/", PaginatedSongsResponse, params=params, token=token,
        )
        return SearchResult(
            songs=raw.results,
            total=raw.count,
            category=category,
            query_time="0ms",
        )

    # -- Player --

    def get_player_songs(
        self,
        page: int = 1,
        page_size: int = 20,
        *,
        token: CancelToken | None = None,
    ) -> PlayerSongPage:
        params = build_listing_params(page=page, page_size=page_size)
        return self._transport.get("/player/songs/", PlayerSongPage, params=params, token=token)

    def get_player_song(self, song_id: int, *, token: CancelToken | None = None) -> PlayerSong:
        return self._transport.get(f"/player/songs/{song_id}/", PlayerSong, token=token)

    def play_song(self, song_id: int, *, token: CancelToken | None = None) -> PlaybackResult:
        """Resolve a song to a streamable URL.

        Only a failure to fetch the song itself raises. Check the result's
        status: FILE_NOT_FOUND_BUT_URL_PROVIDED means the URL is unverified.
        """
        song = self.get_player_song(song_id, token=token)
        return resolve_playback(self._transport, song_id, song, self.path_templates, token)

    def stream_audio_file(
        self, file_path: str, *, token: CancelToken | None = None,
    ) -> StreamInfo:
        return probe_stream(self._transport, file_path, token)

    # -- Files --

    def browse_files(
        self,
        path: str = "",
        search: str | None = None,
        *,
        token: CancelToken | None = None,
    ) -> DirectoryInfo:
        params = {"path": path or None, "search": search or None}
        return self._transport.get("/files/browse/", DirectoryInfo, params=params, token=token)

    def get_file_info(self, file_path: str, *, token: CancelToken | None = None) -> FileInfo:
        return self._transport.get(
            "/files/info/", FileInfo, params={"path": file_path}, token=token,
        )

    def download_file(self, file_path: str, *, token: CancelToken | None = None) -> bytes:
        return b"".join(self._transport.stream_bytes(
            "GET", DOWNLOAD_PATH, params={"path": file_path}, token=token,
        ))

    def download_file_to(
        self,
        file_path: str,
        save_path: str | Path,
        *,
        token: CancelToken | None = None,
    ) -> Path:
        """Stream a file to save_path atomically; returns save_path."""
        log.info(f"Downloading {file_path!r} -> {save_path}")
        chunks = self._transport.stream_bytes(
            "GET", DOWNLOAD_PATH, params={"path": file_path}, token=token,
        )
        return atomic_write_stream(Path(save_path), chunks)

    def get_cover_art(self, file_path: str, *, token: CancelToken | None = None) -> bytes:
        return b"".join(self._transport.stream_bytes(
            "GET", "/files/cover-art/", params={"path": file_path}, token=token,
        ))

    # -- Zip jobs --

    def create_zip(self, file_paths: Iterable[str], *, token: CancelToken | None = None) -> bytes:
        """Build a zip of file_paths synchronously and return its bytes."""
        body = {"paths": _require_paths(file_paths)}
        return b"".join(self._transport.stream_bytes(
            "POST", "/files/zip-selection/", json_body=body, token=token,
        ))

    def start_zip_job(self, file_paths: Iterable[str], *, token: CancelToken | None = None) -> str:
        body = {"paths": _require_paths(file_paths)}
        job = self._transport.post("/start-zip-job/", ZipJob, json_body=body, token=token)
        log.info(f"Started zip job {job.job_id} for {len(body['paths'])} path(s)")
        return job.job_id

    def get_zip_job_status(
        self, job_id: str, *, token: CancelToken | None = None,
    ) -> ZipJobStatus:
        return self._transport.get(_job_path("/zip-job-status/", job_id), ZipJobStatus, token=token)

    def cancel_zip_job(self, job_id: str, *, token: CancelToken | None = None) -> bool:
        self._transport.post(_job_path("/cancel-zip-job/", job_id), token=token)
        log.info(f"Cancelled zip job {job_id}")
        return True
