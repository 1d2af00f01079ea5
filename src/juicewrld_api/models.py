"""Typed records, enums, and constants for the Juice WRLD API.

Records:
    Artist, Album, Era, Song, FileInfo, DirectoryInfo, Stats,
    PaginatedSongsResponse, SearchResult -- pydantic projections of
    server JSON. Unknown fields are ignored, missing ones defaulted.

Open payloads:
    OpenPayload and its subtypes (ZipJobStatus, Category, PlayerSong,
    PlayerSongPage, APIOverview) -- read-only maps for server-defined
    bags of fields, with typed accessors for the keys we rely on.

Results:
    PlaybackResult, StreamInfo -- outcome of range probing, tagged with
    PlaybackStatus / StreamStatus. Callers must check the tag.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer
from pydantic_core import core_schema

from .timeparse import format_rfc3339, parse_flexible_time

API_VERSION = "1.0.0"
DEFAULT_BASE_URL = "https://juicewrldapi.com/juicewrld"
DEFAULT_USER_AGENT = f"JuiceWRLD-API-Wrapper-Python/{API_VERSION}"

# Marker preceding the storage path in a player song's `file` URL
MEDIA_MARKER = "/media/"

# Candidate storage layouts for a song's audio file, tried in order.
# Placeholders are keys of the player song payload.
DEFAULT_PATH_TEMPLATES: tuple[str, ...] = (
    "Compilation/1. Released Discography/{album}/{title}.mp3",
    "Compilation/2. Unreleased Discography/{title}.mp3",
    "Snippets/{title}/{title}.mp4",
    "Session Edits/{title}.mp3",
)


class PlaybackStatus(StrEnum):
    SUCCESS = "success"
    NO_FILE_INFO = "no_file_info"
    INVALID_URL = "invalid_url"
    FILE_NOT_FOUND_BUT_URL_PROVIDED = "file_not_found_but_url_provided"


class StreamStatus(StrEnum):
    SUCCESS = "success"
    FILE_NOT_FOUND = "file_not_found"
    HTTP_ERROR = "http_error"
    REQUEST_ERROR = "request_error"


class PublicIdKind(StrEnum):
    NUMERIC = "numeric"
    TEXT = "text"
    ABSENT = "absent"


def _none_to_empty(value: Any) -> Any:
    return "" if value is None else value


def _none_to_zero(value: Any) -> Any:
    return 0 if value is None else value


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


def _none_to_dict(value: Any) -> Any:
    return {} if value is None else value


# Servers send null for blank fields; treat it as the field's zero value
Text = Annotated[str, BeforeValidator(_none_to_empty)]
Count = Annotated[int, BeforeValidator(_none_to_zero)]

FlexibleTime = Annotated[
    datetime | None,
    BeforeValidator(parse_flexible_time),
    PlainSerializer(format_rfc3339, return_type=str | None),
]


@dataclass(frozen=True, slots=True)
class PublicId:
    """A song's public id: numeric, text, or absent, decided by the server."""

    kind: PublicIdKind
    value: int | float | str | None = None

    @classmethod
    def absent(cls) -> PublicId:
        return cls(PublicIdKind.ABSENT)

    @classmethod
    def from_json(cls, raw: Any) -> PublicId:
        if isinstance(raw, PublicId):
            return raw
        if raw is None:
            return cls.absent()
        # bool is an int subclass but never a valid id
        if isinstance(raw, bool):
            raise ValueError(f"public_id must be a number or string, got {raw!r}")
        if isinstance(raw, (int, float)):
            return cls(PublicIdKind.NUMERIC, raw)
        if isinstance(raw, str):
            return cls(PublicIdKind.TEXT, raw)
        raise ValueError(f"public_id must be a number or string, got {type(raw).__name__}")

    @property
    def is_numeric(self) -> bool:
        return self.kind is PublicIdKind.NUMERIC

    @property
    def is_text(self) -> bool:
        return self.kind is PublicIdKind.TEXT

    @property
    def is_absent(self) -> bool:
        return self.kind is PublicIdKind.ABSENT

    def __str__(self) -> str:
        return "" if self.value is None else str(self.value)

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls.from_json,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda public_id: public_id.value,
            ),
        )


class Record(BaseModel):
    """Base for server records: tolerant of extra and missing fields."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Artist(Record):
    id: Count = 0
    name: Text = ""
    bio: Text = ""


class Album(Record):
    id: Count = 0
    title: Text = ""
    type: Text = ""
    artist: Artist = Field(default_factory=Artist)
    release_date: FlexibleTime = None
    description: Text = ""


class Era(Record):
    id: Count = 0
    name: Text = ""
    description: Text = ""
    time_frame: Text = ""


class Song(Record):
    id: Count = 0
    name: Text = ""
    original_key: Text = ""
    category: Text = ""
    era: Era = Field(default_factory=Era)
    track_titles: Annotated[list[str], BeforeValidator(_none_to_list)] = Field(default_factory=list)
    credited_artists: Text = ""
    producers: Text = ""
    engineers: Text = ""
    additional_information: Text = ""
    file_names: Text = ""
    instrumentals: Text = ""
    recording_locations: Text = ""
    record_dates: Text = ""
    preview_date: Text = ""
    release_date: Text = ""
    dates: Text = ""
    length: Text = ""
    leak_type: Text = ""
    date_leaked: Text = ""
    notes: Text = ""
    image_url: Text = ""
    session_titles: Text = ""
    session_tracking: Text = ""
    instrumental_names: Text = ""
    public_id: PublicId = Field(default_factory=PublicId.absent)

    @property
    def title(self) -> str:
        return self.name

    @property
    def artist(self) -> str:
        return self.credited_artists

    @property
    def era_name(self) -> str:
        return self.era.name


class FileInfo(Record):
    name: Text = ""
    type: Text = ""
    size: Count = 0
    size_human: Text = ""
    path: Text = ""
    extension: Text = ""
    mime_type: Text = ""
    created: FlexibleTime = None
    modified: FlexibleTime = None
    encoding: str | None = None

    @property
    def is_directory(self) -> bool:
        return self.type == "directory"


class DirectoryInfo(Record):
    current_path: Text = ""
    path_parts: Annotated[list[dict[str, str]], BeforeValidator(_none_to_list)] = Field(
        default_factory=list,
    )
    items: Annotated[list[FileInfo], BeforeValidator(_none_to_list)] = Field(default_factory=list)
    total_files: Count = 0
    total_directories: Count = 0
    search_query: str | None = None
    is_recursive_search: bool = False


class PaginatedSongsResponse(Record):
    results: Annotated[list[Song], BeforeValidator(_none_to_list)] = Field(default_factory=list)
    count: Count = 0
    next: str | None = None
    previous: str | None = None

    @property
    def has_next(self) -> bool:
        return bool(self.next)

    @property
    def has_previous(self) -> bool:
        return bool(self.previous)


class SearchResult(Record):
    songs: list[Song] = Field(default_factory=list)
    total: int = 0
    category: str | None = None
    query_time: str = "0ms"


class Stats(Record):
    total_songs: Count = 0
    category_stats: Annotated[dict[str, int], BeforeValidator(_none_to_dict)] = Field(
        default_factory=dict,
    )
    era_stats: Annotated[dict[str, int], BeforeValidator(_none_to_dict)] = Field(
        default_factory=dict,
    )


class ZipJob(Record):
    job_id: Text = ""


class OpenPayload(Mapping[str, Any]):
    """Read-only map over a JSON object whose shape the server owns.

    Subclasses add typed accessors for the keys the client relies on;
    everything else stays reachable through the mapping interface.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(data or {})

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OpenPayload):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def _text(self, key: str) -> str | None:
        value = self._data.get(key)
        return None if value is None else str(value)

    @classmethod
    def _validate(cls, raw: Any) -> OpenPayload:
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, Mapping):
            raise ValueError(f"{cls.__name__} expects a JSON object, got {type(raw).__name__}")
        return cls(raw)

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda payload: payload.to_dict(),
            ),
        )


class ZipJobStatus(OpenPayload):
    """Status of a server-side zip job. Shape is server-defined."""

    __slots__ = ()

    @property
    def status(self) -> str | None:
        return self._text("status")

    @property
    def progress(self) -> Any:
        return self.get("progress")


class Category(OpenPayload):
    __slots__ = ()

    @property
    def value(self) -> str | None:
        return self._text("value")

    @property
    def label(self) -> str | None:
        return self._text("label")


class PlayerSong(OpenPayload):
    """A song as served by the player endpoints."""

    __slots__ = ()

    @property
    def id(self) -> Any:
        return self.get("id")

    @property
    def title(self) -> str | None:
        return self._text("title")

    @property
    def album(self) -> str | None:
        return self._text("album")

    @property
    def file(self) -> Any:
        return self.get("file")


class PlayerSongPage(OpenPayload):
    __slots__ = ()

    @property
    def results(self) -> list[PlayerSong]:
        return [PlayerSong(item) for item in self.get("results") or []]

    @property
    def count(self) -> int:
        return int(self.get("count") or 0)

    @property
    def next(self) -> str | None:
        return self._text("next")


class APIOverview(OpenPayload):
    __slots__ = ()

    @property
    def endpoints(self) -> Any:
        return self.get("endpoints")

    @property
    def version(self) -> str | None:
        return self._text("version")


@dataclass
class PlaybackResult:
    """Outcome of resolving a song to a streamable URL."""

    status: PlaybackStatus
    song_id: int
    stream_url: str | None = None
    file_path: str | None = None
    content_type: str | None = None
    error: str | None = None
    note: str | None = None

    @property
    def verified(self) -> bool:
        return self.status is PlaybackStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class StreamInfo:
    """Outcome of a single range probe against the download endpoint."""

    status: StreamStatus
    file_path: str
    stream_url: str | None = None
    content_type: str | None = None
    content_length: int | None = None
    supports_range: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}
