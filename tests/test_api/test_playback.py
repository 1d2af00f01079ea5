"""Tests for api/playback.py -- template probing and stream probes.

The candidate templates mirror the file server's storage layout, which the
API does not document. Tests marked `storage_layout` encode that external
contract: if they break after a server change, update the template list,
not the resolution logic.
"""

from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from juicewrld_api.api.playback import extract_media_path, render_candidates
from juicewrld_api.cancellation import CancelToken
from juicewrld_api.errors import NotFoundError, RequestCancelledError
from juicewrld_api.models import DEFAULT_PATH_TEMPLATES, PlaybackStatus, StreamStatus

PLAYER_SONG = {
    "id": 12,
    "title": "Rich And Blind",
    "album": "Goodbye & Good Riddance",
    "file": "https://juicewrldapi.com/media/Compilation/2. Unreleased Discography/Rich.mp3",
}

FOUR_TEMPLATES = ("one/{title}.mp3", "two/{title}.mp3", "three/{title}.mp3", "four/{title}.mp3")


def _probe_path(request: httpx.Request) -> str:
    return parse_qs(urlsplit(str(request.url)).query)["path"][0]


def _player_handler(song, probe_status):
    """Serve `song` from the player endpoint; answer probes via probe_status(path)."""
    def handler(request):
        if request.url.path.startswith("/juicewrld/player/songs/"):
            return httpx.Response(200, json=song)
        if request.url.path == "/juicewrld/files/download/":
            status = probe_status(_probe_path(request))
            return httpx.Response(status, headers={"content-type": "audio/mpeg"})
        return httpx.Response(404)
    return handler


def _probes(client) -> list[str]:
    return [_probe_path(r) for r in client.requests if r.url.path.endswith("/files/download/")]


class TestExtractMediaPath:
    def test_path_after_marker(self):
        assert extract_media_path("https://x/media/a/b.mp3") == "a/b.mp3"

    def test_first_marker_wins(self):
        assert extract_media_path("https://x/media/media/b.mp3") == "media/b.mp3"

    @pytest.mark.parametrize("ref", ["", "https://x/files/b.mp3", 42, None])
    def test_invalid(self, ref):
        assert extract_media_path(ref) is None


class TestRenderCandidates:
    @pytest.mark.storage_layout
    def test_default_layout(self):
        assert render_candidates(PLAYER_SONG, DEFAULT_PATH_TEMPLATES) == [
            "Compilation/1. Released Discography/Goodbye & Good Riddance/Rich And Blind.mp3",
            "Compilation/2. Unreleased Discography/Rich And Blind.mp3",
            "Snippets/Rich And Blind/Rich And Blind.mp4",
            "Session Edits/Rich And Blind.mp3",
        ]

    def test_skips_templates_missing_fields(self):
        song = {"title": "Lean Wit Me", "album": None}
        assert render_candidates(song, DEFAULT_PATH_TEMPLATES)[0] == (
            "Compilation/2. Unreleased Discography/Lean Wit Me.mp3"
        )
        assert len(render_candidates(song, DEFAULT_PATH_TEMPLATES)) == 3


class TestPlaySong:
    def test_no_file_info(self, make_client):
        song = {k: v for k, v in PLAYER_SONG.items() if k != "file"}
        client = make_client(_player_handler(song, lambda p: 200))

        result = client.play_song(12)

        assert result.status is PlaybackStatus.NO_FILE_INFO
        assert result.song_id == 12
        assert result.stream_url is None
        assert _probes(client) == []

    def test_null_file_is_invalid_url(self, make_client):
        song = {**PLAYER_SONG, "file": None}
        client = make_client(_player_handler(song, lambda p: 200))

        result = client.play_song(12)

        assert result.status is PlaybackStatus.INVALID_URL
        assert result.error == "Invalid file URL format"
        assert _probes(client) == []

    def test_invalid_url(self, make_client):
        song = {**PLAYER_SONG, "file": "https://juicewrldapi.com/static/Rich.mp3"}
        client = make_client(_player_handler(song, lambda p: 200))

        result = client.play_song(12)

        assert result.status is PlaybackStatus.INVALID_URL
        assert result.error == "Invalid file URL format"
        assert _probes(client) == []

    def test_third_candidate_wins_and_fourth_is_not_probed(self, make_client):
        client = make_client(
            _player_handler(PLAYER_SONG, lambda p: 206 if p.startswith("three/") else 404),
            path_templates=FOUR_TEMPLATES,
        )

        result = client.play_song(12)

        assert result.status is PlaybackStatus.SUCCESS
        assert result.verified
        assert result.file_path == "three/Rich And Blind.mp3"
        assert result.content_type == "audio/mpeg"
        assert result.stream_url == (
            "https://api.test/juicewrld/files/download/?path=three%2FRich+And+Blind.mp3"
        )
        assert _probes(client) == [
            "one/Rich And Blind.mp3",
            "two/Rich And Blind.mp3",
            "three/Rich And Blind.mp3",
        ]

    def test_probes_carry_range_header(self, make_client):
        client = make_client(_player_handler(PLAYER_SONG, lambda p: 200))
        client.play_song(12)
        probe = next(r for r in client.requests if r.url.path.endswith("/files/download/"))
        assert probe.headers["Range"] == "bytes=0-0"

    def test_fallback_to_reported_path(self, make_client):
        client = make_client(_player_handler(PLAYER_SONG, lambda p: 404))

        result = client.play_song(12)

        assert result.status is PlaybackStatus.FILE_NOT_FOUND_BUT_URL_PROVIDED
        assert not result.verified
        assert result.file_path == "Compilation/2. Unreleased Discography/Rich.mp3"
        assert result.stream_url.startswith("https://api.test/juicewrld/files/download/?path=")
        assert result.note
        assert len(_probes(client)) == 4

    def test_probe_network_errors_are_skipped(self, make_client):
        def handler(request):
            if request.url.path.startswith("/juicewrld/player/songs/"):
                return httpx.Response(200, json=PLAYER_SONG)
            if _probe_path(request).startswith("one/"):
                raise httpx.ConnectError("reset", request=request)
            return httpx.Response(200)

        client = make_client(handler, path_templates=FOUR_TEMPLATES)

        result = client.play_song(12)

        assert result.status is PlaybackStatus.SUCCESS
        assert result.file_path == "two/Rich And Blind.mp3"

    def test_metadata_fetch_failure_raises(self, make_client):
        client = make_client(lambda r: httpx.Response(404, text="no such song"))
        with pytest.raises(NotFoundError):
            client.play_song(12)

    def test_cancellation_is_not_swallowed(self, make_client):
        token = CancelToken()

        def handler(request):
            if request.url.path.startswith("/juicewrld/player/songs/"):
                return httpx.Response(200, json=PLAYER_SONG)
            token.cancel()
            return httpx.Response(404)

        client = make_client(handler)

        with pytest.raises(RequestCancelledError):
            client.play_song(12, token=token)
        assert len(_probes(client)) == 1


class TestStreamAudioFile:
    def test_success(self, make_client):
        client = make_client(lambda r: httpx.Response(206, headers={
            "content-type": "audio/mpeg",
            "content-length": "1",
            "accept-ranges": "bytes",
        }))

        info = client.stream_audio_file("a.mp3")

        assert info.status is StreamStatus.SUCCESS
        assert info.content_type == "audio/mpeg"
        assert info.content_length == 1
        assert info.supports_range is True
        assert info.stream_url.endswith("?path=a.mp3")

    def test_accept_ranges_none(self, make_client):
        client = make_client(lambda r: httpx.Response(200, headers={"accept-ranges": "none"}))
        assert client.stream_audio_file("a.mp3").supports_range is False

    def test_not_found(self, make_client):
        client = make_client(lambda r: httpx.Response(404))
        info = client.stream_audio_file("a.mp3")
        assert info.status is StreamStatus.FILE_NOT_FOUND
        assert info.error == "Audio file not found"

    def test_other_status(self, make_client):
        client = make_client(lambda r: httpx.Response(503))
        info = client.stream_audio_file("a.mp3")
        assert info.status is StreamStatus.HTTP_ERROR
        assert info.error == "HTTP 503"

    def test_request_error(self, make_client):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        info = make_client(handler).stream_audio_file("a.mp3")
        assert info.status is StreamStatus.REQUEST_ERROR
        assert "refused" in info.error
