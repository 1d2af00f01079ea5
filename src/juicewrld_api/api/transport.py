"""HTTP transport: request building, status mapping, JSON decoding.

Wraps a pooled httpx.Client that follows redirects. Every public method
takes an optional CancelToken. The token is checked before sending and
caps the request timeout at its deadline. While waiting for headers the
blocking send runs on a worker thread, so cancel() returns control to the
caller at once. Once headers arrive, cancel() closes the response being
read and the token is re-checked between body chunks.
"""

import json
import threading
from collections.abc import Callable, Iterator, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from functools import lru_cache
from typing import Any
from urllib.parse import urlencode

import httpx
import pydantic
from loguru import logger

from ..cancellation import CancelToken
from ..config import ClientConfig
from ..errors import (
    RequestCancelledError,
    ResponseDecodeError,
    TransportError,
    error_for_status,
)

log = logger.bind(stage="transport")


@lru_cache(maxsize=64)
def _adapter(out_type: Any) -> pydantic.TypeAdapter:
    return pydantic.TypeAdapter(out_type)


def _clean_params(params: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Drop None values so optional filters are simply not sent."""
    if params is None:
        return None
    return {k: v for k, v in params.items() if v is not None}


def _noop() -> None:
    return None


def _close_abandoned(future: Future) -> None:
    """Close a response that arrived after its caller gave up on it."""
    if future.cancelled() or future.exception() is not None:
        return
    future.result().close()


class Transport:
    """Send requests to the API and map responses onto typed results."""

    def __init__(
        self,
        config: ClientConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self._http = httpx.Client(
            base_url=config.api_root,
            timeout=config.timeout,
            headers={
                "User-Agent": config.user_agent,
                "Accept": "application/json",
            },
            transport=transport,
            follow_redirects=True,
        )
        self._pool: ThreadPoolExecutor | None = None
        self._pool_lock = threading.Lock()

    # -- Lifecycle --

    def close(self) -> None:
        """Release pooled connections and the send worker threads."""
        log.debug("Closing HTTP connection pool")
        with self._pool_lock:
            if self._pool is not None:
                self._pool.shutdown(wait=False, cancel_futures=True)
        self._http.close()

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- URLs --

    def url_for(self, path: str, params: Mapping[str, Any] | None = None) -> str:
        """Absolute URL for path, for handing to a media player."""
        url = f"{self.config.api_root}/{path.lstrip('/')}"
        query = _clean_params(params)
        if query:
            url += "?" + urlencode(query)
        return url

    # -- Requests --

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        token: CancelToken | None = None,
    ) -> bytes:
        """Send a request and return the raw body of a 2xx response.

        Raises the APIError subtype matching the status code for >= 400.
        """
        response = self._send(method, path, params=params, json_body=json_body, token=token)
        try:
            body = b"".join(self._iter_body(response, token))
        finally:
            response.close()
        self._raise_for_status(method, path, response, body)
        return body

    def request_json(
        self,
        method: str,
        path: str,
        out_type: Any = None,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        token: CancelToken | None = None,
    ) -> Any:
        """Send a request and decode the JSON body into out_type.

        With out_type None the body is discarded and None returned.
        """
        body = self.request(method, path, params=params, json_body=json_body, token=token)
        if out_type is None:
            return None
        try:
            data = json.loads(body)
        except ValueError as exc:
            raise ResponseDecodeError(f"{method} {path}: malformed JSON body: {exc}") from exc
        try:
            return _adapter(out_type).validate_python(data)
        except pydantic.ValidationError as exc:
            raise ResponseDecodeError(f"{method} {path}: unexpected response shape: {exc}") from exc

    def get(self, path: str, out_type: Any = None, *, params=None, token=None) -> Any:
        return self.request_json("GET", path, out_type, params=params, token=token)

    def post(self, path: str, out_type: Any = None, *, json_body=None, token=None) -> Any:
        return self.request_json("POST", path, out_type, json_body=json_body, token=token)

    def stream_bytes(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        token: CancelToken | None = None,
        chunk_size: int | None = None,
    ) -> Iterator[bytes]:
        """Yield the body of a binary endpoint chunk by chunk.

        Error statuses are mapped before the first chunk is yielded.
        """
        response = self._send(method, path, params=params, json_body=json_body, token=token)
        try:
            if response.status_code >= 400:
                body = b"".join(self._iter_body(response, token))
                self._raise_for_status(method, path, response, body)
            yield from self._iter_body(
                response, token, chunk_size or self.config.download_chunk_size,
            )
        finally:
            response.close()

    def probe(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        *,
        token: CancelToken | None = None,
    ) -> httpx.Response:
        """Request only the first byte of a resource.

        Returns the closed response so callers can inspect status and
        headers. Status codes are not mapped to errors here.
        """
        response = self._send(
            "GET", path, params=params, headers={"Range": "bytes=0-0"}, token=token,
        )
        response.close()
        log.debug(f"Probe {path} params={params} -> {response.status_code}")
        return response

    # -- Internals --

    def _timeout_for(self, token: CancelToken | None) -> float:
        remaining = token.remaining() if token is not None else None
        if remaining is None:
            return self.config.timeout
        return min(self.config.timeout, remaining)

    def _send(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
        token: CancelToken | None = None,
    ) -> httpx.Response:
        if token is not None:
            token.raise_if_cancelled()

        headers = dict(headers or {})
        content = None
        if json_body is not None:
            content = json.dumps(json_body).encode("utf-8")
            headers["Content-Type"] = "application/json"

        request = self._http.build_request(
            method,
            path,
            params=_clean_params(params),
            content=content,
            headers=headers,
            timeout=self._timeout_for(token),
        )
        log.debug(f"{method} {request.url}")

        try:
            if token is None:
                response = self._http.send(request, stream=True)
            else:
                response = self._send_until_cancelled(request, token)
        except httpx.TransportError as exc:
            if token is not None and token.cancelled:
                raise RequestCancelledError(f"{method} {path} cancelled") from exc
            log.warning(f"{method} {path} failed: {exc!r}")
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        if token is not None and token.cancelled:
            response.close()
            token.raise_if_cancelled()
        return response

    def _worker_pool(self) -> ThreadPoolExecutor:
        with self._pool_lock:
            if self._pool is None:
                self._pool = ThreadPoolExecutor(thread_name_prefix="juicewrld-send")
            return self._pool

    def _send_until_cancelled(
        self,
        request: httpx.Request,
        token: CancelToken,
    ) -> httpx.Response:
        """Wait for response headers, returning early if the token fires.

        A response that arrives after the caller has given up is closed
        by the worker.
        """
        future = self._worker_pool().submit(self._http.send, request, stream=True)
        wake = threading.Event()
        future.add_done_callback(lambda _: wake.set())
        unregister = token.on_cancel(wake.set)
        try:
            while not future.done() and not token.cancelled:
                wake.wait(token.remaining())
        finally:
            unregister()

        if not future.done():
            future.add_done_callback(_close_abandoned)
            log.debug(f"{request.method} {request.url} abandoned before headers")
            token.raise_if_cancelled()
        return future.result()

    def _iter_body(
        self,
        response: httpx.Response,
        token: CancelToken | None,
        chunk_size: int | None = None,
    ) -> Iterator[bytes]:
        unregister: Callable[[], None] = _noop
        if token is not None:
            unregister = token.on_cancel(response.close)
        try:
            for chunk in response.iter_bytes(chunk_size):
                if token is not None:
                    token.raise_if_cancelled()
                yield chunk
        except (httpx.HTTPError, httpx.StreamError) as exc:
            if token is not None and token.cancelled:
                raise RequestCancelledError("Response read cancelled") from exc
            raise TransportError(f"Reading response failed: {exc}") from exc
        finally:
            unregister()
        # Closing the stream from another thread can end iteration quietly
        if token is not None:
            token.raise_if_cancelled()

    def _raise_for_status(
        self,
        method: str,
        path: str,
        response: httpx.Response,
        body: bytes,
    ) -> None:
        exc = error_for_status(response.status_code, body.decode("utf-8", errors="replace"))
        if exc is None:
            return
        log.warning(f"{method} {path} -> HTTP {response.status_code}")
        raise exc
