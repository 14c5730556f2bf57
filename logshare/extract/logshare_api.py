"""
Log Share API Client - Streaming I/O

Issues authenticated GET requests against the Log Share endpoints, classifies
the response by status and streams JSON Lines bodies straight to the
configured sinks. Nothing here retries, buffers whole bodies or parses logs.
"""

from dataclasses import dataclass
from typing import Optional
import logging

import requests
from requests.structures import CaseInsensitiveDict

from .config import RetrievalConfig
from .errors import (
    APIError,
    EmptyResultError,
    SinkWriteError,
    StreamError,
    TransportError,
)
from .fanout import FanOutSink, stdout_sink
from .query import (
    ByRayID,
    ByTimestamp,
    FieldDiscovery,
    RetrievalRequest,
    build_url,
)
from .stream import CHUNK_SIZE, iter_records, stream_records
from ..coreutils.request import new_session
from ..coreutils.time import make_timestamp

logger = logging.getLogger(__name__)

# Cap on how much of an error body is read into memory
MAX_ERROR_BODY = 1_000_000


@dataclass
class ResponseMeta:
    """Outcome of one request: status, duration (ms), records streamed, URL"""

    status_code: int
    duration: int
    url: str
    count: int = 0


def _read_capped(response: requests.Response, limit: int) -> bytes:
    body = bytearray()
    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
        body += chunk[: limit - len(body)]
        if len(body) >= limit:
            break
    return bytes(body)


class LogShareAPIClient:
    """Streaming client for the Log Share API.

    The config is immutable, and every call builds its own request and
    header set. A requests.Session is not guaranteed thread-safe, so
    concurrent callers should pass one session per thread.
    """

    def __init__(
        self, config: RetrievalConfig, session: Optional[requests.Session] = None
    ):
        self.config = config
        self.session = session or new_session()
        self.dest = FanOutSink(config.sinks or (stdout_sink(),))

    def _build_headers(self) -> CaseInsensitiveDict:
        # Fresh copy per call; credentials always win over caller extras
        headers = CaseInsensitiveDict(self.config.headers)
        headers["X-Auth-Key"] = self.config.api_key
        headers["X-Auth-Email"] = self.config.api_email
        headers["Accept"] = "application/json"
        return headers

    def request(self, url: str) -> ResponseMeta:
        """
        GET `url` and stream the logs to the configured sinks

        Args:
            url: Fully-qualified Log Share URL (see query.build_url)

        Returns:
            ResponseMeta: status, duration, record count and URL

        Raises:
            TransportError: No status code was obtained
            APIError: Status outside 2xx
            EmptyResultError: Status 204
            StreamError: Body could not be read or forwarded
        """
        logger.debug(f"Fetching from {url}")
        headers = self._build_headers()

        start = make_timestamp()
        try:
            response = self.session.get(
                url, headers=headers, stream=True, timeout=self.config.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"HTTP request to {url} failed: {e}")
            raise TransportError(f"HTTP request failed: {e}") from e

        meta = ResponseMeta(
            status_code=response.status_code,
            duration=make_timestamp() - start,
            url=url,
        )

        try:
            return self._handle_response(response, meta)
        finally:
            response.close()

    def _handle_response(
        self, response: requests.Response, meta: ResponseMeta
    ) -> ResponseMeta:
        status = meta.status_code

        if status < 200 or status > 299:
            try:
                body = _read_capped(response, MAX_ERROR_BODY)
            except requests.exceptions.RequestException as e:
                logger.warning(f"Could not read error body for HTTP {status}: {e}")
                body = b""
            raise APIError(
                status, body.decode("utf-8", errors="replace").rstrip(), meta
            )

        if status == 204:
            raise EmptyResultError(meta)

        records = iter_records(
            response.iter_content(chunk_size=CHUNK_SIZE), self.config.max_record_size
        )
        try:
            meta.count = stream_records(records, self.dest)
        except StreamError as e:
            meta.count = e.count
            e.meta = meta
            logger.error(f"Streaming from {meta.url} failed after {e.count} logs: {e}")
            raise

        try:
            self.dest.flush()
        except SinkWriteError as e:
            raise StreamError(
                f"failed to flush sinks: {e}", meta=meta, cause=e, count=meta.count
            ) from e

        logger.debug(
            f"Fetched {meta.count} logs from {meta.url}: {meta.duration}ms"
        )
        return meta

    def fetch(self, request: RetrievalRequest) -> ResponseMeta:
        """Build the URL for any retrieval request and execute it"""
        return self.request(build_url(self.config, request))

    def get_from_timestamp(
        self, zone_id: str, start: int, end: int = 0, count: int = 0
    ) -> ResponseMeta:
        """
        Fetch logs between `start` and `end` (up to `count` logs)

        Args:
            zone_id: Zone identifier
            start: Start timestamp (UNIX seconds)
            end: End timestamp; 0 leaves it open
            count: Record limit; <= 0 uses the server default

        Returns:
            ResponseMeta: Request outcome
        """
        return self.fetch(ByTimestamp(zone_id, start, end, count))

    def get_from_ray_id(
        self, zone_id: str, ray_id: str, end: int = 0, count: int = 0
    ) -> ResponseMeta:
        """Fetch logs following the request with the given ray ID"""
        return self.fetch(ByRayID(zone_id, ray_id, end, count))

    def fetch_field_names(self, zone_id: str) -> ResponseMeta:
        """Stream the names of the available log fields to the sinks"""
        return self.fetch(FieldDiscovery(zone_id))

    def close(self):
        self.session.close()


# Convenience function for direct use
def fetch_logs(
    config: RetrievalConfig,
    request: RetrievalRequest,
    session: Optional[requests.Session] = None,
) -> ResponseMeta:
    """One-shot retrieval with a throwaway client"""
    client = LogShareAPIClient(config, session=session)
    try:
        return client.fetch(request)
    finally:
        if session is None:
            client.close()
