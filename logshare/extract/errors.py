"""
Log Share Errors

Every failure the extract layer can raise. Errors that happen after a status
code was received carry the ResponseMeta of the attempt so callers can still
log status, duration and URL.
"""

from typing import Optional


class LogShareError(Exception):
    """Base class for all log retrieval errors"""


class ConfigurationError(LogShareError, ValueError):
    """Invalid static configuration (credentials, sample, formats, fields)"""


class TransportError(LogShareError):
    """Network-level failure before any status code was obtained.

    The outcome of the request is unknown; no ResponseMeta exists.
    """


class ResponseError(LogShareError):
    """Failure observed after the server answered"""

    def __init__(self, message: str, meta=None):
        super().__init__(message)
        self.meta = meta


class APIError(ResponseError):
    """Non-2xx response from the API"""

    def __init__(self, status_code: int, body: str = "", meta=None):
        message = f"HTTP status {status_code}: request failed"
        if body:
            message = f"{message}: {body}"
        super().__init__(message, meta)
        self.status_code = status_code
        self.body = body


class EmptyResultError(ResponseError):
    """HTTP 204: no logs for the window, or Log Share is disabled/throttled"""

    def __init__(self, meta=None):
        super().__init__(
            "HTTP status 204: no logs available. Check that Log Share is "
            "enabled for your domain or that you are not attempting to "
            "retrieve logs too quickly",
            meta,
        )
        self.status_code = 204


class StreamError(ResponseError):
    """Reading or forwarding the body failed after a 2xx status"""

    def __init__(
        self,
        message: str,
        meta=None,
        cause: Optional[BaseException] = None,
        count: int = 0,
    ):
        super().__init__(message, meta)
        self.cause = cause
        # records forwarded to the sinks before the failure
        self.count = count


class RecordTooLargeError(LogShareError):
    """A single record exceeded the scanner's maximum record size"""


class ZoneLookupError(LogShareError):
    """A zone name could not be resolved to a zone ID"""


class SinkWriteError(OSError):
    """A destination sink rejected a write"""

    def __init__(self, sink, cause: BaseException):
        super().__init__(f"write to sink {sink!r} failed: {cause}")
        self.sink = sink
        self.cause = cause
