"""
Retrieval Configuration

Immutable per-client settings for the Log Share API: credentials, endpoint,
log source, sampling, timestamp format, field allowlist and sinks.
Everything is validated once, when the config is created.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Tuple
from urllib.parse import urlparse

from .errors import ConfigurationError

API_URL = "https://api.cloudflare.com/client/v4"

SAMPLE_MIN = 0.1
SAMPLE_MAX = 0.9

# Longest single record the line scanner will hold in memory
DEFAULT_MAX_RECORD_SIZE = 1024 * 1024

DEFAULT_TIMEOUT = 60


class LogSource(str, Enum):
    """Server-side log source: by receipt order or by request timestamp"""

    RECEIVED = "received"
    REQUESTS = "requests"


class TimestampFormat(str, Enum):
    UNIX = "unix"
    UNIXNANO = "unixnano"
    RFC3339 = "rfc3339"


def parse_timestamp_format(value) -> Optional[TimestampFormat]:
    """Accept a TimestampFormat, its string value, or None/"" for unset"""
    if value is None or value == "":
        return None
    if isinstance(value, TimestampFormat):
        return value
    try:
        return TimestampFormat(str(value).lower())
    except ValueError:
        valid = ", ".join(f.value for f in TimestampFormat)
        raise ConfigurationError(
            f"timestamp format must be one of {valid}, got {value!r}"
        ) from None


def _header_pairs(headers) -> Tuple[Tuple[str, str], ...]:
    """Normalise a mapping or iterable of (name, value) pairs"""
    if not headers:
        return ()
    items = headers.items() if isinstance(headers, Mapping) else headers
    return tuple((str(name), str(value)) for name, value in items)


def validate_sample(sample: float) -> float:
    """Sample is either 0 (full set) or within [0.1, 0.9]"""
    sample = float(sample)
    if sample != 0.0 and not (SAMPLE_MIN <= sample <= SAMPLE_MAX):
        raise ConfigurationError(
            f"sample must be between {SAMPLE_MIN} and {SAMPLE_MAX}, got {sample}"
        )
    return sample


@dataclass(frozen=True)
class RetrievalConfig:
    api_key: str
    api_email: str
    api_url: str = API_URL
    source: LogSource = LogSource.RECEIVED
    fields: Tuple[str, ...] = ()
    sample: float = 0.0
    timestamp_format: Optional[TimestampFormat] = None
    sinks: Tuple[Any, ...] = ()
    headers: Tuple[Tuple[str, str], ...] = ()
    timeout: float = DEFAULT_TIMEOUT
    max_record_size: int = DEFAULT_MAX_RECORD_SIZE

    def __post_init__(self):
        if not self.api_key:
            raise ConfigurationError("api_key cannot be empty")
        if not self.api_email:
            raise ConfigurationError("api_email cannot be empty")

        parsed = urlparse(self.api_url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(f"invalid API URL: {self.api_url!r}")

        try:
            source = LogSource(self.source)
        except ValueError:
            raise ConfigurationError(f"unknown log source: {self.source!r}") from None

        fields = self.fields or ()
        if isinstance(fields, str):
            fields = fields.split(",")
        fields = tuple(f.strip() for f in fields if f and f.strip())
        if fields and source is not LogSource.RECEIVED:
            raise ConfigurationError(
                "fields can only be selected with the 'received' log source"
            )

        if self.max_record_size <= 0:
            raise ConfigurationError("max_record_size must be positive")

        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "api_url", self.api_url.rstrip("/"))
        object.__setattr__(self, "source", source)
        object.__setattr__(self, "fields", fields)
        object.__setattr__(self, "sample", validate_sample(self.sample))
        object.__setattr__(
            self, "timestamp_format", parse_timestamp_format(self.timestamp_format)
        )
        object.__setattr__(self, "sinks", tuple(self.sinks or ()))
        # a tuple of pairs keeps the config hashable
        object.__setattr__(self, "headers", _header_pairs(self.headers))

    @classmethod
    def build(
        cls,
        api_key: str,
        api_email: str,
        sinks: Optional[Sequence[Any]] = None,
        **options,
    ) -> "RetrievalConfig":
        """Convenience constructor accepting lists for fields and sinks"""
        if "fields" in options and options["fields"] is not None:
            options["fields"] = tuple(options["fields"])
        return cls(api_key=api_key, api_email=api_email, sinks=tuple(sinks or ()), **options)
