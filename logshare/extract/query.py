"""
Log Share Query Builder - Pure URL Construction

Turns a RetrievalConfig plus one retrieval request into the fully-qualified
URL of a Log Share endpoint. No network access happens here.
"""

from dataclasses import dataclass
from typing import List, Tuple, Union
from urllib.parse import quote, urlencode

from .config import LogSource, RetrievalConfig
from .errors import ConfigurationError

# count <= 0 leaves the limit to the server
UNBOUNDED = -1


def _require_zone(zone_id: str):
    if not zone_id:
        raise ConfigurationError("zone_id cannot be empty")


@dataclass(frozen=True)
class ByTimestamp:
    """Logs from `start` (UNIX seconds) up to `end`, at most `count` of them"""

    zone_id: str
    start: int
    end: int = 0
    count: int = 0

    def __post_init__(self):
        _require_zone(self.zone_id)
        if isinstance(self.start, bool) or not isinstance(self.start, int):
            raise ConfigurationError(f"start must be an integer timestamp, got {self.start!r}")


@dataclass(frozen=True)
class ByRayID:
    """Logs following the request identified by `ray_id`"""

    zone_id: str
    ray_id: str
    end: int = 0
    count: int = 0

    def __post_init__(self):
        _require_zone(self.zone_id)
        if not self.ray_id:
            raise ConfigurationError("ray_id cannot be empty")


@dataclass(frozen=True)
class FieldDiscovery:
    """Names of the fields available on the received endpoint"""

    zone_id: str

    def __post_init__(self):
        _require_zone(self.zone_id)


RetrievalRequest = Union[ByTimestamp, ByRayID, FieldDiscovery]


def logs_path(config: RetrievalConfig, zone_id: str) -> str:
    return f"{config.api_url}/zones/{quote(zone_id, safe='')}/logs/{config.source.value}"


def fields_path(config: RetrievalConfig, zone_id: str) -> str:
    return f"{config.api_url}/zones/{quote(zone_id, safe='')}/logs/received/fields"


def _window_params(end: int, count: int) -> List[Tuple[str, str]]:
    params = []
    if end > 0:
        params.append(("end", str(end)))
    if count > 0:
        params.append(("count", str(count)))
    return params


def _config_params(config: RetrievalConfig) -> List[Tuple[str, str]]:
    params = []

    if config.sample != 0.0:
        params.append(("sample", f"{config.sample:.1f}"))

    if config.timestamp_format is not None:
        params.append(("timestamps", config.timestamp_format.value))

    if config.fields:
        if config.source is not LogSource.RECEIVED:
            raise ConfigurationError(
                "fields can only be selected with the 'received' log source"
            )
        params.append(("fields", ",".join(config.fields)))

    return params


def _with_query(base: str, params: List[Tuple[str, str]]) -> str:
    if not params:
        return base
    return f"{base}?{urlencode(params, safe=',')}"


def build_by_timestamp(
    config: RetrievalConfig, zone_id: str, start: int, end: int = 0, count: int = 0
) -> str:
    """
    Build the URL for logs starting at a timestamp

    Args:
        config: Client configuration
        zone_id: Zone identifier
        start: Start timestamp, always sent
        end: End timestamp, sent only if > 0
        count: Record limit, sent only if > 0

    Returns:
        str: Fully-qualified URL
    """
    request = ByTimestamp(zone_id, start, end, count)
    params = [("start", str(request.start))]
    params += _window_params(request.end, request.count)
    params += _config_params(config)
    return _with_query(logs_path(config, zone_id), params)


def build_by_ray_id(
    config: RetrievalConfig, zone_id: str, ray_id: str, end: int = 0, count: int = 0
) -> str:
    """Build the URL for logs resuming after a ray ID (start_id)"""
    request = ByRayID(zone_id, ray_id, end, count)
    params = [("start_id", request.ray_id)]
    params += _window_params(request.end, request.count)
    params += _config_params(config)
    return _with_query(logs_path(config, zone_id), params)


def build_field_discovery(config: RetrievalConfig, zone_id: str) -> str:
    """Build the fixed field-listing URL; it takes no query parameters"""
    _require_zone(zone_id)
    return fields_path(config, zone_id)


def build_url(config: RetrievalConfig, request: RetrievalRequest) -> str:
    """Dispatch on the retrieval request kind"""
    if isinstance(request, ByTimestamp):
        return build_by_timestamp(
            config, request.zone_id, request.start, request.end, request.count
        )
    if isinstance(request, ByRayID):
        return build_by_ray_id(
            config, request.zone_id, request.ray_id, request.end, request.count
        )
    if isinstance(request, FieldDiscovery):
        return build_field_discovery(config, request.zone_id)
    raise ConfigurationError(f"unsupported retrieval request: {request!r}")
