"""
Zone Lookup

Resolves a zone name (e.g. "example.com") to the opaque zone ID the Log Share
endpoints expect, using the zones listing of the same API.
"""

from typing import Any, Dict, Optional
import logging

import requests

from .config import API_URL
from .errors import ZoneLookupError
from ..coreutils.request import new_session

logger = logging.getLogger(__name__)


def _error_messages(payload: Dict[str, Any]) -> str:
    errors = payload.get("errors") or []
    messages = [str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors]
    return "; ".join(messages) or "unknown error"


def resolve_zone_id(
    api_key: str,
    api_email: str,
    zone_name: str,
    session: Optional[requests.Session] = None,
    base_url: str = API_URL,
    timeout: int = 30,
) -> str:
    """
    Look up the ID of the zone called `zone_name`

    Args:
        api_key: Account API key
        api_email: Email address of the account
        zone_name: Zone (domain) name
        session: Optional HTTP session to reuse
        base_url: API base URL
        timeout: Request timeout in seconds

    Returns:
        str: Zone ID

    Raises:
        ZoneLookupError: Request failed, API reported an error, or no match
    """
    if not zone_name:
        raise ZoneLookupError("zone name cannot be empty")

    session = session or new_session()
    url = f"{base_url.rstrip('/')}/zones"
    headers = {
        "X-Auth-Key": api_key,
        "X-Auth-Email": api_email,
        "Accept": "application/json",
    }

    logger.info(f"Looking up zone ID for {zone_name}")
    try:
        response = session.get(
            url, headers=headers, params={"name": zone_name}, timeout=timeout
        )
    except requests.exceptions.RequestException as e:
        raise ZoneLookupError(f"zone lookup for {zone_name!r} failed: {e}") from e

    try:
        payload = response.json()
    except ValueError as e:
        raise ZoneLookupError(
            f"invalid JSON response from zone lookup (HTTP {response.status_code})"
        ) from e

    if not isinstance(payload, dict):
        raise ZoneLookupError(f"unexpected zone lookup response: {payload!r}")

    if response.status_code != 200 or not payload.get("success", False):
        raise ZoneLookupError(
            f"zone lookup for {zone_name!r} failed with HTTP "
            f"{response.status_code}: {_error_messages(payload)}"
        )

    for zone in payload.get("result") or []:
        if zone.get("name") == zone_name and zone.get("id"):
            logger.debug(f"Zone {zone_name} has ID {zone['id']}")
            return zone["id"]

    raise ZoneLookupError(f"could not find a zone named {zone_name!r}")
