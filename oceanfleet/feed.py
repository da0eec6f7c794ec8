"""
Hotspot feed client.

Fetches plastic hotspot detections from a JSON endpoint with httpx. Any
failure (HTTP error, network error, bad JSON, too few usable records)
falls back to the built-in accumulation zones so the simulation always
has something to plan against.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
from dotenv import load_dotenv

from .entities import PlasticHotspot
from .errors import FeedError
from .geo import is_valid_coordinate
from .seed import fallback_hotspots

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


# Fewer valid detections than this are topped up from the fallback set
MIN_OPERATIONAL_HOTSPOTS = 3

FALLBACK_SOURCE = "fallback"


@dataclass
class FeedResult:
    """Outcome of a hotspot fetch."""
    hotspots: List[PlasticHotspot]
    source: str
    used_fallback: bool = False
    error: Optional[str] = None
    skipped: int = 0
    raw_count: int = 0
    notes: List[str] = field(default_factory=list)


class HotspotFeedClient:
    """
    Client for a hotspot detection feed.

    The endpoint returns either a JSON list of hotspot records or an object
    with a "hotspots" list. Records use the seed file's keys.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the feed client.

        Args:
            url: Feed URL (defaults to OCEANFLEET_HOTSPOT_FEED_URL env var)
            api_key: Bearer token (defaults to OCEANFLEET_FEED_API_KEY env var)
            timeout: Request timeout in seconds
            client: Preconfigured httpx client (tests pass a mock transport)
        """
        self.url = url or os.getenv("OCEANFLEET_HOTSPOT_FEED_URL")
        self.api_key = api_key or os.getenv("OCEANFLEET_FEED_API_KEY")
        self.timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> 'HotspotFeedClient':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def fetch_raw(self) -> List[Dict[str, Any]]:
        """
        Fetch the raw hotspot records.

        Returns:
            List of record dictionaries.

        Raises:
            FeedError: If no URL is configured, the request fails, or the
                payload is not a list of records.
        """
        if not self.url:
            raise FeedError("No hotspot feed URL configured. Set OCEANFLEET_HOTSPOT_FEED_URL.")

        headers = {
            "Accept": "application/json",
            "User-Agent": "oceanfleet/0.1 (cleanup fleet simulation)",
        }
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            response = self._client.get(self.url, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise FeedError(
                f"HTTP {e.response.status_code} from {self.url}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise FeedError(f"Request to {self.url} failed: {e}") from e
        except ValueError as e:
            raise FeedError(f"Feed returned invalid JSON: {e}") from e

        if isinstance(data, dict):
            data = data.get("hotspots")
        if not isinstance(data, list):
            raise FeedError("Feed payload has no hotspot list")
        return data

    def fetch_hotspots(self) -> FeedResult:
        """
        Fetch and validate hotspots, falling back on any failure.

        Records with out-of-range or missing coordinates are skipped. When
        fewer than MIN_OPERATIONAL_HOTSPOTS survive, the fallback set is
        appended (hotspots whose id is already present are not duplicated).

        Returns:
            FeedResult; never raises for feed problems.
        """
        try:
            records = self.fetch_raw()
        except FeedError as e:
            logger.warning("Hotspot feed unavailable, using fallback zones: %s", e)
            return FeedResult(
                hotspots=fallback_hotspots(),
                source=FALLBACK_SOURCE,
                used_fallback=True,
                error=str(e),
            )

        hotspots: List[PlasticHotspot] = []
        skipped = 0
        for record in records:
            hotspot = _parse_record(record)
            if hotspot is None:
                skipped += 1
                continue
            hotspots.append(hotspot)

        result = FeedResult(
            hotspots=hotspots,
            source=self.url,
            skipped=skipped,
            raw_count=len(records),
        )

        if len(hotspots) < MIN_OPERATIONAL_HOTSPOTS:
            known = {h.hotspot_id for h in hotspots}
            extra = [h for h in fallback_hotspots() if h.hotspot_id not in known]
            result.hotspots = hotspots + extra
            result.used_fallback = True
            result.notes.append(
                f"only {len(hotspots)} valid detections; added {len(extra)} fallback zones"
            )
            logger.warning("Hotspot feed returned %d valid records; topping up from fallback", len(hotspots))

        if skipped:
            logger.info("Skipped %d invalid hotspot records from %s", skipped, self.url)
        return result


def _parse_record(record: Any) -> Optional[PlasticHotspot]:
    if not isinstance(record, dict) or "id" not in record:
        return None
    if not is_valid_coordinate(record.get("lat"), record.get("lng")):
        return None
    try:
        return PlasticHotspot.from_dict(record)
    except (KeyError, TypeError, ValueError):
        return None
