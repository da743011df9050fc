"""
Post Query Service

Builds radius and threshold queries over the post index, runs them
against the record store and decodes the hits into ``ContentRecord``s.

Both query shapes go through the same three steps: build a query
clause, execute it once, decode every hit. A hit that does not decode
is dropped with a warning so one malformed historical document cannot
hide the rest of the result set.
"""

import asyncio
import math
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from around.core.config import settings
from around.core.errors import ValidationError
from around.core.logging import get_logger
from around.db.search import Document, RecordStore
from around.schemas.post import ContentRecord, Location

logger = get_logger(__name__)

# Query term -> numeric field in the post index. Only these fields can
# be thresholded.
THRESHOLD_FIELDS = {
    "face": "face",
    "quality_score": "face",
    "qualityScore": "face",
}


# ========================================
# Input parsing
# ========================================

def parse_coordinate(value: Optional[str], name: str, limit: float) -> float:
    """
    Parse a latitude/longitude query value.

    Raises:
        ValidationError: Missing, non-numeric, non-finite or out of range
    """
    if value is None or str(value).strip() == "":
        raise ValidationError(f"{name} is required")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(number) or abs(number) > limit:
        raise ValidationError(f"{name} must be between -{limit:g} and {limit:g}")
    return number


def parse_location(lat: Optional[str], lon: Optional[str]) -> Location:
    return Location(
        lat=parse_coordinate(lat, "lat", 90),
        lon=parse_coordinate(lon, "lon", 180),
    )


def parse_range(value: Optional[str]) -> str:
    """
    Radius in the store's distance syntax.

    The bare number supplied by the caller is kept as written and given
    a ``km`` unit; no value means the configured default.
    """
    if value is None or value.strip() == "":
        return settings.default_search_range

    value = value.strip()
    try:
        number = float(value)
    except ValueError:
        raise ValidationError(f"range must be a number of kilometers, got {value!r}")
    if not math.isfinite(number) or number < 0:
        raise ValidationError("range must be a non-negative number of kilometers")
    return f"{value}km"


# ========================================
# Query builders
# ========================================

def build_radius_query(location: Location, distance: str) -> Document:
    return {
        "geo_distance": {
            "distance": distance,
            "location": {"lat": location.lat, "lon": location.lon},
        }
    }


def build_threshold_query(term: Optional[str], threshold: Optional[float] = None) -> Document:
    """
    Range query selecting posts whose ``term`` field is >= ``threshold``.

    Raises:
        ValidationError: ``term`` is not a thresholdable field
    """
    field = THRESHOLD_FIELDS.get(term or "")
    if field is None:
        allowed = ", ".join(sorted(THRESHOLD_FIELDS))
        raise ValidationError(f"term must be one of: {allowed}")

    if threshold is None:
        threshold = settings.SEARCH_THRESHOLD
    return {"range": {field: {"gte": threshold}}}


# ========================================
# Decoding
# ========================================

def decode_post(doc_id: str, source: Dict[str, Any]) -> ContentRecord:
    """Decode one post document; raises pydantic's ValidationError."""
    return ContentRecord.model_validate({**source, "id": doc_id})


class PostQueryService:
    """Service for querying posts by location and score."""

    def __init__(self, record_store: RecordStore, post_index: Optional[str] = None):
        self.record_store = record_store
        self.post_index = post_index or settings.POST_INDEX

    async def search_nearby(
        self,
        lat: Optional[str],
        lon: Optional[str],
        distance: Optional[str] = None,
    ) -> List[ContentRecord]:
        """
        Posts within ``distance`` km (great-circle) of (lat, lon).

        Example:
            >>> await service.search_nearby("37.7", "-122.4", "50")
        """
        center = parse_location(lat, lon)
        radius = parse_range(distance)
        logger.info("search_nearby", lat=center.lat, lon=center.lon, range=radius)

        return await self._run(build_radius_query(center, radius))

    async def search_threshold(self, term: Optional[str]) -> List[ContentRecord]:
        """Posts whose ``term`` score is at least the configured threshold (0.9)."""
        query = build_threshold_query(term)
        logger.info("search_threshold", term=term)

        return await self._run(query)

    async def _run(self, query: Document) -> List[ContentRecord]:
        hits = await asyncio.to_thread(
            self.record_store.search,
            self.post_index,
            query,
            settings.SEARCH_RESULT_SIZE,
        )

        posts = []
        for doc_id, source in hits:
            try:
                posts.append(decode_post(doc_id, source))
            except PydanticValidationError as e:
                logger.warning(
                    "search_hit_dropped",
                    post_id=doc_id,
                    error_count=e.error_count(),
                )
        return posts
