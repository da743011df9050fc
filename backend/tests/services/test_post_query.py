"""
Unit tests for the post query service.
"""

import random

import pytest

from around.core.errors import RecordStoreError, ValidationError
from around.schemas.post import Location
from around.services.post_query import (
    PostQueryService,
    build_radius_query,
    build_threshold_query,
    decode_post,
    parse_coordinate,
    parse_range,
)

from conftest import haversine_km


def post_doc(lat, lon, face=0.0, user="alice"):
    return {
        "user": user,
        "message": "m",
        "location": {"lat": lat, "lon": lon},
        "url": "",
        "type": "image",
        "face": face,
    }


@pytest.fixture
def service(record_store) -> PostQueryService:
    return PostQueryService(record_store, post_index="post")


# ========================================
# Input parsing
# ========================================

class TestParsing:

    @pytest.mark.parametrize("value, expected", [("37.7", 37.7), ("-90", -90.0), (" 0 ", 0.0)])
    def test_parse_coordinate(self, value, expected):
        assert parse_coordinate(value, "lat", 90) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", "nan", "inf", "90.5", "-100"])
    def test_parse_coordinate_rejects(self, value):
        with pytest.raises(ValidationError):
            parse_coordinate(value, "lat", 90)

    def test_parse_range_default(self):
        assert parse_range(None) == "200km"
        assert parse_range("") == "200km"

    def test_parse_range_keeps_caller_number(self):
        assert parse_range("50") == "50km"
        assert parse_range("12.5") == "12.5km"

    @pytest.mark.parametrize("value", ["far", "-5", "10mi", "nan"])
    def test_parse_range_rejects(self, value):
        with pytest.raises(ValidationError):
            parse_range(value)


# ========================================
# Query builders
# ========================================

class TestQueryBuilders:

    def test_radius_query(self):
        query = build_radius_query(Location(lat=37.7, lon=-122.4), "200km")

        assert query == {
            "geo_distance": {
                "distance": "200km",
                "location": {"lat": 37.7, "lon": -122.4},
            }
        }

    @pytest.mark.parametrize("term", ["face", "qualityScore", "quality_score"])
    def test_threshold_query_on_score(self, term):
        assert build_threshold_query(term) == {"range": {"face": {"gte": 0.9}}}

    @pytest.mark.parametrize("term", [None, "", "user", "location", "face; drop"])
    def test_threshold_query_rejects_unknown_field(self, term):
        with pytest.raises(ValidationError):
            build_threshold_query(term)


# ========================================
# Decoding
# ========================================

class TestDecodePost:

    def test_decode_uses_document_id(self):
        post = decode_post("p1", post_doc(1.0, 2.0, face=0.5))

        assert post.id == "p1"
        assert post.owner == "alice"
        assert post.location.lat == 1.0
        assert post.quality_score == 0.5

    def test_decode_defaults_missing_optional_fields(self):
        post = decode_post("p1", {"user": "alice", "location": {"lat": 0, "lon": 0}})

        assert post.text == ""
        assert post.media_kind == ""
        assert post.quality_score == 0.0


# ========================================
# Radius search
# ========================================

@pytest.mark.asyncio
class TestSearchNearby:

    async def test_matches_great_circle_distance(self, service, record_store):
        rng = random.Random(7)
        center = (37.7, -122.4)
        for i in range(200):
            lat = center[0] + rng.uniform(-5, 5)
            lon = center[1] + rng.uniform(-5, 5)
            record_store.put("post", f"p{i}", post_doc(lat, lon))

        posts = await service.search_nearby("37.7", "-122.4", "300")

        expected = {
            doc_id
            for doc_id, doc in record_store.collections["post"].items()
            if haversine_km(center[0], center[1], doc["location"]["lat"], doc["location"]["lon"]) <= 300
        }
        assert {p.id for p in posts} == expected
        assert 0 < len(expected) < 200

    async def test_default_range(self, service, record_store):
        record_store.put("post", "near", post_doc(37.7, -122.4))
        # ~333 km north, outside the 200 km default
        record_store.put("post", "far", post_doc(40.7, -122.4))

        posts = await service.search_nearby("37.7", "-122.4")

        assert [p.id for p in posts] == ["near"]
        collection, query = record_store.searches[-1]
        assert collection == "post"
        assert query["geo_distance"]["distance"] == "200km"

    async def test_far_away_center_returns_nothing(self, service, record_store):
        record_store.put("post", "p1", post_doc(37.7, -122.4))

        # Roughly 10,000 km away from San Francisco
        posts = await service.search_nearby("-20.0", "30.0")

        assert posts == []

    async def test_invalid_coordinates(self, service, record_store):
        with pytest.raises(ValidationError):
            await service.search_nearby("north", "-122.4")

        assert record_store.searches == []

    async def test_malformed_hits_are_dropped(self, service, record_store):
        record_store.put("post", "good", post_doc(37.7, -122.4))
        record_store.put("post", "no_user", {"location": {"lat": 37.7, "lon": -122.4}})
        record_store.put("post", "bad_type", dict(post_doc(37.7, -122.4), type="audio"))

        posts = await service.search_nearby("37.7", "-122.4")

        assert [p.id for p in posts] == ["good"]

    async def test_store_failure_propagates(self, service, record_store):
        record_store.fail_on.add("search")

        with pytest.raises(RecordStoreError):
            await service.search_nearby("37.7", "-122.4")


# ========================================
# Threshold search
# ========================================

@pytest.mark.asyncio
class TestSearchThreshold:

    async def test_returns_scores_at_or_above_threshold(self, service, record_store):
        for doc_id, face in [("a", 0.95), ("b", 0.9), ("c", 0.89), ("d", 0.0)]:
            record_store.put("post", doc_id, post_doc(0, 0, face=face))
        missing = post_doc(0, 0)
        del missing["face"]
        record_store.put("post", "e", missing)

        posts = await service.search_threshold("face")

        assert sorted(p.id for p in posts) == ["a", "b"]

    async def test_unknown_term_never_reaches_store(self, service, record_store):
        with pytest.raises(ValidationError):
            await service.search_threshold("password")

        assert record_store.searches == []
