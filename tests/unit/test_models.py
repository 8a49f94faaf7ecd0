"""Tests for record models."""

import pytest
from pydantic import ValidationError

from serp_pipeline.models import BusinessRecord, Coordinates, OrganicResult, RawDocument, SerpResponse


class TestRawDocument:
    """Tests for the pipeline input."""

    def test_declared_length(self):
        assert RawDocument(text="abc").declared_length == 3
        assert RawDocument(text="abc", content_length=10).declared_length == 10

    @pytest.mark.parametrize("text,empty", [("", True), (" \n\t", True), ("<p>x</p>", False)])
    def test_is_empty(self, text: str, empty: bool):
        assert RawDocument(text=text).is_empty is empty


class TestBusinessRecord:
    """Tests for range backstops and serialization."""

    def test_wire_names(self):
        record = BusinessRecord(
            name="  Joe's Pizza ",
            review_count=12,
            place_id="ChIJabc",
            price_level="$$",
            coordinates=Coordinates(latitude=40.7306, longitude=-73.9866),
        ).to_record()
        assert record["name"] == "Joe's Pizza"
        assert record["reviewCount"] == 12
        assert record["placeId"] == "ChIJabc"
        assert record["priceLevel"] == "$$"
        assert record["permanentlyClosed"] is False
        assert record["phone"] is None

    def test_categories_deduplicated_in_order(self):
        record = BusinessRecord(name="Joe's Pizza", categories=["Pizza", "pizza ", "Italian"])
        assert record.categories == ["Pizza", "Italian"]

    @pytest.mark.parametrize("fields", [
        {"name": "   "},
        {"name": "X", "rating": 5.5},
        {"name": "X", "rating": 0},
        {"name": "X", "review_count": -1},
        {"name": "X", "price_level": "$$$$$"},
        {"name": "X", "price_level": "$€"},
    ])
    def test_out_of_range_rejected(self, fields: dict):
        with pytest.raises(ValidationError):
            BusinessRecord(**fields)

    def test_coordinates_range(self):
        with pytest.raises(ValidationError):
            Coordinates(latitude=95, longitude=40)

    def test_immutable(self):
        record = BusinessRecord(name="Joe's Pizza")
        with pytest.raises(ValidationError):
            record.name = "Other"


class TestSerpResponse:
    """Tests for the search response shape."""

    def test_empty_response_record(self):
        record = SerpResponse(query="pizza").to_record()
        assert record == {
            "query": "pizza",
            "country": "us",
            "language": "en",
            "location": None,
            "totalResults": None,
            "organic": [],
            "ads": [],
            "peopleAlsoAsk": [],
            "featuredSnippet": None,
            "aiOverview": None,
            "mapPack": [],
            "knowledgePanel": None,
            "relatedSearches": [],
        }

    def test_positions_start_at_one(self):
        with pytest.raises(ValidationError):
            OrganicResult(position=0, title="t", url="https://example.com/", display_url="example.com")
