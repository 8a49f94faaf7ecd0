"""Tests for per-field heuristic extractors."""

import re

import pytest

from serp_pipeline.extractors import fields as fx
from serp_pipeline.extractors.context import window_from_fragment
from serp_pipeline.extractors.fields import FieldRule, apply_rules
from serp_pipeline.models import Coordinates


def window(fragment: str):
    return window_from_fragment(fragment)


class TestApplyRules:
    """Tests for the ordered rule table evaluation."""

    def test_parse_error_is_swallowed(self):
        """A rule whose transform raises falls through to the next rule."""
        rules = [
            FieldRule(re.compile(r"([a-z]+)"), transform=lambda m: int(m.group(1))),
            FieldRule(re.compile(r"(\d+)"), transform=lambda m: int(m.group(1))),
        ]
        assert apply_rules(window("abc 42"), rules, "count") == 42

    def test_check_rejects_value(self):
        """Values failing their check are skipped."""
        rules = [FieldRule(re.compile(r"(\d+)"), transform=lambda m: int(m.group(1)), check=lambda v: v > 100)]
        assert apply_rules(window("7 then 250"), rules) == 250

    def test_no_match_is_absent(self):
        rules = [FieldRule(re.compile(r"(\d+)"))]
        assert apply_rules(window("no digits"), rules) is None

    def test_markup_source(self):
        """Markup rules see attributes that the text surface drops."""
        rules = [FieldRule(re.compile(r'data-x="(\w+)"'), source=fx.MARKUP)]
        assert apply_rules(window('<div data-x="hello">hi</div>'), rules) == "hello"


class TestRating:
    """Tests for rating extraction."""

    @pytest.mark.parametrize("fragment,expected", [
        ('<span aria-label="4.5 stars">4.5</span>', 4.5),
        ('<span aria-label="Rated 4,2 out of 5 stars"></span>', 4.2),
        ('{"ratingValue": "3.9"}', 3.9),
        ("<div>Rated 4.8 out of 5</div>", 4.8),
        ("<div>Joe's Pizza 4.2 (318) Pizza</div>", 4.2),
    ])
    def test_extracts_rating(self, fragment: str, expected: float):
        assert fx.extract_rating(window(fragment)) == expected

    @pytest.mark.parametrize("fragment", [
        '<span aria-label="7.5 stars"></span>',
        '{"ratingValue": "0.4"}',
        "<div>no rating here</div>",
    ])
    def test_out_of_range_or_missing_is_absent(self, fragment: str):
        assert fx.extract_rating(window(fragment)) is None


class TestReviewCount:
    """Tests for review count extraction."""

    @pytest.mark.parametrize("fragment,expected", [
        ('<span aria-label="1,234 reviews"></span>', 1234),
        ('{"reviewCount": "8123"}', 8123),
        ("<span>1.2K reviews</span>", 1200),
        ("<span>4.5 (87)</span>", 87),
        ("<span>(2,871)</span>", 2871),
    ])
    def test_extracts_count(self, fragment: str, expected: int):
        assert fx.extract_review_count(window(fragment)) == expected

    def test_area_code_is_not_a_count(self):
        """A parenthesized area code followed by a number is a phone."""
        assert fx.extract_review_count(window("<span>Call (212) 555-1234</span>")) is None


class TestPhone:
    """Tests for phone extraction."""

    @pytest.mark.parametrize("fragment,expected", [
        ('<a href="tel:+1-212-555-1234">Call</a>', "+1-212-555-1234"),
        ('<button data-item-id="phone:tel:+12123661182"></button>', "+12123661182"),
        ('<button aria-label="Phone: (212) 366-1182"></button>', "(212) 366-1182"),
        ("<div>Call us at (212) 555-1234 today</div>", "(212) 555-1234"),
        ("<div>London office: +44 20 7946 0958</div>", "+44 20 7946 0958"),
    ])
    def test_extracts_phone(self, fragment: str, expected: str):
        assert fx.extract_phone(window(fragment)) == expected

    @pytest.mark.parametrize("fragment", ["<div>Est. 1975</div>", "<div>Open 2019-2024</div>"])
    def test_numbers_that_are_not_phones(self, fragment: str):
        assert fx.extract_phone(window(fragment)) is None


class TestAddress:
    """Tests for address extraction."""

    @pytest.mark.parametrize("fragment,expected", [
        (
            '<button aria-label="Address: 7 Carmine St, New York, NY 10014"></button>',
            "7 Carmine St, New York, NY 10014",
        ),
        ('{"streetAddress": "6715 W Colfax Ave"}', "6715 W Colfax Ave"),
        (
            "<p>Visit us at 350 Fifth Avenue, New York, NY 10118 today</p>",
            "350 Fifth Avenue, New York, NY 10118",
        ),
    ])
    def test_extracts_address(self, fragment: str, expected: str):
        assert fx.extract_address(window(fragment)) == expected

    def test_stops_before_next_listing(self):
        """The text surface joins blocks with spaces; the next name is not part of the address."""
        fragment = "<div>7 Carmine St, New York, NY 10014</div><div>Prince Street Pizza</div>"
        assert fx.extract_address(window(fragment)) == "7 Carmine St, New York, NY 10014"


class TestWebsiteAndEmail:
    """Tests for website and email extraction."""

    @pytest.mark.parametrize("fragment,expected", [
        ('<a data-item-id="authority" href="https://www.joespizzanyc.com/">site</a>', "https://www.joespizzanyc.com/"),
        ('<a href="/url?q=https://example.com/&amp;sa=U">Example</a>', "https://example.com/"),
        ('<a href="https://www.google.com/maps">Maps</a><a href="https://example.org/">x</a>', "https://example.org/"),
    ])
    def test_extracts_website(self, fragment: str, expected: str):
        assert fx.extract_website(window(fragment)) == expected

    @pytest.mark.parametrize("fragment", [
        '<a href="https://www.google.com/maps">Maps</a>',
        '<a href="https://cdn.example.com/logo.png">logo</a>',
    ])
    def test_internal_or_asset_links_are_not_websites(self, fragment: str):
        assert fx.extract_website(window(fragment)) is None

    @pytest.mark.parametrize("fragment,expected", [
        ('<a href="mailto:Info@JoesPizza.com">mail</a>', "info@joespizza.com"),
        ("<p>Write to hello@example.org for catering</p>", "hello@example.org"),
    ])
    def test_extracts_email(self, fragment: str, expected: str):
        assert fx.extract_email(window(fragment)) == expected

    def test_asset_domains_are_not_emails(self):
        assert fx.extract_email(window("<p>errors@sentry.io</p>")) is None


class TestPriceLevel:
    """Tests for price level extraction."""

    @pytest.mark.parametrize("fragment,expected", [
        ('<span aria-label="Price: Moderate">$$</span>', "$$"),
        ('{"priceRange": "$$$"}', "$$$"),
        ("<div>Pizza · €€ · Rome</div>", "€€"),
    ])
    def test_extracts_price_level(self, fragment: str, expected: str):
        assert fx.extract_price_level(window(fragment)) == expected

    @pytest.mark.parametrize("fragment", ["<div>$12.99 slice</div>", "<div>$$$$$</div>"])
    def test_prices_are_not_levels(self, fragment: str):
        assert fx.extract_price_level(window(fragment)) is None


class TestCategories:
    """Tests for category extraction."""

    def test_classed_labels(self):
        fragment = '<span class="DkEaL">Pizza restaurant</span>'
        assert fx.extract_categories(window(fragment)) == ["Pizza restaurant"]

    def test_excludes_own_name(self):
        fragment = '<span class="DkEaL">Joe\'s Pizza</span><span class="DkEaL">Pizza restaurant</span>'
        assert fx.extract_categories(window(fragment), name="Joe's Pizza") == ["Pizza restaurant"]

    def test_delimited_segments(self):
        """Segments with digits (ratings, addresses) and symbols are skipped."""
        fragment = "<div>4.5 (120) · Pizza restaurant · $$ · 123 Main St</div>"
        assert fx.extract_categories(window(fragment)) == ["Pizza restaurant"]

    def test_json_types(self):
        fragment = '{"@type": "LocalBusiness"}{"@type": "IceCreamShop"}'
        assert fx.extract_categories(window(fragment)) == ["Ice Cream Shop"]

    def test_nothing_found(self):
        assert fx.extract_categories(window("<div>Joe's Pizza</div>")) == []


class TestCoordinates:
    """Tests for coordinate extraction."""

    @pytest.mark.parametrize("fragment,expected", [
        ('<a href="/maps/place/x/data=!3d40.7306!4d-73.9866">', (40.7306, -73.9866)),
        ('<a href="/maps/place/x/@40.7128,-74.0060,15z">', (40.7128, -74.006)),
        ('{"latitude": 39.74, "longitude": -105.07}', (39.74, -105.07)),
        ("[null,null,51.5007,-0.1246]", (51.5007, -0.1246)),
        ("<p>Located at (40.7, -73.9)</p>", (40.7, -73.9)),
    ])
    def test_extracts_coordinates(self, fragment: str, expected: tuple):
        result = fx.extract_coordinates(window(fragment))
        assert result == Coordinates(latitude=expected[0], longitude=expected[1])

    def test_invalid_latitude_is_rejected(self):
        """(95.0, 40.0) is out of range: the field stays absent."""
        assert fx.extract_coordinates(window("<p>Located at (95.0, 40.0)</p>")) is None

    def test_null_island_is_rejected(self):
        assert fx.extract_coordinates(window('<a href="x!3d0.0!4d0.0">')) is None

    def test_falls_through_to_valid_match(self):
        """An invalid pair does not hide a later valid one."""
        fragment = "<p>(95.0, 40.0)</p><p>(40.5, -74.2)</p>"
        assert fx.extract_coordinates(window(fragment)) == Coordinates(latitude=40.5, longitude=-74.2)


class TestHours:
    """Tests for opening hours extraction."""

    def test_day_ranges(self):
        fragment = (
            "<table><tr><td>Monday</td><td>9 AM–5 PM</td></tr>"
            "<tr><td>Tuesday</td><td>9 AM–5 PM</td></tr>"
            "<tr><td>Sunday</td><td>Closed</td></tr></table>"
        )
        assert fx.extract_hours(window(fragment)) == {
            "Monday": "9 AM–5 PM",
            "Tuesday": "9 AM–5 PM",
            "Sunday": "Closed",
        }

    def test_abbreviated_days(self):
        assert fx.extract_hours(window("<p>Mon: 11:00-22:00</p>")) == {"Monday": "11:00-22:00"}

    def test_first_mention_wins(self):
        fragment = "<p>Friday 10 AM-2 AM</p><p>Friday Closed</p>"
        assert fx.extract_hours(window(fragment)) == {"Friday": "10 AM-2 AM"}

    def test_no_hours(self):
        assert fx.extract_hours(window("<p>Great pizza</p>")) is None


class TestPlaceIdAndStatus:
    """Tests for place id and closed status."""

    @pytest.mark.parametrize("fragment,expected", [
        ("https://maps.google.com/?q=place_id:ChIJN1t_tDeuEmsRUsoyG83frY4", "ChIJN1t_tDeuEmsRUsoyG83frY4"),
        ('<a href="/maps/place/x/data=!4m5!3m4!1s0x89c25991b7f0d2ad:0x5a3c1dc7ec2e8b0a!8m2">', "0x89c25991b7f0d2ad:0x5a3c1dc7ec2e8b0a"),
        ('<div data-cid="1234567890123"></div>', "1234567890123"),
    ])
    def test_extracts_place_id(self, fragment: str, expected: str):
        assert fx.extract_place_id(window(fragment)) == expected

    def test_permanently_closed(self):
        assert fx.is_permanently_closed(window("<span>Permanently closed</span>"))
        assert not fx.is_permanently_closed(window("<span>Closed now</span>"))


class TestSearchResultHelpers:
    """Tests for snippet dates and result counts."""

    def test_extract_date(self):
        assert fx.extract_date("Mar 3, 2024 - The classic New York slice") == "Mar 3, 2024"
        assert fx.extract_date("September 12 2023 update") == "September 12 2023"
        assert fx.extract_date("no date here") is None
        assert fx.extract_date(None) is None

    def test_extract_total_results(self):
        markup = '<div id="result-stats">About 1,230,000 results (0.52 seconds)</div>'
        assert fx.extract_total_results(markup) == "1,230,000"
        assert fx.extract_total_results("<p>nothing</p>") is None
