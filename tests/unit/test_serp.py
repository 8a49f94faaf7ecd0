"""Tests for search results page extraction."""

import re

import pytest

from serp_pipeline.config import Settings
from serp_pipeline.errors import ChallengeDetected
from serp_pipeline.extractors import extract_serp, strategy
from serp_pipeline.extractors.features import extract_organic_results, feature_counts, split_blocks
from serp_pipeline.models import RawDocument


@pytest.fixture
def serp(serp_html):
    return extract_serp(serp_html, "best pizza nyc", country="us", language="en", location="New York")


class TestOrganic:
    """Tests for organic results."""

    def test_results_in_order(self, serp):
        assert [r.position for r in serp.organic] == [1, 2]
        assert [r.title for r in serp.organic] == ["Joe's Pizza - Greenwich Village", "Prince Street Pizza"]

    def test_redirect_unwrapped(self, serp):
        joes = serp.organic[0]
        assert joes.url == "https://www.joespizzanyc.com/"
        assert joes.display_url == "www.joespizzanyc.com"

    def test_snippet_date_and_sitelinks(self, serp):
        joes = serp.organic[0]
        assert "classic New York slice" in joes.snippet
        assert joes.date == "Mar 3, 2024"
        assert [s.title for s in joes.sitelinks] == ["Menu"]
        assert joes.sitelinks[0].url == "https://www.joespizzanyc.com/menu"

    def test_plain_snippet(self, serp):
        assert serp.organic[1].snippet == "Famous square pepperoni slices in Nolita."
        assert serp.organic[1].date is None

    def test_internal_links_skipped(self, serp):
        assert all("google.com" not in r.url for r in serp.organic)

    def test_basic_g_block(self):
        """The plain-HTML layout still yields a result."""
        html = (
            '<div class="g"><a href="/url?q=https://example.com/page">Example Title</a>'
            '<span class="st">An example snippet.</span></div>'
        )
        results = extract_serp(html, "example").organic
        assert len(results) == 1
        assert results[0].position == 1
        assert results[0].title == "Example Title"
        assert results[0].url == "https://example.com/page"
        assert results[0].snippet == "An example snippet."

    def test_basic_headings(self):
        html = (
            '<h3 class="r"><a href="/url?q=https://one.example.com/&amp;sa=U">First Result Page</a></h3>'
            '<span class="st">The first snippet text.</span>'
            '<h3 class="r"><a href="/url?q=https://two.example.com/&amp;sa=U">Second Result Page</a></h3>'
        )
        results = extract_organic_results(RawDocument(text=html))
        assert [r.url for r in results] == ["https://one.example.com/", "https://two.example.com/"]
        assert results[0].snippet == "The first snippet text."

    def test_unique_urls_and_limit(self):
        blocks = "".join(
            f'<div class="g"><a href="https://site{i % 12}.example.com/"><h3>Result number {i}</h3></a></div>'
            for i in range(30)
        )
        results = extract_organic_results(RawDocument(text=blocks), limit=10)
        assert len(results) == 10
        assert len({r.url for r in results}) == 10

    def test_organic_limit_setting(self, serp_html):
        serp = extract_serp(serp_html, "pizza", settings=Settings(organic_limit=1))
        assert len(serp.organic) == 1


class TestSerpFeatures:
    """Tests for everything around the organic list."""

    def test_total_results(self, serp):
        assert serp.total_results == "1,230,000"

    def test_ads(self, serp):
        assert len(serp.ads) == 1
        ad = serp.ads[0]
        assert ad.position == 1
        assert ad.title == "Pizza Hut Deals"
        assert ad.url == "https://www.pizzahut.com/deals"
        assert ad.is_top
        assert ad.description == "Order online for delivery tonight."

    def test_people_also_ask(self, serp):
        questions = serp.people_also_ask
        assert [q.question for q in questions] == ["Who has the best pizza in NYC?", "Is New York pizza the best?"]
        assert questions[0].snippet == "Joe's Pizza is often ranked first among slice shops."
        assert questions[0].url == "https://www.timeout.com/newyork/restaurants/best-pizza-nyc"

    def test_featured_snippet(self, serp):
        passage = serp.featured_snippet
        assert passage.type == "paragraph"
        assert passage.url == "https://en.wikipedia.org/wiki/Neapolitan_pizza"
        assert passage.title == "Neapolitan pizza"
        assert "wood-fired oven" in passage.text

    def test_ai_overview(self, serp):
        overview = serp.ai_overview
        assert "foldable slices" in overview.text
        assert [(s.title, s.url) for s in overview.sources] == [("Eater", "https://www.eater.com/pizza-nyc")]

    def test_map_pack(self, serp):
        assert [e.name for e in serp.map_pack] == ["Joe's Pizza", "Prince Street Pizza"]
        joes = serp.map_pack[0]
        assert joes.rating == 4.5
        assert joes.review_count == 1234
        assert joes.category == "Pizza restaurant"
        assert joes.address == "7 Carmine St, New York"

    def test_knowledge_panel(self, serp):
        panel = serp.knowledge_panel
        assert panel.title == "Joe's Pizza"
        assert panel.type == "Pizza restaurant in New York City"
        assert panel.description.startswith("Joe's Pizza is a pizzeria")
        assert panel.url == "https://www.joespizzanyc.com/"
        assert panel.attributes == {"address": "7 Carmine St, New York, NY 10014", "phone": "(212) 366-1182"}

    def test_related_searches(self, serp):
        assert serp.related_searches == ["best pizza nyc", "joe's pizza menu"]

    def test_query_echoed(self, serp):
        record = serp.to_record()
        assert record["query"] == "best pizza nyc"
        assert record["location"] == "New York"
        assert record["totalResults"] == "1,230,000"
        assert len(record["peopleAlsoAsk"]) == 2
        assert record["mapPack"][0]["reviewCount"] == 1234


class TestSerpEdgeCases:
    """Tests for empty, bare and blocked pages."""

    @pytest.mark.parametrize("html", [None, "", "  \n", RawDocument()])
    def test_empty_document(self, html):
        serp = extract_serp(html, "pizza")
        assert serp.query == "pizza"
        assert serp.organic == []
        assert serp.ads == []
        assert serp.people_also_ask == []
        assert serp.featured_snippet is None
        assert serp.ai_overview is None
        assert serp.map_pack == []
        assert serp.knowledge_panel is None
        assert serp.related_searches == []
        assert serp.total_results is None

    def test_page_without_features(self):
        serp = extract_serp("<html><body><p>No results found.</p></body></html>", "zzzz")
        assert serp.organic == []
        assert serp.featured_snippet is None
        assert serp.knowledge_panel is None

    def test_page_checked_for_challenge_once(self, serp_html, monkeypatch):
        calls = []
        find_marker = strategy.find_challenge_marker

        def counting(text):
            calls.append(len(text))
            return find_marker(text)

        monkeypatch.setattr(strategy, "find_challenge_marker", counting)
        extract_serp(serp_html, "pizza")
        assert len(calls) == 1

    def test_feature_extractor_checks_on_its_own(self, challenge_html):
        with pytest.raises(ChallengeDetected):
            extract_organic_results(RawDocument(text=challenge_html))

    def test_page_about_captchas_is_not_blocked(self):
        html = (
            '<div class="g"><a href="https://www.cloudflare.com/learning/bots/how-captchas-work/">'
            "<h3>How CAPTCHAs work</h3></a></div>"
        )
        serp = extract_serp(html, "captcha")
        assert [r.title for r in serp.organic] == ["How CAPTCHAs work"]

    def test_challenge_page(self, challenge_html):
        with pytest.raises(ChallengeDetected):
            extract_serp(challenge_html, "pizza")


class TestFeatureHelpers:
    """Tests for block splitting and summaries."""

    def test_split_blocks(self):
        text = "<i>a</i>x<i>b</i>y<footer>z"
        blocks = list(split_blocks(text, re.compile("<i>"), re.compile("<footer")))
        assert blocks == [(0, "<i>a</i>x"), (9, "<i>b</i>y")]

    def test_split_blocks_limit(self):
        blocks = list(split_blocks("<i>" + "a" * 50, re.compile("<i>"), limit=10))
        assert blocks == [(0, "<i>aaaaaaa")]

    def test_feature_counts(self):
        summary = feature_counts(organic=[1, 2], ads=[], snippet=None, panel=object())
        assert summary == "organic=2 ads=0 snippet=no panel=yes"
