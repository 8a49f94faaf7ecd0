"""Shared test fixtures and configuration."""

import pytest

from serp_pipeline.config import Settings, get_settings


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate every test from SERP_PIPELINE_* variables and the settings cache."""
    import os

    for key in list(os.environ):
        if key.startswith("SERP_PIPELINE_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def maps_listing_html() -> str:
    """A maps results feed with three listings and some UI chrome."""
    return """<html><body>
<h1 class="fontTitleLarge">Results</h1>
<div role="feed">
  <div class="qBF1Pd">Sponsored</div>
  <div class="Nv2PK">
    <a class="hfpxzc" aria-label="Joe's Pizza" href="https://www.google.com/maps/place/Joe's+Pizza/data=!3d40.7306!4d-73.9866"></a>
    <div class="qBF1Pd fontHeadlineSmall">Joe's Pizza</div>
    <span class="MW4etd" aria-label="4.5 stars">4.5</span><span class="UY7F9">(1,234)</span>
    <div class="W4Efsd"><span class="DkEaL">Pizza restaurant</span> · <span aria-label="Price: Moderate">$$</span></div>
    <div class="W4Efsd"><span>7 Carmine St, New York, NY 10014</span></div>
    <a href="tel:+12125551234">Call</a>
  </div>
  <div class="Nv2PK">
    <a class="hfpxzc" aria-label="Prince Street Pizza" href="https://www.google.com/maps/place/Prince+Street+Pizza/data=!3d40.7231!4d-73.9945"></a>
    <div class="qBF1Pd fontHeadlineSmall">Prince Street Pizza</div>
    <span class="MW4etd" aria-label="4.6 stars">4.6</span><span class="UY7F9">(2,871)</span>
    <div class="W4Efsd"><span class="DkEaL">Pizza restaurant</span> · <span aria-label="Price: Inexpensive">$</span></div>
    <div class="W4Efsd"><span>27 Prince St, New York, NY 10012</span></div>
  </div>
  <div class="Nv2PK">
    <a class="hfpxzc" aria-label="Lombardi's" href="https://www.google.com/maps/place/Lombardi's/data=!3d40.7216!4d-73.9956"></a>
    <div class="qBF1Pd fontHeadlineSmall">Lombardi's</div>
    <span class="MW4etd" aria-label="4.3 stars">4.3</span><span class="UY7F9">(3,456)</span>
    <div class="W4Efsd"><span class="DkEaL">Italian restaurant</span></div>
    <div class="W4Efsd"><span>32 Spring St, New York, NY 10012</span></div>
  </div>
</div>
</body></html>"""


@pytest.fixture
def json_ld_html() -> str:
    """Schema.org ItemList with one clean business and one with broken numbers."""
    return """<html><head>
<script type="application/ld+json">
{"@context": "https://schema.org", "@type": "ItemList", "itemListElement": [
  {"@type": "ListItem", "position": 1, "item": {
    "@type": "Restaurant",
    "name": "Casa Bonita",
    "geo": {"@type": "GeoCoordinates", "latitude": 39.7405, "longitude": -105.0728},
    "aggregateRating": {"@type": "AggregateRating", "ratingValue": "4.2", "reviewCount": "8123"},
    "address": {"@type": "PostalAddress", "streetAddress": "6715 W Colfax Ave",
                "addressLocality": "Lakewood", "addressRegion": "CO", "postalCode": "80214"},
    "telephone": "+1 303-232-5115",
    "url": "https://www.casabonitadenver.com/",
    "priceRange": "$$",
    "servesCuisine": "Mexican",
    "openingHoursSpecification": [
      {"@type": "OpeningHoursSpecification", "dayOfWeek": ["Thursday", "Friday"],
       "opens": "11:00", "closes": "21:00"}
    ]
  }},
  {"@type": "ListItem", "position": 2, "item": {
    "@type": "Store",
    "name": "Bad Geo Shop",
    "address": "12 Market Street, Denver, CO",
    "geo": {"latitude": 95.0, "longitude": 40.0},
    "aggregateRating": {"ratingValue": "7.5", "reviewCount": "-3"}
  }}
]}
</script>
</head><body></body></html>"""


@pytest.fixture
def place_page_html() -> str:
    """A single place details page with no structured data."""
    return """<html><head>
<title>Joe's Pizza · 7 Carmine St - Google Maps</title>
<meta property="og:title" content="Joe's Pizza · 7 Carmine St">
</head><body>
<div role="main">
  <h1 class="DUwDvf fontHeadlineLarge">Joe's Pizza</h1>
  <div class="F7nice"><span aria-label="4.5 stars">4.5</span> <span aria-label="1,234 reviews">(1,234)</span></div>
  <button class="DkEaL" jsaction="pane.rating.category">Pizza restaurant</button>
  <button data-item-id="address" aria-label="Address: 7 Carmine St, New York, NY 10014"><div>7 Carmine St, New York, NY 10014</div></button>
  <a data-item-id="authority" href="https://www.joespizzanyc.com/" aria-label="Website: joespizzanyc.com">joespizzanyc.com</a>
  <button data-item-id="phone:tel:+12123661182" aria-label="Phone: (212) 366-1182"><div>(212) 366-1182</div></button>
  <table class="eK4R0e">
    <tr><td>Monday</td><td>10 AM-2 AM</td></tr>
    <tr><td>Tuesday</td><td>10 AM-2 AM</td></tr>
  </table>
  <a href="https://www.google.com/maps/place/Joe's+Pizza/@40.7306,-73.9866,17z/data=!4m6!3m5!1s0x89c25991b7f0d2ad:0x5a3c1dc7ec2e8b0a!8m2!3d40.7306!4d-73.9866">Directions</a>
</div>
</body></html>"""


@pytest.fixture
def serp_html() -> str:
    """A results page carrying every supported feature."""
    return """<html><body>
<div id="result-stats">About 1,230,000 results (0.52 seconds)</div>
<div id="tads">
  <div class="uEierd">
    <a class="sVXRqc" data-rw="1" href="/aclk?sa=l&amp;ai=abc&amp;adurl=https%3A%2F%2Fwww.pizzahut.com%2Fdeals"><div role="heading"><span>Pizza Hut Deals</span></div></a>
    <div>Order online for delivery tonight.</div>
  </div>
</div>
<div id="search">
  <div class="xpdopen"><div class="LGOjhe"><span>A Neapolitan pizza is baked in a wood-fired oven for 60 to 90 seconds.</span> <a href="https://en.wikipedia.org/wiki/Neapolitan_pizza">Neapolitan pizza</a></div><div class="kno-fb"></div></div>
  <div class="YsSBbe"><div><div>New York pizza is known for large, thin, foldable slices sold by the slice. <a href="https://www.eater.com/pizza-nyc">Eater</a></div></div></div>
  <div class="MjjYud"><div class="g">
    <a href="/url?q=https://www.joespizzanyc.com/&amp;sa=U"><h3 class="LC20lb">Joe's Pizza - Greenwich Village</h3></a>
    <div class="VwiC3b"><span>Mar 3, 2024 - The classic New York slice since 1975.</span></div>
    <a class="fl" href="/url?q=https://www.joespizzanyc.com/menu&amp;sa=U">Menu</a>
  </div></div>
  <div class="MjjYud"><div class="g">
    <a href="https://www.prince-st-pizza.com/"><h3>Prince Street Pizza</h3></a>
    <div class="VwiC3b">Famous square pepperoni slices in Nolita.</div>
  </div></div>
  <div class="MjjYud"><div class="g">
    <a href="https://maps.google.com/maps?q=pizza"><h3>Pizza near me - Google Maps</h3></a>
  </div></div>
  <div class="related-question-pair" data-q="Who has the best pizza in NYC?">
    <div class="wDYxhc">Joe's Pizza is often ranked first among slice shops.</div>
    <a href="https://www.timeout.com/newyork/restaurants/best-pizza-nyc">Time Out</a>
  </div>
  <div class="related-question-pair" data-q="Is New York pizza the best?"></div>
  <div class="kp-wholepage">
    <div data-attrid="title" role="heading"><span>Joe's Pizza</span></div>
    <div data-attrid="subtitle"><span>Pizza restaurant in New York City</span></div>
    <div data-attrid="description"><span>Joe's Pizza is a pizzeria founded in 1975 by Joe Pozzuoli.</span></div>
    <a class="ruhjFe" href="https://www.joespizzanyc.com/">Website</a>
    <div data-attrid="kc:/location/location:address"><span class="w8qArf"><a href="#">Address</a>: </span><span class="LrzXr">7 Carmine St, New York, NY 10014</span></div>
    <div data-attrid="kc:/local:phone"><span class="w8qArf"><a href="#">Phone</a>: </span><span class="LrzXr">(212) 366-1182</span></div>
  </div>
  <a class="k8XOCe" href="/search?q=best+pizza+nyc"><div>best pizza nyc</div></a>
  <a class="k8XOCe" href="/search?q=joe%27s+pizza+menu"><div>joe's pizza menu</div></a>
  <div class="VkpGBb"><span class="OSrXXb">Joe's Pizza</span><div>4.5 (1,234) · Pizza restaurant · 7 Carmine St, New York</div></div>
  <div class="VkpGBb"><span class="OSrXXb">Prince Street Pizza</span><div>4.6 (2,871) · Pizza · 27 Prince St, New York</div></div>
</div>
<footer>Privacy Terms</footer>
</body></html>"""


@pytest.fixture
def challenge_html() -> str:
    """A block page that also contains otherwise well-formed listings."""
    return """<html><body>
<div id="infoDiv">Our systems have detected unusual traffic from your computer network.</div>
<form action="/sorry/index"><div class="g-recaptcha"></div></form>
<a aria-label="Joe's Pizza" href="https://www.google.com/maps/place/Joe's+Pizza"></a>
<div class="g"><a href="https://example.com/page">Example Title</a></div>
</body></html>"""
