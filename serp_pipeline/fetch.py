"""HTTP document fetcher with mobile UA rotation and retries.

This is the transport collaborator used by the CLI. The extraction core
never imports it: it works on documents that were already fetched.
"""

import asyncio
import random
from typing import Optional
from urllib.parse import quote, urlencode

import httpx
from rich.console import Console

console = Console(stderr=True)

# Mobile browsers get the lightweight result pages
MOBILE_USER_AGENTS = [
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Mobile/15E148 Safari/604.1",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_3 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) CriOS/122.0.6261.89 Mobile/15E148 Safari/604.1",
    "Mozilla/5.0 (Linux; Android 14; Pixel 8 Pro) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.6261.90 Mobile Safari/537.36",
    "Mozilla/5.0 (Linux; Android 14; SM-S928B) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.6261.90 Mobile Safari/537.36",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_2 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Mobile/15E148 Safari/604.1",
]

# Pre-accepted consent; skips the "Before you continue" interstitial
CONSENT_COOKIE = "CONSENT=PENDING+987; SOCS=CAESHAgBEhJnd3NfMjAyNDA1MDYtMF9SQzIaAmVuIAEaBgiA_LiuBg"

SEARCH_URL = "https://www.google.com/search"
MAPS_SEARCH_URL = "https://www.google.com/maps/search/"
PLACE_URL = "https://www.google.com/maps/place/?q=place_id:{place_id}"

RETRY_STATUSES = {429, 500, 502, 503, 504}


class FetchResult:
    """Result from a fetch with error details."""
    def __init__(
        self,
        html: Optional[str] = None,
        status: Optional[int] = None,
        error: Optional[str] = None,
    ):
        self.html = html
        self.status = status
        self.error = error  # "timeout", "connection", "429", ...

    @property
    def ok(self) -> bool:
        return self.html is not None and self.error is None


def build_search_url(
    query: str,
    country: str = "us",
    language: str = "en",
    location: Optional[str] = None,
    start: int = 0,
) -> str:
    """Basic-HTML results page URL (no JS, no personalization, no autocorrect)."""
    params = {
        "q": f"{query} {location}" if location else query,
        "hl": language,
        "gl": country,
        "num": "10",
        "ie": "UTF-8",
        "oe": "UTF-8",
        "pws": "0",
        "gbv": "1",
        "nfpr": "1",
        "complete": "0",
    }
    if start > 0:
        params["start"] = str(start)
    return f"{SEARCH_URL}?{urlencode(params)}"


def build_maps_search_url(query: str, location: Optional[str] = None, start: int = 0, language: str = "en") -> str:
    terms = f"{query} in {location}" if location else query
    url = f"{MAPS_SEARCH_URL}{quote(terms)}?hl={language}"
    if start > 0:
        url += f"&start={start}"
    return url


def build_place_url(place_id: str) -> str:
    return PLACE_URL.format(place_id=quote(place_id, safe=""))


def request_headers(language: str = "en") -> dict[str, str]:
    return {
        "User-Agent": random.choice(MOBILE_USER_AGENTS),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": f"{language},en;q=0.9",
        "DNT": "1",
        "Upgrade-Insecure-Requests": "1",
        "Cookie": CONSENT_COOKIE,
    }


async def fetch_document(
    url: str,
    timeout: float = 45.0,
    retries: int = 2,
    language: str = "en",
    transport: Optional[httpx.AsyncBaseTransport] = None,
    backoff: float = 0.5,
) -> FetchResult:
    """Fetch a page, retrying timeouts, connection errors, 429 and 5xx.

    `retries` counts extra attempts after the first. A non-retryable HTTP
    status returns immediately with the status as the error.
    """
    last_error = None
    last_status = None
    attempts = retries + 1

    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True, transport=transport) as client:
        for attempt in range(attempts):
            try:
                # Fresh identity per attempt
                response = await client.get(url, headers=request_headers(language))
                last_status = response.status_code
                response.raise_for_status()
                return FetchResult(html=response.text, status=response.status_code)

            except httpx.TimeoutException:
                last_error = "timeout"
            except httpx.HTTPStatusError as e:
                last_status = e.response.status_code
                last_error = str(e.response.status_code)
                if last_status not in RETRY_STATUSES:
                    break
            except httpx.TransportError as e:
                last_error = "connection" if isinstance(e, httpx.ConnectError) else type(e).__name__.lower()

            if attempt < attempts - 1:
                console.print(f"[dim]Retrying {url[:60]} ({last_error}), attempt {attempt + 2}/{attempts}[/dim]")
                await asyncio.sleep(backoff * (2 ** attempt))

    console.print(f"[dim]Fetch failed for {url[:60]}: {last_error}[/dim]")
    return FetchResult(status=last_status, error=last_error)
