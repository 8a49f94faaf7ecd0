"""Redirect unwrapping and external-URL classification."""

from typing import Optional
from urllib.parse import parse_qs, urlparse

from serp_pipeline.extractors.markup import decode_entities

# Hosts owned by the search provider, ad servers, analytics and asset CDNs.
# Matched as a suffix of the hostname.
BLOCKED_HOST_SUFFIXES = (
    "google.com",
    "google.co.uk",
    "google.ca",
    "google.de",
    "google.fr",
    "google.es",
    "google.it",
    "google.com.au",
    "google.co.in",
    "google.co.jp",
    "gstatic.com",
    "googleapis.com",
    "googleusercontent.com",
    "googlesyndication.com",
    "googleadservices.com",
    "googletagmanager.com",
    "google-analytics.com",
    "doubleclick.net",
    "youtube.com",
    "ytimg.com",
    "ggpht.com",
    "goo.gl",
    "g.co",
    "schema.org",
    "w3.org",
)
BLOCKED_HOSTS = {"localhost", "127.0.0.1", "0.0.0.0"}
BLOCKED_PATH_FRAGMENTS = ("/httpservice/",)

DISPLAY_URL_MAX = 80


def _hostname(url: str) -> Optional[str]:
    try:
        host = urlparse(url).hostname
    except ValueError:
        return None
    return host.lower() if host else None


def _is_blocked_host(host: str) -> bool:
    if host in BLOCKED_HOSTS:
        return True
    return any(host == suffix or host.endswith("." + suffix) for suffix in BLOCKED_HOST_SUFFIXES)


def is_external_url(url: Optional[str]) -> bool:
    """Absolute http(s) URL whose host is not on the denylist."""
    if not url:
        return False
    if not url.lower().startswith(("http://", "https://")):
        return False
    host = _hostname(url)
    if not host or _is_blocked_host(host):
        return False
    if any(fragment in url for fragment in BLOCKED_PATH_FRAGMENTS):
        return False
    return True


def is_redirect_wrapper(url: str) -> bool:
    """A `/url?...` link that is relative or on a search-provider host."""
    try:
        path = urlparse(url).path
    except ValueError:
        return False
    if path != "/url":
        return False
    host = _hostname(url)
    return host is None or _is_blocked_host(host)


def resolve_url(raw: Optional[str]) -> Optional[str]:
    """Unwrap a `/url?q=` style redirect and keep it only if external.

    Returns None for internal/navigational links.
    """
    if not raw:
        return None
    url = decode_entities(raw.strip())
    if is_redirect_wrapper(url):
        url = query_param(url, "q") or query_param(url, "url")
    return url if is_external_url(url) else None


def resolve_ad_url(raw: Optional[str]) -> Optional[str]:
    """Unwrap an ad-click redirect (`/aclk`, googleadservices)."""
    if not raw:
        return None
    url = decode_entities(raw.strip())
    if url.startswith("/aclk") or "googleadservices" in url:
        url = query_param(url, "adurl") or query_param(url, "dest")
        if not url:
            return None
    return resolve_url(url)


def query_param(url: str, name: str) -> Optional[str]:
    """First value of a query parameter, decoded."""
    try:
        values = parse_qs(urlparse(decode_entities(url)).query).get(name)
    except ValueError:
        return None
    return values[0] if values else None


def display_url(url: str) -> str:
    """`host/path` as shown under a result title."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return url[:DISPLAY_URL_MAX]
    if not parsed.hostname:
        return url[:DISPLAY_URL_MAX]
    path = "" if parsed.path in ("", "/") else parsed.path
    return f"{parsed.hostname}{path}"[:DISPLAY_URL_MAX]
