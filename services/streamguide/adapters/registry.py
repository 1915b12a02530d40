from __future__ import annotations

from typing import Dict, Optional
from urllib.parse import urlparse

from .base import SiteAdapter
from .google import GoogleAdapter
from .imdb import IMDbAdapter
from .rottentomatoes import RottenTomatoesAdapter

ADAPTERS: Dict[str, SiteAdapter] = {
    "imdb": IMDbAdapter(),
    "rottentomatoes": RottenTomatoesAdapter(),
    "google": GoogleAdapter(),
}


def _on(hostname: str, domain: str) -> bool:
    return hostname == domain or hostname.endswith("." + domain)


def _site_of(hostname: str) -> Optional[str]:
    hostname = hostname.lower()
    labels = hostname.split(".")
    if _on(hostname, "imdb.com"):
        return "imdb"
    if _on(hostname, "rottentomatoes.com"):
        return "rottentomatoes"
    # google.com, www.google.co.uk, ...
    if "google" in labels:
        return "google"
    return None


def adapter_for_url(url: str) -> Optional[SiteAdapter]:
    site = _site_of(urlparse(url).hostname or "")
    return ADAPTERS.get(site) if site else None


def is_supported_url(url: str) -> bool:
    """Whether the popup should offer to re-show the widget for this tab."""
    parsed = urlparse(url)
    site = _site_of(parsed.hostname or "")
    if site == "imdb":
        return parsed.path.startswith("/title/")
    if site == "rottentomatoes":
        return parsed.path.startswith("/m/") or parsed.path.startswith("/tv/")
    if site == "google":
        return parsed.path.startswith("/search") and "q=" in parsed.query
    return False
