"""URL normalization, filtering and crawl ordering."""

from __future__ import annotations

import re
from urllib.parse import urlsplit, urlunsplit

TRACKING_PARAMS = frozenset({"utm_source", "utm_medium", "utm_campaign"})

SKIP_PATTERNS = [re.compile(p, re.IGNORECASE) for p in (
    # WordPress
    r"/wp-json/", r"/wp-includes/", r"/wp-content/plugins/", r"/wp-content/themes/",
    r"/wp-content/uploads/", r"/wp-admin/", r"/xmlrpc\.php", r"/wp-login\.php",
    r"/feed/?$", r"/comments/feed/", r"/trackback/",
    # Static assets and documents
    r"\.(?:css|js|woff2?|ttf|ico|svg|png|jpe?g|gif|webp)(?:\?.*)?$",
    r"\.(?:pdf|docx?|xlsx?|zip|rar|exe|dmg|mp3|mp4|wav|avi|mov|wmv|json|xml)$",
    # Site builders
    r"/copy-of-", r"/_api/", r"/wix-", r"/api/", r"/static/",
    # Low-value or duplicate content
    r"/cdn-cgi/", r"/oembed", r"\?replytocom=", r"/attachment/", r"/author/",
    r"/tag/", r"/category/", r"/page/\d+", r"#.*$", r"\?share=", r"\?print=",
    r"/print/", r"/amp/?$", r"/embed/?$", r"/calendar/", r"/events/", r"/rss/?$",
    # Accounts and search
    r"/login", r"/register", r"/cart", r"/checkout", r"/my-account", r"/search",
    r"\?s=", r"\?p=\d+",
)]

PRIORITY_PATHS = [
    "/about", "/about-us", "/contact", "/contact-us",
    "/team", "/our-team", "/staff", "/leadership", "/people",
    "/news", "/blog", "/press",
]


def is_valid_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def normalize_url(url: str) -> str | None:
    """Canonical form used for the visited set; ``None`` when unparseable.

    Drops the fragment and utm tracking parameters, keeping the rest of the
    query as written. Lower-cases scheme and host, and gives a bare host a
    ``/`` path.
    """
    if not is_valid_url(url):
        return None
    parts = urlsplit(url)
    query = "&".join(
        param for param in parts.query.split("&")
        if param and param.split("=", 1)[0] not in TRACKING_PARAMS
    )
    return urlunsplit((
        parts.scheme.lower(), parts.netloc.lower(), parts.path or "/", query, "",
    ))


def _host(url: str) -> str:
    host = (urlsplit(url).hostname or "").lower()
    return host[4:] if host.startswith("www.") else host


def is_same_domain(url1: str, url2: str) -> bool:
    """Same host once a leading ``www.`` is ignored."""
    try:
        host1, host2 = _host(url1), _host(url2)
    except ValueError:
        return False
    return bool(host1) and host1 == host2


def should_skip_url(url: str) -> bool:
    return any(p.search(url) for p in SKIP_PATTERNS)


def _priority(url: str) -> int:
    try:
        path = urlsplit(url).path.lower()
    except ValueError:
        return len(PRIORITY_PATHS)
    for rank, prefix in enumerate(PRIORITY_PATHS):
        if prefix in path:
            return rank
    return len(PRIORITY_PATHS)


def sort_by_priority(urls: list[str]) -> list[str]:
    """About/contact/team-style pages first; stable otherwise."""
    return sorted(urls, key=_priority)
