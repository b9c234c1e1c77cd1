"""Social profile links."""

from __future__ import annotations

from lead_pipeline.extract import patterns
from lead_pipeline.models import SocialLinks

_PLATFORMS = (
    ("linkedin", patterns.LINKEDIN),
    ("facebook", patterns.FACEBOOK),
    ("instagram", patterns.INSTAGRAM),
    ("twitter", patterns.TWITTER),
)

_SAME_AS_HOSTS = {
    "linkedin": ("linkedin.com",),
    "facebook": ("facebook.com",),
    "instagram": ("instagram.com",),
    "twitter": ("twitter.com", "x.com"),
}


def extract_social_links(html: str) -> SocialLinks:
    """First profile link per platform found in the raw HTML."""
    social = SocialLinks()
    for platform, regex in _PLATFORMS:
        match = regex.search(html)
        if match:
            setattr(social, platform, match.group(0))
    return social


def social_from_same_as(urls: list[str]) -> SocialLinks:
    """Map Schema.org ``sameAs`` URLs onto platforms."""
    social = SocialLinks()
    for url in urls:
        lower = url.lower()
        for platform, hosts in _SAME_AS_HOSTS.items():
            if getattr(social, platform):
                continue
            if any(f"//{h}" in lower or f".{h}" in lower for h in hosts):
                setattr(social, platform, url)
    return social


def merge_social(primary: SocialLinks, fallback: SocialLinks) -> SocialLinks:
    """Fill platforms missing from ``primary`` with ``fallback`` values."""
    merged = primary.model_copy()
    for platform, _ in _PLATFORMS:
        if not getattr(merged, platform) and getattr(fallback, platform):
            setattr(merged, platform, getattr(fallback, platform))
    return merged
