"""Email and phone extraction."""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup

from lead_pipeline.extract import patterns

logger = logging.getLogger(__name__)

MAX_EMAILS_PER_PAGE = 10
MAX_PHONES_PER_PAGE = 5

# Placeholder addresses from templates and docs
_PLACEHOLDER_FRAGMENTS = ("example.com", "domain.com", "email.com")

# Platform domains whose addresses show up in tracking snippets, never as contacts
_BLOCKLIST_DOMAINS = frozenset({
    "sentry.io", "sentry.wixpress.com", "wixpress.com", "wix.com",
    "squarespace.com", "godaddy.com", "schema.org", "w3.org", "gravatar.com",
})

_FILE_EXT_RE = re.compile(
    r"\.(png|jpg|jpeg|gif|svg|webp|ico|bmp|pdf|css|js|woff2?|ttf)$", re.IGNORECASE,
)

_FAKE_NUMBERS = frozenset({
    "0000000000", "1111111111", "2222222222", "5555555555",
    "1234567890", "0987654321", "1231231234", "9999999999",
})


# ---------------------------------------------------------------------------
# Emails
# ---------------------------------------------------------------------------

def decode_cloudflare_email(encoded: str) -> str | None:
    """Decode a Cloudflare ``data-cfemail`` hex string.

    The first byte is the XOR key for every following byte.
    """
    encoded = encoded.strip()
    if len(encoded) < 4 or len(encoded) % 2 != 0:
        return None
    try:
        key = int(encoded[:2], 16)
        decoded = "".join(
            chr(int(encoded[i:i + 2], 16) ^ key) for i in range(2, len(encoded), 2)
        )
    except ValueError:
        return None
    if "@" in decoded and "." in decoded.split("@")[-1]:
        return decoded
    return None


def is_junk_email(email: str) -> bool:
    lower = email.lower()
    if any(fragment in lower for fragment in _PLACEHOLDER_FRAGMENTS):
        return True
    if _FILE_EXT_RE.search(lower):
        return True
    domain = lower.rsplit("@", 1)[-1]
    return domain in _BLOCKLIST_DOMAINS


def _emails_from_html(html: str) -> list[str]:
    """mailto: links and Cloudflare-obfuscated addresses."""
    soup = BeautifulSoup(html, "lxml")
    found = []
    for tag in soup.find_all("a", href=True):
        href = tag["href"]
        if href.lower().startswith("mailto:"):
            found.append(href[7:].split("?")[0].strip())
        elif "/cdn-cgi/l/email-protection#" in href:
            decoded = decode_cloudflare_email(href.split("#", 1)[1])
            if decoded:
                found.append(decoded)
    for tag in soup.find_all(attrs={"data-cfemail": True}):
        decoded = decode_cloudflare_email(tag["data-cfemail"])
        if decoded:
            found.append(decoded)
    return found


def extract_emails(text: str, html: str = "") -> list[str]:
    """Addresses found in page text (and mailto/obfuscated ones in its HTML).

    Lower-cased, deduplicated in order of appearance, at most 10.
    """
    candidates = patterns.EMAIL.findall(text)
    if html:
        candidates.extend(_emails_from_html(html))

    emails: list[str] = []
    for raw in candidates:
        email = raw.strip().lower().rstrip(".")
        if not patterns.EMAIL.fullmatch(email) or is_junk_email(email):
            continue
        if email not in emails:
            emails.append(email)
        if len(emails) >= MAX_EMAILS_PER_PAGE:
            break

    if emails:
        logger.debug("Found %d emails: %s", len(emails), ", ".join(emails[:3]))
    return emails


# ---------------------------------------------------------------------------
# Phones
# ---------------------------------------------------------------------------

def normalize_phone(phone: str) -> str:
    """Strip formatting and a leading US country code."""
    digits = re.sub(r"\D", "", phone)
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    return digits


def is_fake_phone(phone: str) -> bool:
    """Reject test numbers, repeated or sequential digits and invalid area codes."""
    if len(phone) != 10:
        return True
    if max(phone.count(d) for d in set(phone)) >= 9:
        return True

    first3 = phone[:3]
    if phone == first3 * 3 + first3[:1]:
        return True
    if phone == phone[:2] * 5:
        return True
    if phone in ("1234567890", "0123456789", "9876543210", "0987654321"):
        return True
    if phone in _FAKE_NUMBERS:
        return True
    return phone[0] in "01"


def extract_phones(text: str, known_phones: list[str] | None = None) -> list[str]:
    """10-digit US numbers in ``text``, minus known and fake numbers (max 5)."""
    known = {normalize_phone(p) for p in (known_phones or []) if p}
    phones: list[str] = []
    for match in patterns.PHONE.findall(text):
        phone = normalize_phone(match)
        if len(phone) != 10 or phone in known or is_fake_phone(phone):
            continue
        if phone not in phones:
            phones.append(phone)
        if len(phones) >= MAX_PHONES_PER_PAGE:
            break

    if phones:
        logger.debug("Found %d phones: %s", len(phones), ", ".join(phones[:3]))
    return phones


def find_contact_page_url(urls: list[str]) -> str | None:
    for url in urls:
        if patterns.CONTACT_PAGE.search(url):
            return url
    return None
