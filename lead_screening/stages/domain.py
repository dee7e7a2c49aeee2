"""
Domain Normalization
====================
Turns URLs, bare domains and free text into a canonical domain string.

Every function here is total: bad input degrades to "" or None, never raises.
"""

import re
from typing import Optional
from urllib.parse import urlparse

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://")
_HOST_CHARSET_RE = re.compile(r"^[a-z0-9.-]*$")
_DOMAIN_RE = re.compile(r"^[a-z0-9.-]+\.[a-z]{2,}$")
_DOMAIN_SEARCH_RE = re.compile(r"(?:https?://)?(?:www\.)?([a-z0-9.-]+\.[a-z]{2,})", re.IGNORECASE)


def _strip_www(host: str) -> str:
    while True:
        stripped = host.strip()
        if stripped.startswith("www."):
            stripped = stripped[4:]
        if stripped == host:
            return host
        host = stripped


def normalize_domain(raw) -> str:
    """
    Canonicalize a domain or URL.

    Lowercases, then strips scheme, path/query/fragment, port and leading
    "www." labels. Anything that is not a plausible host afterwards yields "".

    Example:
        normalize_domain("HTTPS://www.Example.com:8080/path?q=1") -> "example.com"
    """
    if not raw or not isinstance(raw, str):
        return ""

    domain = raw.strip().lower()

    while True:
        stripped = _SCHEME_RE.sub("", domain)
        if stripped == domain:
            break
        domain = stripped

    # Path, query and fragment
    domain = re.split(r"[/?#]", domain, maxsplit=1)[0]
    # Port
    domain = domain.split(":", 1)[0]

    domain = _strip_www(domain)

    if not _HOST_CHARSET_RE.match(domain):
        return ""
    return domain


def extract_tld(domain) -> str:
    """Return the last label as ".tld", or "" for single-label domains"""
    labels = normalize_domain(domain).split(".")
    if len(labels) < 2 or not labels[-1]:
        return ""
    return "." + labels[-1]


def is_domain_shaped(value: str) -> bool:
    """True for strings like "example.com": dotted, no spaces, alphabetic TLD"""
    return bool(value) and bool(_DOMAIN_RE.match(value))


def extract_domain_from_free_text(text) -> Optional[str]:
    """
    Find a domain in user input.

    Tries, in order:
      1. an absolute URL ("https://heartlanddental.com/boston")
      2. a bare domain ("heartlanddental.com/boston")
      3. a domain anywhere in the text ("visit us at heartland.com")

    Returns:
        Lowercased domain, or None when there is no domain signal
    """
    if not text or not isinstance(text, str):
        return None

    trimmed = text.strip().lower()
    if not trimmed:
        return None

    # 1. Absolute URL
    if _SCHEME_RE.match(trimmed):
        try:
            host = urlparse(trimmed).hostname
        except ValueError:
            host = None
        if host and " " not in host:
            return host

    # 2. Bare domain
    if "." in trimmed and " " not in trimmed:
        candidate = re.split(r"[/?#]", trimmed, maxsplit=1)[0]
        if is_domain_shaped(candidate):
            return candidate

    # 3. Domain somewhere in the text
    match = _DOMAIN_SEARCH_RE.search(trimmed)
    if match:
        return match.group(1).lower()

    return None
