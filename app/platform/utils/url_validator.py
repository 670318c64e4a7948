import re
from typing import Tuple
from urllib.parse import urlparse

from app.platform.exceptions import InvalidURLError

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_HOSTNAME_RE = re.compile(r"^[A-Za-z0-9\-._~%!$&'()*+,;=]+$")


def normalize_url(url: str) -> str:
    """Trim whitespace and prepend https:// unless an http(s) scheme is already there."""
    if not url:
        return url

    url = url.strip()

    if not _SCHEME_RE.match(url):
        url = f"https://{url}"

    return url


def validate_url(url: str) -> Tuple[bool, str, str]:
    if not url or not url.strip():
        return False, "", "URL cannot be empty"

    normalized_url = normalize_url(url)
    invalid = f"Invalid URL format: {normalized_url}"

    if any(ch.isspace() for ch in normalized_url):
        return False, normalized_url, invalid

    try:
        parsed = urlparse(normalized_url)
        # .port raises ValueError for non-numeric or out of range ports
        parsed.port
    except ValueError:
        return False, normalized_url, invalid

    if parsed.scheme.lower() not in ("http", "https"):
        return False, normalized_url, invalid

    host = parsed.hostname
    if not host:
        return False, normalized_url, invalid

    # IPv6 literals arrive bracketed in netloc and unbracketed in hostname
    if ":" in host:
        if "[" not in parsed.netloc:
            return False, normalized_url, invalid
    elif not _HOSTNAME_RE.match(host) or host.startswith(".") or ".." in host:
        return False, normalized_url, invalid

    return True, normalized_url, ""


def ensure_valid_url(url: str) -> str:
    """Return the normalized URL or raise InvalidURLError."""
    is_valid, normalized_url, error = validate_url(url)
    if not is_valid:
        raise InvalidURLError(error, details={"url": url})
    return normalized_url
