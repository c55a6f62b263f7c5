"""URL helpers for company research input."""

from __future__ import annotations

from urllib.parse import urlsplit


def normalize_company_url(raw_url: str) -> str:
    """Return the URL to store for a research run.

    Rules:
    - Trim surrounding whitespace.
    - Prepend ``https://`` when no http/https scheme is present.
    - Otherwise keep the input unchanged.

    Raises ``ValueError("empty_url")`` for blank input and
    ``ValueError("invalid_host")`` when no host can be parsed.
    """
    if raw_url is None or not raw_url.strip():
        raise ValueError("empty_url")

    url_text = raw_url.strip()
    if not url_text.lower().startswith(("http://", "https://")):
        url_text = f"https://{url_text}"

    try:
        host = urlsplit(url_text).hostname
    except ValueError as exc:
        raise ValueError("invalid_host") from exc
    if not host:
        raise ValueError("invalid_host")
    return url_text


def extract_domain(url: str) -> str:
    """Bare host for display: no scheme, no port, no leading ``www.``. Empty when unparseable."""
    url_text = url.strip()
    if "://" not in url_text:
        url_text = f"https://{url_text}"

    try:
        host = (urlsplit(url_text).hostname or "").lower()
    except ValueError:
        return ""
    if host.startswith("www."):
        host = host[4:]
    return host


def fallback_company_name(url: str) -> str:
    """Display name derived from the domain's first label, e.g. ``notion.so`` -> ``Notion``."""
    domain = extract_domain(url)
    label = domain.split(".")[0] if domain else ""
    if not label:
        return url.strip()
    return label[:1].upper() + label[1:]
