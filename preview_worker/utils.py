from urllib.parse import urlparse


def is_valid_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def name_from_url(url: str) -> str:
    """Fallback display name: bare host without a leading www."""
    host = urlparse(url).hostname or url
    if host.startswith("www."):
        host = host[4:]
    return host
