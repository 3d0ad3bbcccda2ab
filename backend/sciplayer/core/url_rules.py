"""Playlist URL rule: a pure check used at the request boundary.

The store never re-validates URLs; well-formedness is decided here once.
"""

from urllib.parse import urlsplit


def is_absolute_url(raw: str) -> bool:
    """True when raw parses and carries both a scheme and a host.

    A port, when present, must be numeric and in range.
    """
    try:
        parsed = urlsplit(raw)
        parsed.port
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)
