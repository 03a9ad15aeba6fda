"""URL manipulation utilities."""

import re
from urllib.parse import urlparse, urlunparse

_FILE_EXTENSION_RE = re.compile(r"\.[^/]+$")


def normalize_url(url: str) -> str:
    """Normalize a URL by removing query, fragment and trailing slashes.

    Scheme and host are lowercased and an empty path becomes ``/``.
    Applying it twice gives the same result as applying it once.
    """
    parsed = urlparse(url)
    normalized = parsed._replace(
        scheme=parsed.scheme.lower(),
        netloc=parsed.netloc.lower(),
        query="",
        fragment="",
    )
    # Remove trailing slashes from path (except for root)
    path = normalized.path.rstrip("/")
    if not path and normalized.netloc:
        path = "/"
    normalized = normalized._replace(path=path)
    return urlunparse(normalized)


def is_absolute_http_url(url: str) -> bool:
    """Check that a URL has an http(s) scheme and a host."""
    if not url or any(c.isspace() for c in url.strip()):
        return False
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        return False
    return parsed.scheme.lower() in ("http", "https") and bool(hostname)


def is_same_domain(url1: str, url2: str) -> bool:
    """Check if two URLs share the same hostname."""
    parsed1 = urlparse(url1)
    parsed2 = urlparse(url2)
    return (parsed1.hostname or "") == (parsed2.hostname or "")


def exact_prefix(url: str) -> str:
    """Origin plus path of ``url`` with any trailing file extension removed.

    ``https://example.com/es/carta.html`` gives ``https://example.com/es/carta``.
    """
    parsed = urlparse(url)
    path = _FILE_EXTENSION_RE.sub("", parsed.path)
    return f"{parsed.scheme.lower()}://{parsed.netloc.lower()}{path}"


def path_segments(url: str) -> list[str]:
    """Non-empty path segments of a URL."""
    return [segment for segment in urlparse(url).path.split("/") if segment]


def first_path_segment(url: str) -> str:
    """First non-empty path segment, or ``""`` for the root."""
    segments = path_segments(url)
    return segments[0] if segments else ""


def dedupe_language_urls(urls: list[str], preferred: str = "es") -> list[str]:
    """Collapse URLs that only differ by a leading language segment.

    A two-letter first segment is taken as a language code, so
    ``/en/carta`` and ``/es/carta`` are the same page. The ``preferred``
    language wins; otherwise the first URL seen is kept.
    """
    chosen: dict[str, str] = {}
    for url in urls:
        try:
            segments = path_segments(url)
        except ValueError:
            continue
        lang = segments[0] if segments and len(segments[0]) == 2 else None
        key = "/".join(segments[1:] if lang else segments)
        if key not in chosen or lang == preferred:
            chosen[key] = url
    return list(chosen.values())
