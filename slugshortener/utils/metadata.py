"""Best-effort destination page metadata

fetch_page_metadata() downloads a destination page and pulls out a title,
description and preview image with first-match patterns over the raw HTML.
It is not a full HTML parse: unusual markup may leave a field missing.

Any failure (network error, timeout, non-2xx status, undecodable body) yields
an empty PageMetadata. Callers must never treat that as an error.
"""

import re
import html
import logging

import requests

from slugshortener.constants import METADATA_USER_AGENT, Timeout
from slugshortener.models import PageMetadata


logger = logging.getLogger(__name__)

# Only the head of a page is needed; stop reading after this many bytes
MAX_BODY_BYTES = 512 * 1024


def _meta(attr: str, name: str) -> re.Pattern:
    return re.compile(rf'<meta\s+{attr}=(["\']){re.escape(name)}\1\s+content=(["\'])(?P<value>.*?)\2', re.IGNORECASE | re.DOTALL)


# fmt: off
TITLE_PATTERNS = (
    re.compile(r'<title[^>]*>(?P<value>[^<]+)</title>', re.IGNORECASE),
    _meta('property', 'og:title'),
    _meta('name', 'twitter:title'),
)
DESCRIPTION_PATTERNS = (
    _meta('name', 'description'),
    _meta('property', 'og:description'),
    _meta('name', 'twitter:description'),
)
IMAGE_PATTERNS = (
    _meta('property', 'og:image'),
    _meta('name', 'twitter:image'),
)
# fmt: on


def _first_match(patterns: tuple[re.Pattern, ...], body: str) -> str | None:
    for pattern in patterns:
        match = pattern.search(body)
        if match and match.group('value').strip():
            return html.unescape(match.group('value').strip())
    return None


def extract_metadata(body: str) -> PageMetadata:
    """Extract title, description and image from raw HTML."""
    return PageMetadata(
        title=_first_match(TITLE_PATTERNS, body),
        description=_first_match(DESCRIPTION_PATTERNS, body),
        image=_first_match(IMAGE_PATTERNS, body),
    )


def _read_body(response: requests.Response) -> str:
    chunks, size = [], 0
    for chunk in response.iter_content(chunk_size=16 * 1024):
        chunks.append(chunk)
        size += len(chunk)
        if size >= MAX_BODY_BYTES:
            break
    encoding = response.encoding or 'utf-8'
    return b''.join(chunks).decode(encoding, errors='replace')


def fetch_page_metadata(url: str, timeout_ms: int = Timeout.METADATA_FETCH_MS) -> PageMetadata:
    """Fetch `url` and summarize it

    Args:
        url (str):
            Destination page to summarize.
        timeout_ms (int):
            Connect and read timeout in milliseconds. Defaults to 5000.

    Returns:
        PageMetadata: extracted fields, empty on any failure.

    Example:
        >>> fetch_page_metadata('https://example.com')
        PageMetadata(title='Example Domain', description=None, image=None)
    """
    try:
        with requests.get(
            url,
            headers={'User-Agent': METADATA_USER_AGENT},
            timeout=timeout_ms / 1000,
            stream=True,
        ) as response:
            if not response.ok:
                logger.info('Metadata fetch returned non-2xx status.', extra={'url': url, 'status': response.status_code})
                return PageMetadata()
            body = _read_body(response)
    except (requests.RequestException, LookupError, UnicodeError):
        logger.info('Metadata fetch failed. Continuing without metadata.', extra={'url': url}, exc_info=True)
        return PageMetadata()

    return extract_metadata(body)
