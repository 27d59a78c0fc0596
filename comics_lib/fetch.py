"""Network fetch helpers for the comics downloader."""
import logging
from contextlib import closing
from datetime import date
from typing import Optional
from urllib.parse import urljoin

import requests

from comics_lib.errors import FetchError
from comics_lib.models import Source

DEFAULT_TIMEOUT = 30.0
CHUNK_SIZE = 8192


def format_date(reference_date: date, style: str = 'slash') -> str:
    """Format a date the way listing URLs expect it: 2016/4/6 or 2016-4-6.

    Month and day are never zero padded. Unknown styles fall back to slashes.
    """
    sep = '-' if style == 'hyphen' else '/'
    return f"{reference_date.year}{sep}{reference_date.month}{sep}{reference_date.day}"


def build_listing_url(source: Source, reference_date: date) -> str:
    """Substitute the formatted reference date into the source's URL template."""
    if '{date}' not in source.url_template:
        return source.url_template
    return source.url_template.replace('{date}', format_date(reference_date, source.date_style))


def http_get(session: requests.Session, url: str, timeout: float = DEFAULT_TIMEOUT, stream: bool = False):
    """GET `url` and return the response, raising FetchError on failure."""
    try:
        response = session.get(url, timeout=timeout, stream=stream)
    except requests.RequestException as e:
        raise FetchError(f"GET {url} failed: {e}")
    try:
        response.raise_for_status()
    except requests.RequestException as e:
        response.close()
        raise FetchError(f"GET {url} returned HTTP {getattr(response, 'status_code', '?')}: {e}")
    status = getattr(response, 'status_code', 200)
    if not 200 <= status < 300:
        response.close()
        raise FetchError(f"GET {url} returned non-success HTTP {status}")
    return response


def fetch_strip_url(session: requests.Session, source: Source, reference_date: date,
                    timeout: float = DEFAULT_TIMEOUT, logger: Optional[logging.Logger] = None) -> str:
    """Resolve the strip image URL for `source` on `reference_date`.

    The listing body is streamed into the source's extractor, which may stop
    reading early. Relative image URLs are resolved against the listing URL.
    """
    listing_url = build_listing_url(source, reference_date)
    if logger:
        logger.info(f"Fetching listing for {source.comic_id}: {listing_url}")
    response = http_get(session, listing_url, timeout=timeout, stream=True)
    with closing(response):
        try:
            image_url = source.extractor.extract(response.iter_content(chunk_size=CHUNK_SIZE))
        except requests.RequestException as e:
            raise FetchError(f"Reading {listing_url} failed: {e}")
    image_url = urljoin(listing_url, image_url)
    if logger:
        logger.info(f"Resolved strip for {source.comic_id}: {image_url}")
    return image_url
