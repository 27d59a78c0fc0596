"""Strip locating helpers for the comics downloader.

Each source resolves its listing response to a single image URL through an
extractor. Markup pages are tokenised incrementally and parsing stops at the
first qualifying image; JSON feeds are decoded as one record.
"""
import json
from typing import Dict, Iterable, Optional, Union

from lxml import etree

from comics_lib.errors import MalformedFeed, NotFound

Chunks = Iterable[Union[bytes, str]]


def _chunks(body: Union[bytes, str, Chunks]) -> Chunks:
    if isinstance(body, (bytes, str)):
        return [body]
    return body


class MarkupExtractor:
    """Locate a strip image inside an HTML page.

    A container element (tag + class marker) switches the extractor on; the
    first `img` seen after it with a `src` (and, when configured, the expected
    `alt` text) is returned without reading the rest of the document.
    """

    kind = 'markup'

    def __init__(self, container_class: str, alt: Optional[str] = None, container_tag: str = 'div'):
        if not container_class:
            raise ValueError('container_class is required for markup extraction')
        self.container_class = container_class
        self.alt = alt
        self.container_tag = container_tag.lower()

    def __repr__(self):
        return f"MarkupExtractor(container_class={self.container_class!r}, alt={self.alt!r})"

    def _is_container(self, element) -> bool:
        if not isinstance(element.tag, str) or element.tag.lower() != self.container_tag:
            return False
        classes = (element.get('class') or '').split()
        return self.container_class in classes

    def _image_src(self, element) -> Optional[str]:
        if not isinstance(element.tag, str) or element.tag.lower() != 'img':
            return None
        if self.alt is not None and element.get('alt') != self.alt:
            return None
        src = (element.get('src') or '').strip()
        return src or None

    def extract(self, body: Union[bytes, str, Chunks]) -> str:
        parser = etree.HTMLPullParser(events=('start',))
        inside = False

        def scan() -> Optional[str]:
            nonlocal inside
            for _event, element in parser.read_events():
                if not inside:
                    inside = self._is_container(element)
                    continue
                src = self._image_src(element)
                if src:
                    return src
            return None

        try:
            for chunk in _chunks(body):
                if not chunk:
                    continue
                parser.feed(chunk)
                found = scan()
                if found:
                    return found
            parser.close()
            found = scan()
        except etree.LxmlError as e:
            raise NotFound(f"Markup could not be parsed before the strip was found: {e}")
        if found:
            return found
        raise NotFound(f"No image found inside a '{self.container_class}' container")


class FeedExtractor:
    """Read the strip URL from a JSON record."""

    kind = 'feed'

    def __init__(self, image_field: str = 'img'):
        self.image_field = image_field

    def __repr__(self):
        return f"FeedExtractor(image_field={self.image_field!r})"

    def extract(self, body: Union[bytes, str, Chunks]) -> str:
        parts = list(_chunks(body))
        raw = b''.join(p.encode('utf-8') if isinstance(p, str) else p for p in parts)
        try:
            record = json.loads(raw.decode('utf-8'))
        except (UnicodeDecodeError, ValueError) as e:
            raise MalformedFeed(f"Feed is not valid JSON: {e}")
        if not isinstance(record, dict):
            raise MalformedFeed(f"Feed is a {type(record).__name__}, expected an object")
        value = record.get(self.image_field)
        if not isinstance(value, str) or not value.strip():
            raise MalformedFeed(f"Feed has no '{self.image_field}' field")
        return value.strip()


EXTRACTOR_TYPES = {
    MarkupExtractor.kind: MarkupExtractor,
    FeedExtractor.kind: FeedExtractor,
}


def build_extractor(kind: str, options: Dict):
    """Instantiate an extractor of `kind` from a source's marker options."""
    if kind == MarkupExtractor.kind:
        return MarkupExtractor(
            container_class=options.get('container_class'),
            alt=options.get('alt'),
            container_tag=options.get('container_tag') or 'div',
        )
    if kind == FeedExtractor.kind:
        return FeedExtractor(image_field=options.get('image_field') or 'img')
    raise ValueError(f"Unknown extractor kind: {kind!r} (expected one of {sorted(EXTRACTOR_TYPES)})")
