"""Registry of comic sources.

Built-in sources cover the strips the downloader has always supported. Extra
sources (or overrides) come from the `sources` section of the config file and
are validated here so a typo fails at startup instead of inside a worker.
"""
import logging
from typing import Dict, Optional

from comics_lib.errors import ConfigError
from comics_lib.models import Source
from comics_lib.parse import EXTRACTOR_TYPES, build_extractor

DATE_STYLES = ('slash', 'hyphen')

# Marker sets for the built-in sources. Adding a source means adding an entry
# here or in comics_config.json; nothing else needs to change.
DEFAULT_SOURCES = {
    'calvin': {
        'url': 'http://www.gocomics.com/calvinandhobbes/{date}',
        'date_style': 'slash',
        'extractor': 'markup',
        'container_class': 'feature',
        'alt': 'Calvin and Hobbes',
    },
    'dilbert': {
        'url': 'http://dilbert.com/strip/{date}',
        'date_style': 'hyphen',
        'extractor': 'markup',
        'container_class': 'img-comic-container',
    },
    'xkcd': {
        'url': 'http://xkcd.com/info.0.json',
        'extractor': 'feed',
        'image_field': 'img',
    },
}


def build_source(comic_id: str, definition: Dict) -> Source:
    """Validate one source definition and turn it into a `Source`."""
    if not isinstance(definition, dict):
        raise ConfigError(f"Source '{comic_id}' must be an object, got {type(definition).__name__}")
    url = definition.get('url')
    if not url or not isinstance(url, str):
        raise ConfigError(f"Source '{comic_id}' has no listing 'url'")
    date_style = definition.get('date_style') or 'slash'
    if date_style not in DATE_STYLES:
        raise ConfigError(f"Source '{comic_id}' has unknown date_style {date_style!r} (expected one of {DATE_STYLES})")
    kind = definition.get('extractor') or 'markup'
    if kind not in EXTRACTOR_TYPES:
        raise ConfigError(f"Source '{comic_id}' has unknown extractor {kind!r} (expected one of {sorted(EXTRACTOR_TYPES)})")
    options = {k: v for k, v in definition.items() if k not in ('url', 'date_style', 'extractor')}
    try:
        extractor = build_extractor(kind, options)
    except ValueError as e:
        raise ConfigError(f"Source '{comic_id}': {e}")
    return Source(comic_id=comic_id, url_template=url, extractor=extractor,
                  date_style=date_style)


def load_sources(overrides: Optional[Dict] = None, logger: Optional[logging.Logger] = None) -> Dict[str, Source]:
    """Return the source registry keyed by comic id.

    `overrides` entries replace built-in definitions with the same id and add
    new ids otherwise. Keys starting with '_' are treated as comments.
    """
    definitions = dict(DEFAULT_SOURCES)
    for comic_id, definition in (overrides or {}).items():
        if str(comic_id).startswith('_'):
            continue
        key = str(comic_id).lower()
        if logger:
            action = 'Overriding' if key in definitions else 'Registering'
            logger.info(f"{action} source '{key}' from config")
        definitions[key] = definition
    return {comic_id: build_source(comic_id, d) for comic_id, d in definitions.items()}
