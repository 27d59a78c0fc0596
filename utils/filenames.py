import re
from datetime import date
from pathlib import Path


def clean_comic_id(comic: str) -> str:
    """Normalize a comic identifier typed on the command line.

    Lowercases and trims the value so `-c Calvin` and `-c calvin ` select the
    same source.
    """
    return re.sub(r'\s+', '', str(comic)).lower()


def output_prefix(directory: Path, comic: str, reference_date: date) -> Path:
    """Build the extension-less output path for one comic.

    Names follow `<comic>-<YYYY-MM-DD>`; the downloader appends the extension
    once the image format is known. Distinct comic ids always yield distinct
    prefixes inside the same directory.
    """
    safe = re.sub(r'[^A-Za-z0-9_.-]+', '_', comic).strip('._') or 'comic'
    return Path(directory) / f"{safe}-{reference_date.isoformat()}"
