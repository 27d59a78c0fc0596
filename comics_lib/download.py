"""Strip downloading and persistence."""
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

import requests

from comics_lib.config import DEFAULT_FILE_MODE
from comics_lib.errors import FetchError, UnknownFormat, WriteError
from comics_lib.fetch import DEFAULT_TIMEOUT, http_get
from utils.formats import detect_format


def write_strip(contents: bytes, output_prefix: Path, file_mode: int = DEFAULT_FILE_MODE) -> Path:
    """Write `contents` to `<output_prefix>.<ext>`, overwriting any earlier copy."""
    ext = detect_format(contents)
    if not ext:
        raise UnknownFormat(f"Unrecognised image signature {bytes(contents[:4])!r} ({len(contents)} bytes)")
    filepath = Path(f"{output_prefix}.{ext}")
    tmp_path = None
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        # Partial writes stay in the .part file; the target only ever holds a complete strip
        fd, tmp_path = tempfile.mkstemp(prefix=f".{filepath.name}.", suffix=".part", dir=str(filepath.parent))
        with os.fdopen(fd, "wb") as f:
            os.chmod(tmp_path, file_mode)
            f.write(contents)
        os.replace(tmp_path, filepath)
        tmp_path = None
    except OSError as e:
        raise WriteError(f"Unable to write {filepath}: {e}")
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
    return filepath


def download_strip(session: requests.Session, image_url: str, output_prefix: Path,
                   timeout: float = DEFAULT_TIMEOUT, file_mode: int = DEFAULT_FILE_MODE,
                   logger: Optional[logging.Logger] = None) -> Path:
    """Download `image_url` and store it next to `output_prefix`.

    Returns the path written. The extension comes from the image signature,
    never from the URL or Content-Type.
    """
    if logger:
        logger.info(f"Downloading {image_url} -> {output_prefix}.*")
    response = http_get(session, image_url, timeout=timeout)
    try:
        contents = response.content
    except requests.RequestException as e:
        raise FetchError(f"Reading {image_url} failed: {e}")
    finally:
        response.close()
    filepath = write_strip(contents, output_prefix, file_mode=file_mode)
    if logger:
        logger.info(f"Saved {filepath} ({len(contents)} bytes)")
    return filepath
