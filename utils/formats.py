"""Image format detection from file signatures."""
from typing import Optional

# Checked in order; the first matching signature wins.
IMAGE_SIGNATURES = [
    (b'\x89PNG', 'png'),
    (b'\xff\xd8', 'jpg'),
    (b'GIF8', 'gif'),
    (b'BM', 'bmp'),
]

MIN_SIGNATURE_BYTES = 4


def detect_format(contents: bytes) -> Optional[str]:
    """Return the image extension for `contents`, or None when unknown.

    Only the first four bytes are inspected. Anything shorter than that is
    treated as unknown even when a two-byte signature would match.
    """
    if contents is None or len(contents) < MIN_SIGNATURE_BYTES:
        return None
    head = bytes(contents[:MIN_SIGNATURE_BYTES])
    for signature, ext in IMAGE_SIGNATURES:
        if head.startswith(signature):
            return ext
    return None
