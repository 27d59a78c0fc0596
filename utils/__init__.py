# Utilities package for comics-downloader
from .filenames import clean_comic_id, output_prefix
from .formats import detect_format, IMAGE_SIGNATURES

__all__ = ["clean_comic_id", "output_prefix", "detect_format", "IMAGE_SIGNATURES"]
