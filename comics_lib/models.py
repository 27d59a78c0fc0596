"""Data models passed between the fetch and download stages."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Optional


@dataclass(frozen=True)
class Source:
    """A comic provider: listing URL template plus extraction rule."""

    comic_id: str
    url_template: str
    extractor: Any
    date_style: str = "slash"


@dataclass(frozen=True)
class FetchTask:
    """One requested comic for one reference date."""

    comic: str
    reference_date: date
    output_prefix: Path


@dataclass(frozen=True)
class DownloadJob:
    """Resolved strip image waiting to be downloaded."""

    comic: str
    image_url: str
    output_prefix: Path


@dataclass
class Outcome:
    """Terminal result for one FetchTask."""

    comic: str
    success: bool
    stage: Optional[str] = None
    error: Optional[str] = None
    path: Optional[Path] = None
    image_url: Optional[str] = None
