"""Extraction sub-package: page/record → property record, per variant."""

from .fallback import FallbackExtractor
from .opengraph import OpenGraphExtractor
from .selector import EXTRACTORS, Extractor, select_for_page, select_for_record

__all__ = [
    "EXTRACTORS",
    "Extractor",
    "FallbackExtractor",
    "OpenGraphExtractor",
    "select_for_page",
    "select_for_record",
]
