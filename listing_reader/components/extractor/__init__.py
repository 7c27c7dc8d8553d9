"""
Extractor component for the Listing Reader.

This sub-package turns a listing URL into a bounded plain-text summary:
browser-side page handling (`PageContentExtractor`, overlay dismissal) and
the browser-free heuristics over the rendered DOM (`BasicParser`, the
extraction rules and `ExtractorManager`).
"""
from .basic_parser import BasicParser
from .extractor_manager import ExtractorManager
from .page_extractor import ExtractionSettings, PageContentExtractor
from .rules import DEFAULT_RULES, Fragment

__all__ = [
    "BasicParser",
    "ExtractorManager",
    "ExtractionSettings",
    "PageContentExtractor",
    "DEFAULT_RULES",
    "Fragment",
]
