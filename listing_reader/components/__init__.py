"""
Components sub-package for the Listing Reader.

Rendering engine ownership, listing content extraction and the analysis
(prompt + reasoning service) components.

The `__all__` variable defines the public API of this sub-package,
making key components directly importable from `listing_reader.components`.
"""

from .renderer.engine_manager import RenderEngineManager
from .extractor.page_extractor import PageContentExtractor
from .extractor.extractor_manager import ExtractorManager
from .analysis.reasoning_client import ReasoningClient

__all__ = [
    "RenderEngineManager",
    "PageContentExtractor",
    "ExtractorManager",
    "ReasoningClient",
]
