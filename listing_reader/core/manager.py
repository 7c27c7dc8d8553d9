from typing import Any, Dict, Optional, TYPE_CHECKING

from listing_reader.components.analysis.prompt_builder import PurchaseFile, build_content_blocks, build_user_message
from listing_reader.components.analysis.reasoning_client import ReasoningClient
from listing_reader.components.extractor.page_extractor import PageContentExtractor
from listing_reader.components.renderer.engine_manager import RenderEngineManager
from listing_reader.core.exceptions import InsufficientInformationError, RendererError
from listing_reader.core.logger import get_logger

if TYPE_CHECKING:
    from listing_reader.core.config import ConfigurationManager

logger = get_logger(__name__)


class AnalysisManager:
    """
    Orchestrates one purchase-file analysis: listing extraction, prompt
    construction and the call to the reasoning service.

    Extraction problems never fail the analysis; the prompt then carries the
    bare link. Only an unavailable rendering engine, or a file with nothing
    to analyze, ends the request early with `InsufficientInformationError`.
    """
    def __init__(self, config: Optional['ConfigurationManager'],
                 engine_manager: RenderEngineManager,
                 page_extractor: Optional[PageContentExtractor] = None,
                 reasoning_client: Optional[ReasoningClient] = None):
        """
        Args:
            config (Optional[ConfigurationManager]): Application configuration, passed to components.
            engine_manager (RenderEngineManager): The process-wide rendering engine owner.
            page_extractor (Optional[PageContentExtractor]): Built from `engine_manager` if None.
            reasoning_client (Optional[ReasoningClient]): Built from `config` if None.
        """
        self.config = config
        self.engine_manager = engine_manager
        self.page_extractor = page_extractor or PageContentExtractor(engine_manager, config=config)
        self.reasoning_client = reasoning_client or ReasoningClient(config=config)
        logger.info("AnalysisManager initialized.")

    async def fetch_listing_content(self, url: str) -> Optional[str]:
        """
        Extracts the listing text behind `url`.

        Raises:
            InsufficientInformationError: If the rendering engine cannot be launched.
        """
        try:
            return await self.page_extractor.extract(url.strip())
        except RendererError as e:
            logger.error(f"Rendering engine unavailable while reading {url}: {e.message}")
            raise InsufficientInformationError(f"Listing could not be read: {e.message}") from e

    async def analyze(self, purchase_file: PurchaseFile) -> Dict[str, Any]:
        """
        Runs the full analysis.

        Args:
            purchase_file (PurchaseFile): What the buyer submitted.

        Returns:
            Dict[str, Any]: The reasoning service's JSON answer.

        Raises:
            InsufficientInformationError: If there is nothing to analyze or the
                                          rendering engine is unavailable.
            ReasoningError: If the reasoning service fails.
        """
        if not purchase_file.is_sufficient():
            logger.info("Purchase file rejected: not enough material to analyze.")
            raise InsufficientInformationError()

        listing_content: Optional[str] = None
        if purchase_file.listing_url and purchase_file.listing_url.strip():
            listing_content = await self.fetch_listing_content(purchase_file.listing_url)
            logger.info(
                f"Listing {purchase_file.listing_url}: "
                f"{'content extracted' if listing_content else 'no content, sending link only'}."
            )

        user_message = build_user_message(purchase_file, listing_content)
        content_blocks = build_content_blocks(
            purchase_file, user_message, max_images=self.reasoning_client.max_images
        )
        logger.debug(f"Sending analysis request with {len(content_blocks)} content blocks.")
        return await self.reasoning_client.analyze(content_blocks)
