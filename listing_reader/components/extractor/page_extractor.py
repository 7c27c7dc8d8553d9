"""
Browser-driven content extraction for listing pages.

This module provides `PageContentExtractor`, which loads an untrusted URL in
an isolated browser context of the shared rendering engine, works around the
usual obstacles (heavy assets, bot detection, consent overlays), then hands
the rendered DOM to `ExtractorManager` for the heuristic text summary.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, TYPE_CHECKING

from playwright.async_api import BrowserContext, Page, Route
from playwright.async_api import Error as PlaywrightError

from listing_reader.components.extractor.extractor_manager import ExtractorManager
from listing_reader.components.extractor.overlays import dismiss_overlay
from listing_reader.components.renderer.engine_manager import RenderEngineManager
from listing_reader.core.logger import get_logger

if TYPE_CHECKING:
    from listing_reader.core.config import ConfigurationManager

logger = get_logger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Weak signal that the listing itself has rendered.
READINESS_SELECTOR = "h1, [class*='price'], [class*='detail']"


@dataclass
class ExtractionSettings:
    """Timeouts and limits for one extraction, in milliseconds where applicable."""
    navigation_timeout_ms: int = 20000
    readiness_timeout_ms: int = 8000
    overlay_pause_ms: int = 1000
    user_agent: str = DEFAULT_USER_AGENT
    viewport_width: int = 1366
    viewport_height: int = 768
    blocked_resource_types: FrozenSet[str] = field(
        default_factory=lambda: frozenset({"image", "font", "stylesheet", "media"})
    )

    @classmethod
    def from_config(cls, config: Optional['ConfigurationManager']) -> 'ExtractionSettings':
        settings = cls()
        if not config:
            return settings
        section = config.get('components.page_extractor', {}) or {}
        for name in ("navigation_timeout_ms", "readiness_timeout_ms", "overlay_pause_ms",
                     "viewport_width", "viewport_height"):
            if section.get(name) is not None:
                setattr(settings, name, int(section[name]))
        if section.get("user_agent"):
            settings.user_agent = section["user_agent"]
        if section.get("blocked_resource_types") is not None:
            settings.blocked_resource_types = frozenset(section["blocked_resource_types"])
        return settings


class PageContentExtractor:
    """
    Extracts a bounded plain-text summary from a listing URL.

    Only a failure to obtain the rendering engine escapes `extract()`; every
    page-level problem (timeouts, navigation errors, evaluation errors)
    degrades to None.
    """
    def __init__(self, engine_manager: RenderEngineManager,
                 config: Optional['ConfigurationManager'] = None,
                 settings: Optional[ExtractionSettings] = None,
                 extractor_manager: Optional[ExtractorManager] = None):
        self.engine_manager = engine_manager
        self.settings = settings or ExtractionSettings.from_config(config)
        self.extractor_manager = extractor_manager or ExtractorManager(config=config)

    async def extract(self, url: str) -> Optional[str]:
        """
        Loads `url` and returns its text summary.

        Args:
            url (str): The listing URL. Only emptiness is checked here; anything
                       else malformed surfaces as a navigation failure.

        Returns:
            Optional[str]: The labeled text summary, or None when nothing usable was found.

        Raises:
            ValueError: If `url` is empty.
            RendererError: If the rendering engine cannot be launched.
        """
        if not url or not url.strip():
            raise ValueError("url must be a non-empty string")

        handle = await self.engine_manager.acquire()

        context: Optional[BrowserContext] = None
        try:
            context = await handle.browser.new_context(
                user_agent=self.settings.user_agent,
                viewport={"width": self.settings.viewport_width, "height": self.settings.viewport_height},
            )
            page = await context.new_page()
            await page.route("**/*", self._route_request)

            if not await self._navigate(page, url):
                return None

            await dismiss_overlay(page, pause_ms=self.settings.overlay_pause_ms)
            await self._wait_for_content(page)

            html = await page.content()
            content = self.extractor_manager.summarize(html)
            if content is None:
                logger.info(f"No usable content extracted from {url}.")
            else:
                logger.info(f"Extracted {len(content)} characters from {url}.")
            return content
        except Exception as e:
            logger.warning(f"Extraction failed for {url}: {e}", exc_info=True)
            return None
        finally:
            if context is not None:
                await self._release(context, url)

    async def _route_request(self, route: Route) -> None:
        try:
            if route.request.resource_type in self.settings.blocked_resource_types:
                await route.abort()
            else:
                await route.continue_()
        except PlaywrightError as e:
            # The page may already be closing.
            logger.debug(f"Request routing failed for {route.request.url}: {e}")

    async def _navigate(self, page: Page, url: str) -> bool:
        try:
            await page.goto(url, wait_until="networkidle", timeout=self.settings.navigation_timeout_ms)
        except PlaywrightError as e:
            logger.warning(f"Navigation to {url} failed: {e}")
            return False
        return True

    async def _wait_for_content(self, page: Page) -> None:
        try:
            await page.wait_for_selector(READINESS_SELECTOR, timeout=self.settings.readiness_timeout_ms)
        except PlaywrightError:
            logger.debug("Readiness signal not seen in time, extracting anyway.")

    async def _release(self, context: BrowserContext, url: str) -> None:
        try:
            await context.close()
        except Exception as e:
            logger.warning(f"Error closing browser context for {url}: {e}")
