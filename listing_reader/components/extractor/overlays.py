"""
Best-effort dismissal of cookie and consent overlays.

The candidates are plain data: an ordered table of (selector, intent) pairs
using Playwright selector syntax. The first visible match is clicked and the
search stops; failures on one candidate never prevent trying the next.
"""
from dataclasses import dataclass
from typing import Optional, Sequence

from playwright.async_api import ElementHandle, Page

from listing_reader.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class OverlaySelector:
    selector: str
    intent: str


CONSENT_OVERLAY_SELECTORS: Sequence[OverlaySelector] = (
    # Consent management platforms with stable ids.
    OverlaySelector("#onetrust-accept-btn-handler", "onetrust accept"),
    OverlaySelector("#didomi-notice-agree-button", "didomi agree"),
    OverlaySelector("#axeptio_btn_acceptAll", "axeptio accept"),
    # Generic cookie / consent containers.
    OverlaySelector("[id*='cookie'] button[id*='accept']", "cookie accept by id"),
    OverlaySelector("[class*='cookie'] button[class*='accept']", "cookie accept by class"),
    OverlaySelector("[id*='consent'] button[id*='accept']", "consent accept by id"),
    OverlaySelector("[class*='consent'] button[class*='accept']", "consent accept by class"),
    OverlaySelector("[class*='onetrust'] button", "onetrust button"),
    # Button text, case-insensitive substring match.
    OverlaySelector("button:has-text('Tout accepter')", "accept all (fr)"),
    OverlaySelector("button:has-text('Accepter')", "accept (fr)"),
    OverlaySelector("button:has-text(\"J'accepte\")", "agree (fr)"),
    OverlaySelector("button:has-text('Accept')", "accept"),
    OverlaySelector("button:has-text('Agree')", "agree"),
)

CLICK_TIMEOUT_MS = 2000


async def _first_visible(page: Page, selector: str) -> Optional[ElementHandle]:
    # Consent controls are often duplicated (mobile and desktop) with only one shown.
    for element in await page.query_selector_all(selector):
        if await element.is_visible():
            return element
    return None


async def dismiss_overlay(page: Page,
                          selectors: Sequence[OverlaySelector] = CONSENT_OVERLAY_SELECTORS,
                          pause_ms: int = 1000) -> Optional[OverlaySelector]:
    """
    Clicks the first visible consent control and waits briefly for the overlay to close.

    Args:
        page (Page): The page to act on.
        selectors (Sequence[OverlaySelector]): Candidates, in priority order.
        pause_ms (int): Pause after a successful click.

    Returns:
        Optional[OverlaySelector]: The candidate that was clicked, or None if none matched.
    """
    for candidate in selectors:
        try:
            element = await _first_visible(page, candidate.selector)
            if element is None:
                continue
            await element.click(timeout=CLICK_TIMEOUT_MS)
        except Exception as e:
            logger.debug(f"Overlay candidate '{candidate.intent}' failed: {e}")
            continue

        logger.info(f"Dismissed overlay using '{candidate.intent}' ({candidate.selector}).")
        try:
            await page.wait_for_timeout(pause_ms)
        except Exception as e:
            logger.debug(f"Pause after overlay dismissal interrupted: {e}")
        return candidate

    logger.debug("No consent overlay found to dismiss.")
    return None
