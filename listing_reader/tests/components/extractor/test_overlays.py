from unittest.mock import AsyncMock, MagicMock

import pytest

from listing_reader.components.extractor.overlays import (
    CLICK_TIMEOUT_MS,
    CONSENT_OVERLAY_SELECTORS,
    OverlaySelector,
    dismiss_overlay,
)

CANDIDATES = (
    OverlaySelector("#first", "first"),
    OverlaySelector("#second", "second"),
    OverlaySelector("#third", "third"),
)


def make_element(visible=True, click_error=None):
    element = MagicMock()
    element.is_visible = AsyncMock(return_value=visible)
    element.click = AsyncMock(side_effect=click_error)
    return element


def page_with(matches, fake_page):
    """A page whose query_selector_all answers from a selector -> [elements] mapping."""
    page = fake_page()

    async def query_selector_all(selector):
        return matches.get(selector, [])

    page.query_selector_all = AsyncMock(side_effect=query_selector_all)
    return page


def test_default_selectors_cover_french_and_english_buttons():
    selectors = [candidate.selector for candidate in CONSENT_OVERLAY_SELECTORS]
    assert "button:has-text('Tout accepter')" in selectors
    assert "button:has-text('Accept')" in selectors
    assert selectors.index("#onetrust-accept-btn-handler") < selectors.index("button:has-text('Accept')")


@pytest.mark.asyncio
async def test_dismiss_overlay_clicks_first_visible_match_only(fake_page):
    first, second = make_element(visible=False), make_element()
    third = make_element()
    page = page_with({"#first": [first], "#second": [second], "#third": [third]}, fake_page)

    clicked = await dismiss_overlay(page, CANDIDATES, pause_ms=250)

    assert clicked == CANDIDATES[1]
    first.click.assert_not_awaited()
    second.click.assert_awaited_once_with(timeout=CLICK_TIMEOUT_MS)
    third.click.assert_not_awaited()
    page.wait_for_timeout.assert_awaited_once_with(250)


@pytest.mark.asyncio
async def test_dismiss_overlay_skips_hidden_duplicate_of_same_selector(fake_page):
    """A hidden first match (e.g. the mobile copy) does not hide a visible later one."""
    hidden, visible = make_element(visible=False), make_element()
    page = page_with({"#first": [hidden, visible]}, fake_page)

    clicked = await dismiss_overlay(page, CANDIDATES, pause_ms=0)

    assert clicked == CANDIDATES[0]
    hidden.click.assert_not_awaited()
    visible.click.assert_awaited_once_with(timeout=CLICK_TIMEOUT_MS)


@pytest.mark.asyncio
async def test_dismiss_overlay_moves_on_after_click_failure(fake_page):
    failing = make_element(click_error=Exception("Element is not attached to the DOM"))
    working = make_element()
    page = page_with({"#first": [failing], "#third": [working]}, fake_page)

    clicked = await dismiss_overlay(page, CANDIDATES, pause_ms=0)

    assert clicked == CANDIDATES[2]
    working.click.assert_awaited_once()


@pytest.mark.asyncio
async def test_dismiss_overlay_moves_on_after_query_failure(fake_page):
    working = make_element()
    page = fake_page()

    async def query_selector_all(selector):
        if selector == "#first":
            raise Exception("Unsupported selector")
        return [working] if selector == "#second" else []

    page.query_selector_all = AsyncMock(side_effect=query_selector_all)

    assert await dismiss_overlay(page, CANDIDATES) == CANDIDATES[1]


@pytest.mark.asyncio
async def test_dismiss_overlay_no_match(fake_page):
    page = page_with({}, fake_page)

    assert await dismiss_overlay(page, CANDIDATES) is None
    assert page.query_selector_all.await_count == len(CANDIDATES)
    page.wait_for_timeout.assert_not_awaited()


@pytest.mark.asyncio
async def test_dismiss_overlay_pause_failure_still_reports_click(fake_page):
    page = page_with({"#first": [make_element()]}, fake_page)
    page.wait_for_timeout.side_effect = Exception("Target page has been closed")

    assert await dismiss_overlay(page, CANDIDATES) == CANDIDATES[0]
