import os

# Must be set before listing_reader.core.config is first imported.
os.environ.setdefault("APP_ENV", "testing")

from unittest.mock import AsyncMock, MagicMock

import pytest


class MockConfigurationManager:
    """Dict-backed stand-in for ConfigurationManager with dot-notation `get`."""
    def __init__(self, settings=None):
        self.settings = settings if settings is not None else {}

    def get(self, key, default=None):
        try:
            value = self.settings
            for k_part in key.split('.'):
                value = value[k_part]
            return value
        except (KeyError, TypeError):
            return default


class FakeBrowser:
    """Minimal stand-in for a Playwright Browser, including the 'disconnected' event."""
    def __init__(self, context=None):
        self.connected = True
        self.handlers = {}
        self.context = context
        self.close = AsyncMock(side_effect=self._close)
        self.new_context = AsyncMock(side_effect=self._new_context)

    def is_connected(self):
        return self.connected

    def on(self, event, callback):
        self.handlers.setdefault(event, []).append(callback)

    def crash(self):
        """Simulates the process dying: flips connectivity and fires 'disconnected'."""
        self.connected = False
        for callback in self.handlers.get("disconnected", []):
            callback(self)

    async def _close(self):
        if self.connected:
            self.crash()

    async def _new_context(self, **kwargs):
        return self.context if self.context is not None else make_context(make_page())


def make_page(html="<html><body></body></html>"):
    page = MagicMock(name="page")
    page.route = AsyncMock()
    page.goto = AsyncMock()
    page.query_selector_all = AsyncMock(return_value=[])
    page.wait_for_selector = AsyncMock()
    page.wait_for_timeout = AsyncMock()
    page.content = AsyncMock(return_value=html)
    return page


def make_context(page):
    context = MagicMock(name="context")
    context.new_page = AsyncMock(return_value=page)
    context.close = AsyncMock()
    return context


def make_playwright(browsers):
    """
    Builds a fake Playwright driver whose `chromium.launch` hands out the
    given browsers (or raises the given exceptions) in order.
    """
    playwright = MagicMock(name="playwright")
    playwright.chromium.launch = AsyncMock(side_effect=list(browsers))
    playwright.stop = AsyncMock()
    return playwright


@pytest.fixture
def patch_playwright(monkeypatch):
    """
    Patches `async_playwright` in the engine manager module.

    Returns a function taking the launch results and returning the fake driver.
    """
    def _install(browsers):
        playwright = make_playwright(browsers)
        factory = MagicMock(name="async_playwright")
        factory.return_value.start = AsyncMock(return_value=playwright)
        monkeypatch.setattr(
            "listing_reader.components.renderer.engine_manager.async_playwright", factory
        )
        return playwright
    return _install


@pytest.fixture(autouse=True)
def _no_browser_env(monkeypatch):
    monkeypatch.delenv("BROWSER_EXECUTABLE_PATH", raising=False)


@pytest.fixture
def mock_config():
    """Factory for dict-backed configuration stand-ins."""
    return MockConfigurationManager


@pytest.fixture
def fake_browser():
    """Factory for FakeBrowser instances; pass `context=` to control new_context()."""
    return FakeBrowser


@pytest.fixture
def fake_page():
    return make_page


@pytest.fixture
def fake_context():
    return make_context
