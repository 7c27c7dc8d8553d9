"""
Manages the long-lived Chromium process used for page rendering.

This module provides the `RenderEngineManager` class, which owns a single
Playwright-driven browser for the whole process. The browser is launched on
first use, shared by every extraction call, and transparently relaunched on
the next `acquire()` after it disconnects (crash, kill, or explicit close).
"""
import asyncio
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from playwright.async_api import async_playwright, Playwright, Browser

from listing_reader.core.exceptions import RendererError
from listing_reader.core.logger import get_logger

if TYPE_CHECKING:
    from listing_reader.core.config import ConfigurationManager

logger = get_logger(__name__)

EXECUTABLE_PATH_ENV_VAR = "BROWSER_EXECUTABLE_PATH"


class EngineState(str, Enum):
    """Lifecycle states of the rendering engine."""
    UNSTARTED = "unstarted"
    STARTING = "starting"
    READY = "ready"
    FAILED = "failed"
    DISCONNECTED = "disconnected"


@dataclass
class EngineHandle:
    """
    Opaque handle to a running browser process.

    A handle is invalidated once the browser reports a disconnection and is
    never handed out again after that.
    """
    browser: Browser
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    invalidated: bool = False

    @property
    def connected(self) -> bool:
        return not self.invalidated and self.browser.is_connected()


def resolve_executable_path(configured: Optional[str], fallback: Optional[str]) -> Optional[str]:
    """
    Picks the browser binary to launch.

    Precedence: the `BROWSER_EXECUTABLE_PATH` environment variable, the
    configured path, then the conventional install location if it exists.
    Returns None to let Playwright use its bundled Chromium.
    """
    override = os.getenv(EXECUTABLE_PATH_ENV_VAR) or configured
    if override:
        return override
    if fallback and os.path.exists(fallback):
        return fallback
    return None


class RenderEngineManager:
    """
    Owner of the process-wide rendering engine.

    Launches are single-flight: callers racing while no live browser exists
    wait on the same launch instead of starting several processes.

    Attributes:
        state (EngineState): Current lifecycle state.
        launch_count (int): Number of successful browser launches so far.
    """
    DEFAULT_FALLBACK_EXECUTABLE_PATH = "/usr/bin/chromium"
    DEFAULT_LAUNCH_ARGS: List[str] = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-gpu",
        "--disable-extensions",
        "--single-process",
        "--no-zygote",
        "--disable-background-networking",
    ]

    def __init__(self, config: Optional['ConfigurationManager'] = None):
        """
        Initializes the RenderEngineManager without launching anything.

        Args:
            config (Optional[ConfigurationManager]): Source of the
                `components.render_engine.*` settings. Defaults are used when None.
        """
        settings: Dict[str, Any] = {}
        if config:
            settings = config.get('components.render_engine', {}) or {}

        self.headless: bool = settings.get('headless', True)
        self.launch_args: List[str] = list(settings.get('launch_args') or self.DEFAULT_LAUNCH_ARGS)
        self.executable_path = resolve_executable_path(
            settings.get('executable_path'),
            settings.get('fallback_executable_path', self.DEFAULT_FALLBACK_EXECUTABLE_PATH),
        )

        self.state = EngineState.UNSTARTED
        self.launch_count = 0
        self._playwright: Optional[Playwright] = None
        self._handle: Optional[EngineHandle] = None
        self._launch_lock = asyncio.Lock()

        logger.info(
            f"RenderEngineManager configured (headless={self.headless}, "
            f"executable={self.executable_path or 'playwright bundled chromium'})."
        )

    @property
    def is_connected(self) -> bool:
        return self._handle is not None and self._handle.connected

    @property
    def status(self) -> str:
        """Connectivity as reported by the health endpoint."""
        return "connected" if self.is_connected else "disconnected"

    async def acquire(self) -> EngineHandle:
        """
        Returns the live engine handle, launching the browser if needed.

        Returns:
            EngineHandle: A connected handle.

        Raises:
            RendererError: If the browser cannot be launched. Nothing is retried;
                           the next call attempts a fresh launch.
        """
        handle = self._handle
        if handle is not None and handle.connected:
            return handle

        async with self._launch_lock:
            # Another caller may have finished a launch while this one waited.
            handle = self._handle
            if handle is not None and handle.connected:
                return handle
            if handle is not None:
                logger.warning("Stored browser handle is no longer connected; relaunching.")
                self._handle = None

            self.state = EngineState.STARTING
            try:
                handle = await self._launch()
            except Exception as e:
                self.state = EngineState.FAILED
                logger.error(f"Failed to launch rendering engine: {e}", exc_info=True)
                raise RendererError(f"Failed to launch rendering engine: {e}") from e

            self._handle = handle
            self.state = EngineState.READY
            return handle

    async def warm_up(self) -> bool:
        """
        Attempts an eager launch at startup. Failure is logged, not raised;
        the first real extraction will try again.

        Returns:
            bool: True if the engine is connected afterwards.
        """
        try:
            await self.acquire()
        except RendererError as e:
            logger.warning(f"Rendering engine not available at startup, will retry lazily: {e.message}")
            return False
        return True

    async def shutdown(self) -> None:
        """
        Best-effort close of the browser and the Playwright driver.
        Safe to call repeatedly and never raises.
        """
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.invalidated = True
            try:
                await handle.browser.close()
                logger.info("Rendering engine closed.")
            except Exception as e:
                logger.debug(f"Ignoring error while closing browser (already closed?): {e}")
        await self._stop_driver()
        self.state = EngineState.UNSTARTED

    async def _launch(self) -> EngineHandle:
        if self._playwright is None:
            self._playwright = await async_playwright().start()

        launch_options: Dict[str, Any] = {"headless": self.headless, "args": self.launch_args}
        if self.executable_path:
            launch_options["executable_path"] = self.executable_path

        logger.info("Launching rendering engine.")
        try:
            browser = await self._playwright.chromium.launch(**launch_options)
        except Exception:
            # Do not keep a driver around for a browser that never started.
            await self._stop_driver()
            raise

        handle = EngineHandle(browser=browser)
        browser.on("disconnected", lambda _browser: self._on_disconnected(handle))
        self.launch_count += 1
        logger.info(f"Rendering engine launched (launch #{self.launch_count}).")
        return handle

    def _on_disconnected(self, handle: EngineHandle) -> None:
        handle.invalidated = True
        if self._handle is handle:
            self._handle = None
            self.state = EngineState.DISCONNECTED
            logger.warning("Rendering engine disconnected; it will be relaunched on next use.")

    async def _stop_driver(self) -> None:
        playwright, self._playwright = self._playwright, None
        if playwright is None:
            return
        try:
            await playwright.stop()
        except Exception as e:
            logger.debug(f"Ignoring error while stopping Playwright: {e}")
