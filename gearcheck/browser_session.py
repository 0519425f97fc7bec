"""Owns the single shared headless Chromium used by every request."""

from __future__ import annotations

import asyncio

from playwright.async_api import (
    async_playwright,
    Browser,
    Playwright,
    Error as PlaywrightError,
)

from gearcheck.constants import SANDBOX_ARGS
from gearcheck.errors import SessionLaunchError
from utils.log_utils import tprint
from utils.settings_store import get_settings, deep_log


class BrowserSessionManager:
    """Lazily launches one browser and hands the same handle to all callers.

    Requests never share pages; each one opens its own page on the browser
    returned by :meth:`acquire`.
    """

    def __init__(self, settings: dict | None = None) -> None:
        self._settings = settings if settings is not None else get_settings()
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._launch_lock = asyncio.Lock()
        self.launch_count = 0

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def acquire(self) -> Browser:
        """Return the running browser, launching it on first use.

        Concurrent first callers wait on the same launch.
        """
        if self.is_running:
            return self._browser

        async with self._launch_lock:
            if self.is_running:
                return self._browser
            if self._browser is not None:
                tprint("[BROWSER][WARN] Browser disconnected; relaunching.")
                await self._teardown()
            await self._launch()
            return self._browser

    async def _launch(self) -> None:
        headless = self._settings.get("playwright_headless", True)
        tprint("[BROWSER] Launching headless Chromium...")
        try:
            self._playwright = await async_playwright().start()
        except Exception as exc:
            raise SessionLaunchError(f"Failed to start Playwright: {exc}") from exc

        try:
            self._browser = await self._playwright.chromium.launch(
                headless=headless,
                args=list(SANDBOX_ARGS),
            )
        except Exception as exc:
            await self._stop_playwright()
            raise SessionLaunchError(
                f"Failed to launch browser: {exc}\n"
                "If Chromium is not installed, run: playwright install chromium"
            ) from exc

        self.launch_count += 1
        tprint("[BROWSER] Chromium ready")
        deep_log(f"[DEEP][BROWSER] launch #{self.launch_count} headless={headless}")

    async def shutdown(self) -> None:
        """Close the browser and stop Playwright; no-op when never launched."""
        async with self._launch_lock:
            if self._browser is None and self._playwright is None:
                return
            tprint("[BROWSER] Shutting down browser session")
            await self._teardown()

    async def _teardown(self) -> None:
        if self._browser is not None:
            try:
                await self._browser.close()
            except PlaywrightError as exc:
                tprint(f"[BROWSER][WARN] Browser close failed: {exc}")
        self._browser = None
        await self._stop_playwright()

    async def _stop_playwright(self) -> None:
        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except PlaywrightError as exc:
                tprint(f"[BROWSER][WARN] Playwright stop failed: {exc}")
        self._playwright = None
