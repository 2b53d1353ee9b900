from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Frame,
    JSHandle,
    Page,
    async_playwright,
)

from ..dom.playwright import PlaywrightPage
from ..errors import BrowserError
from ..fill.dispatcher import FillDispatcher, FocusTracker
from ..fill.visibility import VisibilityThresholds
from ..types import FillResponse
from .sandbox import SandboxPolicy

logger = logging.getLogger(__name__)

FOCUS_BINDING = "__autofillRecordFocus"

# composedPath()[0] reaches inputs inside open shadow roots; ev.target is retargeted to the host.
_FOCUS_OBSERVER_JS = f"""
(() => {{
    const report = (ev) => {{
        const path = typeof ev.composedPath === 'function' ? ev.composedPath() : [];
        const target = path.length > 0 ? path[0] : ev.target;
        if (target instanceof HTMLInputElement && typeof window.{FOCUS_BINDING} === 'function') {{
            window.{FOCUS_BINDING}(target);
        }}
    }};
    window.addEventListener('focus', report, {{ capture: true }});
    window.addEventListener('blur', report, {{ capture: true }});
}})();
"""


# Follows open shadow roots down to the input that actually holds focus.
_ACTIVE_INPUT_JS = """
() => {
    let active = document.activeElement;
    while (active && active.shadowRoot && active.shadowRoot.activeElement) {
        active = active.shadowRoot.activeElement;
    }
    return active instanceof HTMLInputElement ? active : null;
}
"""


class AutofillSession:
    """Playwright browser session hosting the fill dispatcher for its active page."""

    def __init__(
        self,
        sandbox: SandboxPolicy,
        headless: bool = True,
        thresholds: VisibilityThresholds | None = None,
        user_data_dir: Path | None = None,
    ) -> None:
        self._sandbox = sandbox
        self._headless = headless
        self._thresholds = thresholds
        self._user_data_dir = user_data_dir.expanduser() if user_data_dir else None
        self._playwright = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None
        self._dom_page: PlaywrightPage | None = None
        self._dispatcher: FillDispatcher | None = None

    async def __aenter__(self) -> "AutofillSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.stop()

    async def start(self) -> None:
        if self._page is not None:
            return
        playwright = await async_playwright().start()
        self._playwright = playwright

        if self._user_data_dir is not None:
            self._user_data_dir.mkdir(parents=True, exist_ok=True)
            context = await playwright.chromium.launch_persistent_context(
                str(self._user_data_dir),
                headless=self._headless,
            )
            browser = context.browser
        else:
            browser = await playwright.chromium.launch(headless=self._headless)
            context = await browser.new_context()

        await context.expose_binding(FOCUS_BINDING, self._record_focus, handle=True)
        await context.add_init_script(_FOCUS_OBSERVER_JS)
        page = context.pages[0] if context.pages else await context.new_page()

        self._browser = browser
        self._context = context
        self._watch_page(page)
        self._activate(page)
        context.on("page", self._handle_new_page)

    async def stop(self) -> None:
        if self._context is not None:
            await self._context.close()
        if self._browser is not None:
            await self._browser.close()
        if self._playwright is not None:
            await self._playwright.stop()
        self._page = None
        self._dom_page = None
        self._dispatcher = None
        self._context = None
        self._browser = None
        self._playwright = None

    @property
    def page(self) -> Page:
        if self._page is None:
            raise BrowserError("Browser not started")
        return self._page

    @property
    def dispatcher(self) -> FillDispatcher:
        if self._dispatcher is None:
            raise BrowserError("Browser not started")
        return self._dispatcher

    async def open_url(self, url: str) -> str:
        self._sandbox.validate_navigation(url)
        try:
            await self.page.goto(url, wait_until="domcontentloaded", timeout=self._sandbox.step_timeout_ms)
        except PlaywrightError as exc:
            raise BrowserError(f"Failed to open {url}: {exc}") from exc
        logger.info("Opened %s", self.page.url)
        return self.page.url

    async def focus(self, selector: str) -> None:
        """Focus ``selector`` and record it before returning.

        The page observer reports focus through a binding call that Playwright
        schedules as a separate task, which may run after the next request.
        """

        try:
            await self.page.focus(selector, timeout=self._sandbox.step_timeout_ms)
            handle = await self.page.evaluate_handle(_ACTIVE_INPUT_JS)
        except PlaywrightError as exc:
            raise BrowserError(f"Failed to focus {selector}: {exc}") from exc
        self._record_focus({"page": self.page}, handle)

    async def send(self, message: Mapping[str, Any] | str | bytes) -> FillResponse:
        return await self.dispatcher.handle(message)

    def _record_focus(self, source: dict[str, Any], handle: JSHandle) -> None:
        # The observer script only reports inputs.
        page = source.get("page")
        if page is not self._page or self._dom_page is None or self._dispatcher is None:
            return
        self._dispatcher.focus.record(self._dom_page.wrap(handle))

    def _activate(self, page: Page) -> None:
        self._page = page
        self._dom_page = PlaywrightPage(page)
        self._dispatcher = FillDispatcher(self._dom_page, FocusTracker(), self._thresholds)

    def _watch_page(self, page: Page) -> None:
        page.on("close", lambda _: self._handle_page_close(page))
        page.on("framenavigated", lambda frame: self._handle_navigation(page, frame))

    def _handle_new_page(self, page: Page) -> None:
        logger.info("New tab opened; switching fill target")
        self._watch_page(page)
        self._activate(page)

    def _handle_navigation(self, page: Page, frame: Frame) -> None:
        # Handles from the previous document are dead after a main-frame navigation.
        if page is self._page and frame is page.main_frame and self._dispatcher is not None:
            self._dispatcher.focus.clear()

    def _handle_page_close(self, page: Page) -> None:
        if self._page is not None and self._page == page:
            fallback = self._select_fallback_page()
            if fallback is not None:
                self._activate(fallback)

    def _select_fallback_page(self) -> Page | None:
        if self._context is None:
            return None
        for candidate in reversed(self._context.pages):
            if not candidate.is_closed():
                return candidate
        return None
