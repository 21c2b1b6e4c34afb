"""
PageDriver - Uniform query/click/fill/wait surface over a Playwright page.

Every Element answers visibility/enabled/checked questions. When the
underlying handle cannot answer (detached, not an input, ...) the query
returns a fixed default instead of raising: visible and enabled default to
True, checked defaults to False.
"""
import asyncio
import time
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional

from playwright.async_api import ConsoleMessage, ElementHandle, Page, Request


class Element:
    """Wraps a Playwright ElementHandle."""

    def __init__(self, handle: ElementHandle):
        self.handle = handle

    async def attribute(self, name: str) -> Optional[str]:
        try:
            return await self.handle.get_attribute(name)
        except Exception:
            return None

    async def text(self) -> str:
        try:
            return (await self.handle.inner_text()).strip()
        except Exception:
            return ""

    async def tag(self) -> str:
        try:
            return await self.handle.evaluate("el => el.tagName.toLowerCase()")
        except Exception:
            return ""

    async def is_visible(self) -> bool:
        try:
            return await self.handle.is_visible()
        except Exception:
            return True

    async def is_enabled(self) -> bool:
        try:
            return await self.handle.is_enabled()
        except Exception:
            return True

    async def is_checked(self) -> bool:
        try:
            return await self.handle.is_checked()
        except Exception:
            return False

    async def click(self, timeout_ms: int = 5000):
        await self.handle.scroll_into_view_if_needed(timeout=timeout_ms)
        await self.handle.click(timeout=timeout_ms)

    async def fill(self, value: str, timeout_ms: int = 5000):
        await self.handle.fill(value, timeout=timeout_ms)

    async def describe(self, locator_attribute: str = "data-locator") -> Dict:
        """Snapshot used by the no-match diagnostic pass."""
        return {
            "tag": await self.tag(),
            "locator": await self.attribute(locator_attribute),
            "text": (await self.text())[:60],
            "enabled": await self.is_enabled(),
        }


class PageDriver:
    """
    The page capability set consumed by the step loop and the flag gate.
    """

    def __init__(self, page: Page, dom_poll_ms: int = 1000):
        self.page = page
        self.dom_poll_ms = dom_poll_ms

    @property
    def url(self) -> str:
        return self.page.url

    async def navigate(self, url: str, timeout_ms: int = 30000):
        await self.page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)

    async def query(self, selector: str) -> Optional[Element]:
        handle = await self.page.query_selector(selector)
        return Element(handle) if handle else None

    async def query_all(self, selector: str) -> List[Element]:
        handles = await self.page.query_selector_all(selector)
        return [Element(h) for h in handles]

    async def wait(self, ms: int):
        await asyncio.sleep(ms / 1000)

    async def wait_until(
        self,
        predicate: Callable[[], Awaitable[bool]],
        timeout_ms: int,
        poll_ms: int = 250,
    ) -> bool:
        """
        Poll an async predicate until it holds or the timeout elapses.

        Returns:
            True if the predicate held, False on timeout. Never raises for
            predicate errors; they count as "not yet".
        """
        deadline = time.monotonic() + timeout_ms / 1000
        while True:
            try:
                if await predicate():
                    return True
            except Exception:
                pass
            if time.monotonic() >= deadline:
                return False
            await asyncio.sleep(poll_ms / 1000)

    async def content(self) -> str:
        try:
            return await self.page.content()
        except Exception:
            return ""

    async def wait_for_dom_change(self, timeout_ms: int) -> bool:
        """Compare serialized DOM snapshots at a fixed interval until one differs."""
        initial = await self.content()

        async def changed() -> bool:
            return await self.content() != initial

        return await self.wait_until(changed, timeout_ms, poll_ms=self.dom_poll_ms)

    async def body_text(self) -> str:
        try:
            return await self.page.inner_text("body")
        except Exception:
            return ""

    async def screenshot(self, path: Path):
        await self.page.screenshot(path=str(path), full_page=True)

    def on_request(self, callback: Callable[[Request], None]):
        self.page.on("request", callback)

    def off_request(self, callback: Callable[[Request], None]):
        self.page.remove_listener("request", callback)

    def on_console(self, callback: Callable[[ConsoleMessage], None]):
        self.page.on("console", callback)
