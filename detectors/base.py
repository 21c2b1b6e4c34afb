from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from core.logger import RunLogger
from core.progress_tracker import RunState
from engines.page_driver import Element, PageDriver


class StepKind(Enum):
    SKIP = "skip"
    DATA_ENTRY = "data_entry"
    EMAIL = "email"
    MULTI_SELECT = "multi_select"
    SINGLE_SELECT = "single_select"
    OPTION = "option"
    SINGLE_BUTTON = "single_button"
    RESULT = "result"


@dataclass
class StepContext:
    """Everything a detector or resolver may touch during one iteration."""
    driver: PageDriver
    config: object
    logger: RunLogger
    state: RunState

    async def capture(self, label: str) -> Optional[str]:
        """Full-page diagnostic screenshot. Failures are logged, never raised."""
        path = self.logger.screenshot_path(self.state.next_screenshot(), label)
        try:
            await self.driver.screenshot(path)
        except Exception as e:
            self.logger.warn(f"📸 Screenshot '{label}' failed: {e}")
            return None
        self.logger.debug(f"📸 Screenshot saved: {path}")
        return str(path)


class StepArchetype:
    """
    One recurring onboarding screen shape.

    detect() must not mutate the page and reports lookup failures as False.
    solve() re-queries the page and tolerates elements that vanished since
    detect() ran.
    """

    kind: StepKind

    @property
    def name(self) -> str:
        return self.kind.value

    async def detect(self, ctx: StepContext) -> bool:
        raise NotImplementedError

    async def solve(self, ctx: StepContext):
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


async def identity(element: Element, config) -> str:
    """Lower-cased text that names a control: locator attribute, id, name, aria-label, label."""
    parts = [
        await element.attribute(config.LOCATOR_ATTRIBUTE),
        await element.attribute("id"),
        await element.attribute("name"),
        await element.attribute("aria-label"),
        await element.text(),
    ]
    return " ".join(p for p in parts if p).lower()


async def is_back(element: Element, config) -> bool:
    """Back controls are named by their locator or aria-label; visible text is ignored."""
    marker = config.BACK_MARKER.lower()
    for name in ("id", config.LOCATOR_ATTRIBUTE, "aria-label"):
        value = await element.attribute(name)
        if value and marker in value.lower():
            return True
    return False


NON_TEXT_INPUT_TYPES = ("radio", "checkbox", "hidden", "submit", "button", "image", "reset", "file")


async def is_fillable(element: Element) -> bool:
    """A visible input that accepts typed text."""
    input_type = (await element.attribute("type") or "text").lower()
    if input_type in NON_TEXT_INPUT_TYPES:
        return False
    return await element.is_visible()


async def is_actionable(element: Element) -> bool:
    return await element.is_visible() and await element.is_enabled()


async def first_actionable(elements: List[Element]) -> Optional[Element]:
    for element in elements:
        if await is_actionable(element):
            return element
    return None


async def safe_click(ctx: StepContext, element: Element, label: str) -> bool:
    """Click, logging a failure instead of raising it."""
    try:
        await element.click(timeout_ms=ctx.config.CLICK_TIMEOUT_MS)
    except Exception as e:
        ctx.logger.warn(f"❌ Click on {label} failed: {e}")
        return False
    ctx.logger.info(f"🖱️  Clicked {label}")
    return True
