"""
archetypes.py
─────────────
The recurring onboarding screen shapes the runner knows how to resolve.

Each class pairs a side-effect-free detect() with a solve() that performs
the archetype's action. Selectors and markers come from the config so the
same shapes can be pointed at a different provider's markup.
"""

from typing import Optional

from utils.helpers import generate_placeholder_email
from .base import (
    StepArchetype,
    StepContext,
    StepKind,
    first_actionable,
    identity,
    is_actionable,
    is_back,
    is_fillable,
    safe_click,
)
from engines.page_driver import Element


class SkipStep(StepArchetype):
    """A visible, enabled control labelled as a way to skip the screen."""

    kind = StepKind.SKIP

    async def _find(self, ctx: StepContext) -> Optional[Element]:
        skip = ctx.config.SKIP_MARKER.lower()
        for element in await ctx.driver.query_all(ctx.config.ACTION_SELECTOR):
            name = await identity(element, ctx.config)
            if skip not in name or await is_back(element, ctx.config):
                continue
            if await is_actionable(element):
                return element
        return None

    async def detect(self, ctx: StepContext) -> bool:
        return await self._find(ctx) is not None

    async def solve(self, ctx: StepContext):
        element = await self._find(ctx)
        if element is None:
            ctx.logger.warn("⚠️  Skip control disappeared before it could be clicked")
            return
        await safe_click(ctx, element, "skip control")


class DataEntryStep(StepArchetype):
    """Numeric/text fields such as height, weight and age."""

    kind = StepKind.DATA_ENTRY

    async def _field(self, ctx: StepContext, selector: str) -> Optional[Element]:
        # Radio and checkbox inputs whose locator happens to contain a field
        # name belong to the select archetypes.
        for element in await ctx.driver.query_all(selector):
            if await is_fillable(element):
                return element
        return None

    async def detect(self, ctx: StepContext) -> bool:
        for selector, _value in ctx.config.DATA_ENTRY_FIELDS.values():
            if await self._field(ctx, selector) is not None:
                return True
        return False

    async def solve(self, ctx: StepContext):
        filled = []
        for field_name, (selector, value) in ctx.config.DATA_ENTRY_FIELDS.items():
            element = await self._field(ctx, selector)
            if element is None:
                continue
            try:
                await element.fill(value, timeout_ms=ctx.config.CLICK_TIMEOUT_MS)
            except Exception as e:
                ctx.logger.warn(f"❌ Could not fill {field_name}: {e}")
                continue
            filled.append(field_name)
            ctx.logger.info(f"⌨️  Filled {field_name} = {value}")

        ctx.logger.log_action("fields_filled", {"fields": filled})

        confirm = await ctx.driver.query(ctx.config.CTA_SELECTOR)
        if confirm is not None and await confirm.is_enabled():
            await safe_click(ctx, confirm, "confirm button")
        else:
            ctx.logger.info("⏳ Confirm button missing or disabled after filling fields")


class EmailStep(StepArchetype):
    """Single identity field asking for an email address."""

    kind = StepKind.EMAIL

    async def detect(self, ctx: StepContext) -> bool:
        return await ctx.driver.query(ctx.config.EMAIL_SELECTOR) is not None

    async def solve(self, ctx: StepContext):
        field = await ctx.driver.query(ctx.config.EMAIL_SELECTOR)
        if field is None:
            ctx.logger.warn("⚠️  Email field disappeared before it could be filled")
            return

        email = generate_placeholder_email(ctx.config.EMAIL_DOMAIN)
        try:
            await field.fill(email, timeout_ms=ctx.config.CLICK_TIMEOUT_MS)
        except Exception as e:
            ctx.logger.warn(f"❌ Could not fill email field: {e}")
            return
        ctx.logger.info(f"⌨️  Filled email = {email}")

        confirm = await ctx.driver.query(ctx.config.CTA_SELECTOR)
        if confirm is not None:
            await safe_click(ctx, confirm, "confirm button")


class MultiSelectStep(StepArchetype):
    """Checkbox-like group that needs an explicit confirm."""

    kind = StepKind.MULTI_SELECT

    async def detect(self, ctx: StepContext) -> bool:
        inputs = await ctx.driver.query_all(ctx.config.MULTI_SELECT_SELECTOR)
        if not inputs:
            return False
        return await ctx.driver.query(ctx.config.CTA_SELECTOR) is not None

    async def solve(self, ctx: StepContext):
        candidate = await first_actionable(await ctx.driver.query_all(ctx.config.MULTI_SELECT_SELECTOR))
        if candidate is None:
            ctx.logger.warn("⚠️  No actionable multi-select input")
        else:
            await safe_click(ctx, candidate, "multi-select input")

        confirm = await ctx.driver.query(ctx.config.CTA_SELECTOR)
        if confirm is None:
            ctx.logger.warn("⚠️  Confirm button disappeared after multi-select")
            return
        await safe_click(ctx, confirm, "confirm button")


class SingleSelectStep(StepArchetype):
    """Mutually exclusive inputs; picking one usually advances on its own."""

    kind = StepKind.SINGLE_SELECT

    async def detect(self, ctx: StepContext) -> bool:
        return len(await ctx.driver.query_all(ctx.config.SINGLE_SELECT_SELECTOR)) > 0

    async def solve(self, ctx: StepContext):
        candidate = await first_actionable(await ctx.driver.query_all(ctx.config.SINGLE_SELECT_SELECTOR))
        if candidate is None:
            ctx.logger.warn("⚠️  No actionable single-select input")
            return
        if not await safe_click(ctx, candidate, "single-select input"):
            return

        async def settled() -> bool:
            if await candidate.is_checked():
                return True
            confirm = await ctx.driver.query(ctx.config.CTA_SELECTOR)
            return confirm is not None and await confirm.is_enabled()

        if not await ctx.driver.wait_until(settled, ctx.config.SELECTION_TIMEOUT_MS):
            ctx.logger.warn(
                f"⏳ Selection not confirmed within {ctx.config.SELECTION_TIMEOUT_MS}ms"
            )


class OptionStep(StepArchetype):
    """Clickable option tile."""

    kind = StepKind.OPTION

    async def _find(self, ctx: StepContext) -> Optional[Element]:
        for element in await ctx.driver.query_all(ctx.config.OPTION_SELECTOR):
            if await element.is_visible() and not await is_back(element, ctx.config):
                return element
        return None

    async def detect(self, ctx: StepContext) -> bool:
        return await self._find(ctx) is not None

    async def solve(self, ctx: StepContext):
        element = await self._find(ctx)
        if element is None:
            ctx.logger.warn("⚠️  Option tile disappeared before it could be clicked")
            return
        await safe_click(ctx, element, "option tile")
        await ctx.driver.wait(ctx.config.SETTLE_MS)


class SingleButtonStep(StepArchetype):
    """Screen whose only button is the call-to-action."""

    kind = StepKind.SINGLE_BUTTON

    async def _find(self, ctx: StepContext) -> Optional[Element]:
        visible = []
        for button in await ctx.driver.query_all(ctx.config.BUTTON_SELECTOR):
            if await button.is_visible():
                visible.append(button)
        if len(visible) != 1:
            return None

        button = visible[0]
        name = await identity(button, ctx.config)
        if ctx.config.CTA_MARKER.lower() not in name or await is_back(button, ctx.config):
            return None
        if not await button.is_enabled():
            return None
        return button

    async def detect(self, ctx: StepContext) -> bool:
        return await self._find(ctx) is not None

    async def solve(self, ctx: StepContext):
        button = await self._find(ctx)
        if button is None:
            ctx.logger.warn("⚠️  Call-to-action button disappeared before it could be clicked")
            return

        url_before = ctx.driver.url
        if not await safe_click(ctx, button, "call-to-action button"):
            return

        async def navigated() -> bool:
            return ctx.driver.url != url_before

        if await ctx.driver.wait_until(navigated, ctx.config.NAVIGATION_TIMEOUT_MS):
            ctx.logger.info(f"➡️  Navigated to {ctx.driver.url}")
            return

        dom_changed = await ctx.driver.wait_for_dom_change(ctx.config.DOM_CHANGE_TIMEOUT_MS)
        ctx.logger.info(
            f"ℹ️  URL unchanged after click ({'DOM changed' if dom_changed else 'no DOM change'})"
        )


class ResultStep(StepArchetype):
    """Result/summary screen at the end of the flow."""

    kind = StepKind.RESULT

    async def detect(self, ctx: StepContext) -> bool:
        if ctx.config.RESULT_URL_MARKER.lower() not in (ctx.driver.url or "").lower():
            return False
        return not await ctx.driver.query_all(ctx.config.IDENTIFIED_INPUT_SELECTOR)

    async def solve(self, ctx: StepContext):
        for element in await ctx.driver.query_all(ctx.config.ACTION_SELECTOR):
            if await is_actionable(element) and not await is_back(element, ctx.config):
                await safe_click(ctx, element, "result screen action")
                return
        ctx.logger.info("🏁 Result screen has no action control, flow likely complete")
        ctx.state.completion_signal = "Result screen reached with no further actions"
        ctx.logger.log_action("result_without_action", {"url": ctx.driver.url})
