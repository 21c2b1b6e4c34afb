"""
StepClassifier - Matches the current screen against the archetype registry
and dispatches the first match to its resolver.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from detectors.base import StepArchetype, StepContext
from detectors.registry import StepRegistry


@dataclass
class ClassificationResult:
    """Outcome of one classifier pass."""
    matched: Optional[str] = None
    controls: List[Dict] = field(default_factory=list)  # diagnostic pass only

    @property
    def progressed(self) -> bool:
        return self.matched is not None


class StepClassifier:
    """
    Scans the registry in order; at most one archetype resolves per pass.
    """

    def __init__(self, registry: StepRegistry):
        self.registry = registry

    async def _detect(self, archetype: StepArchetype, ctx: StepContext) -> bool:
        """
        Run one detector under the configured timeout.

        Lookup errors and timeouts both mean "not matched".
        """
        try:
            return bool(await asyncio.wait_for(
                archetype.detect(ctx),
                timeout=ctx.config.DETECT_TIMEOUT_MS / 1000,
            ))
        except asyncio.TimeoutError:
            ctx.logger.debug(f"⏱️  Detector '{archetype.name}' timed out")
            return False
        except Exception as e:
            ctx.logger.debug(f"Detector '{archetype.name}' failed: {e}")
            return False

    async def classify(self, ctx: StepContext) -> Optional[StepArchetype]:
        for archetype in self.registry:
            if await self._detect(archetype, ctx):
                return archetype
        return None

    async def step(self, ctx: StepContext) -> ClassificationResult:
        """
        Classify the current screen and resolve it.

        Exceptions raised by a resolver propagate to the caller, which counts
        them as a retry.
        """
        archetype = await self.classify(ctx)

        if archetype is None:
            controls = await self.describe_controls(ctx)
            ctx.logger.info(f"🔍 No known step type detected ({len(controls)} visible controls)")
            for control in controls:
                ctx.logger.debug(f"   - {control}")
            ctx.logger.log_action("no_match", {
                "iteration": ctx.state.iterations,
                "url": ctx.driver.url,
                "controls": controls,
            })
            return ClassificationResult(matched=None, controls=controls)

        ctx.logger.info(f"🎯 Step {ctx.state.iterations}: detected '{archetype.name}'")
        ctx.logger.log_action("detect_match", {
            "iteration": ctx.state.iterations,
            "archetype": archetype.name,
            "url": ctx.driver.url,
        })

        await archetype.solve(ctx)

        ctx.logger.log_action("step_resolved", {
            "iteration": ctx.state.iterations,
            "archetype": archetype.name,
            "url": ctx.driver.url,
        })
        return ClassificationResult(matched=archetype.name)

    async def describe_controls(self, ctx: StepContext) -> List[Dict]:
        """Enumerate visible interactive controls for the log. Has no decision effect."""
        controls = []
        try:
            elements = await ctx.driver.query_all(ctx.config.INTERACTIVE_SELECTOR)
        except Exception as e:
            ctx.logger.debug(f"Could not enumerate controls: {e}")
            return controls

        for element in elements:
            try:
                if not await element.is_visible():
                    continue
                controls.append(await element.describe(ctx.config.LOCATOR_ATTRIBUTE))
            except Exception:
                continue
        return controls
