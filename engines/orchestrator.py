"""
Orchestrator - Main control loop of the onboarding runner.
Classifies each screen, resolves it, and lets the progress tracker decide
when the run is complete or has to be abandoned.
"""
import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from rich.console import Console
from rich.panel import Panel

from core.logger import RunLogger
from core.progress_tracker import ProgressTracker, RunPhase, RunState
from detectors.base import StepContext
from detectors.registry import StepRegistry, build_default_registry
from engines.classifier import StepClassifier
from engines.page_driver import PageDriver
from utils.helpers import format_step_history

console = Console()


@dataclass
class RunReport:
    outcome: RunPhase
    reason: str
    iterations: int
    retry_count: int
    steps: List[str] = field(default_factory=list)
    started_at: str = ""
    finished_at: str = ""

    @property
    def success(self) -> bool:
        return self.outcome == RunPhase.COMPLETE

    def to_dict(self) -> Dict:
        return {
            "outcome": self.outcome.value,
            "reason": self.reason,
            "iterations": self.iterations,
            "retry_count": self.retry_count,
            "steps": list(self.steps),
            "started_at": self.started_at,
            "finished_at": self.finished_at,
        }


class OnboardingOrchestrator:
    """
    The main controller that runs the step loop.
    Coordinates the page driver, the classifier and the progress tracker.
    """

    def __init__(
        self,
        driver: PageDriver,
        config,
        logger: RunLogger,
        registry: Optional[StepRegistry] = None,
        tracker: Optional[ProgressTracker] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            driver: Page driver for the live onboarding page
            config: Configuration object (see config.Config)
            logger: Run logger
            registry: Archetype registry, defaults to the built-in one
            tracker: Progress tracker, defaults to one built from config
        """
        self.driver = driver
        self.config = config
        self.logger = logger
        self.classifier = StepClassifier(registry or build_default_registry())
        self.tracker = tracker or ProgressTracker.from_config(config)

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> RunReport:
        """
        Run the step loop until it completes or aborts.

        Args:
            stop_event: Optional external cancellation signal, checked once per iteration

        Returns:
            RunReport describing the outcome
        """
        started_at = datetime.now().isoformat()
        state = self.tracker.start(self.driver.url)
        ctx = StepContext(driver=self.driver, config=self.config, logger=self.logger, state=state)

        deadline = None
        if self.config.RUN_DEADLINE_SECONDS:
            deadline = time.monotonic() + self.config.RUN_DEADLINE_SECONDS

        console.print(Panel.fit(
            f"🌐 URL: {self.driver.url}\n"
            f"🧩 Archetypes: {', '.join(self.classifier.registry.names)}\n"
            f"📊 Max iterations: {self.config.MAX_ITERATIONS}",
            title="🤖 ONBOARDING RUNNER STARTING",
        ))

        while not state.finished:
            if stop_event is not None and stop_event.is_set():
                self.tracker.abort(state, "Cancelled by caller")
                break
            if deadline is not None and time.monotonic() >= deadline:
                self.tracker.abort(state, f"Run deadline of {self.config.RUN_DEADLINE_SECONDS}s exceeded")
                break
            if not self.tracker.begin_iteration(state):
                break

            try:
                await self._iterate(ctx)
            except Exception as e:
                self.tracker.record_error(state)
                self.logger.log_error(
                    "iteration_error",
                    str(e),
                    {"iteration": state.iterations, "retry_count": state.retry_count},
                    exc_info=True,
                )

        return self._generate_report(state, started_at)

    async def _iterate(self, ctx: StepContext):
        state = ctx.state
        result = await self.classifier.step(ctx)

        if result.progressed:
            await ctx.capture(result.matched)
            self.tracker.record_progress(state, result.matched, self.driver.url)
            if state.completion_signal:
                self.tracker.complete(state, state.completion_signal)
                self.logger.info(f"✅ {state.reason}")
            return

        await self.driver.wait(self.config.NO_MATCH_DELAY_MS)
        await ctx.capture("no_match")
        phase = self.tracker.record_no_match(state, self.driver.url)
        self.logger.info(f"⏳ No progress ({phase.value}), stuck count {state.stuck_count}")

        if state.finished:
            self.logger.warn(f"🛑 {state.reason}")
            return

        if self.tracker.needs_completion_scan(state):
            word = self.tracker.record_completion_scan(state, await self.driver.body_text())
            self.logger.log_action("completion_scan", {
                "iteration": state.iterations,
                "stuck_count": state.stuck_count,
                "matched_word": word,
            })
            if word:
                self.logger.info(f"✅ Completion text '{word}' found on page")
            else:
                self.logger.info("🔍 No completion text found, still waiting")

    def _generate_report(self, state: RunState, started_at: str) -> RunReport:
        report = RunReport(
            outcome=state.phase,
            reason=state.reason,
            iterations=state.iterations,
            retry_count=state.retry_count,
            steps=list(state.steps),
            started_at=started_at,
            finished_at=datetime.now().isoformat(),
        )
        self.logger.log_action("run_finished", report.to_dict())
        self.logger.save_final_summary(report.to_dict())

        style = "green" if report.success else "yellow"
        console.print(Panel.fit(
            f"Outcome: {report.outcome.value}\n"
            f"Reason: {report.reason}\n"
            f"Iterations: {report.iterations}\n\n"
            f"{format_step_history(report.steps)}",
            title="🏁 ONBOARDING RUN FINISHED",
            border_style=style,
        ))
        return report
