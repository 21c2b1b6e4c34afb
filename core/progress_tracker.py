"""
ProgressTracker - Decides whether the step loop keeps going, has stalled,
finished, or must be aborted.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional


class RunPhase(Enum):
    ADVANCING = "advancing"
    RETRYING = "retrying"
    STUCK = "stuck"
    COMPLETE = "complete"
    ABORTED = "aborted"


TERMINAL_PHASES = (RunPhase.COMPLETE, RunPhase.ABORTED)


@dataclass
class RunState:
    """Mutable per-run counters. Created at loop start, never persisted."""
    retry_count: int = 0
    last_location: Optional[str] = None
    stuck_count: int = 0
    screenshot_counter: int = 0
    iterations: int = 0
    phase: RunPhase = RunPhase.ADVANCING
    completion_scanned: bool = False
    completion_signal: Optional[str] = None
    reason: str = ""
    steps: List[str] = field(default_factory=list)

    @property
    def finished(self) -> bool:
        return self.phase in TERMINAL_PHASES

    def next_screenshot(self) -> int:
        self.screenshot_counter += 1
        return self.screenshot_counter


class ProgressTracker:
    """
    State machine over (retry count, last location, consecutive stalls).

    ADVANCING -> RETRYING -> STUCK -> {COMPLETE | ABORTED}
    """

    def __init__(
        self,
        max_iterations: int,
        scan_threshold: int,
        abort_threshold: int,
        completion_words: Iterable[str],
    ):
        self.max_iterations = max_iterations
        self.scan_threshold = scan_threshold
        self.abort_threshold = abort_threshold
        self.completion_words = tuple(w.lower() for w in completion_words if w)

    @classmethod
    def from_config(cls, config) -> "ProgressTracker":
        return cls(
            max_iterations=config.MAX_ITERATIONS,
            scan_threshold=config.STUCK_SCAN_THRESHOLD,
            abort_threshold=config.STUCK_ABORT_THRESHOLD,
            completion_words=config.COMPLETION_WORDS,
        )

    def start(self, location: Optional[str]) -> RunState:
        return RunState(last_location=location)

    def begin_iteration(self, state: RunState) -> bool:
        """
        Count a new iteration.

        Returns:
            False if the iteration ceiling has been reached (state is ABORTED)
        """
        if state.iterations >= self.max_iterations:
            self._finish(state, RunPhase.ABORTED, f"Reached maximum iterations ({self.max_iterations})")
            return False
        state.iterations += 1
        return True

    def record_progress(self, state: RunState, step_name: str, location: Optional[str]):
        state.stuck_count = 0
        state.retry_count += 1
        state.last_location = location
        state.steps.append(step_name)
        state.phase = RunPhase.ADVANCING

    def record_no_match(self, state: RunState, location: Optional[str]) -> RunPhase:
        if location == state.last_location:
            state.stuck_count += 1
            state.phase = RunPhase.STUCK
        else:
            state.stuck_count = 0
            state.phase = RunPhase.RETRYING
        state.last_location = location

        if state.stuck_count >= self.abort_threshold:
            self._finish(
                state,
                RunPhase.ABORTED,
                f"No progress for {state.stuck_count} consecutive iterations",
            )
        return state.phase

    def record_error(self, state: RunState):
        state.retry_count += 1
        state.phase = RunPhase.RETRYING

    def needs_completion_scan(self, state: RunState) -> bool:
        return (
            not state.finished
            and not state.completion_scanned
            and state.stuck_count >= self.scan_threshold
        )

    def record_completion_scan(self, state: RunState, page_text: str) -> Optional[str]:
        """
        Look for completion vocabulary in the page text. Runs once per run.

        Returns:
            The matched word, or None
        """
        state.completion_scanned = True
        word = self.find_completion_word(page_text)
        if word:
            self._finish(state, RunPhase.COMPLETE, f"Completion text found: '{word}'")
        return word

    def find_completion_word(self, page_text: str) -> Optional[str]:
        text = (page_text or "").lower()
        for word in self.completion_words:
            if word in text:
                return word
        return None

    def complete(self, state: RunState, reason: str):
        self._finish(state, RunPhase.COMPLETE, reason)

    def abort(self, state: RunState, reason: str):
        self._finish(state, RunPhase.ABORTED, reason)

    def _finish(self, state: RunState, phase: RunPhase, reason: str):
        state.phase = phase
        state.reason = reason
