import random

import pytest

from core.progress_tracker import ProgressTracker, RunPhase


@pytest.fixture
def tracker():
    return ProgressTracker(
        max_iterations=60,
        scan_threshold=3,
        abort_threshold=10,
        completion_words=("complete", "done", "success", "welcome"),
    )


@pytest.mark.parametrize("n", [1, 2, 5, 9])
def test_stuck_count_equals_consecutive_unchanged_no_match_iterations(tracker, n):
    state = tracker.start("https://flow.test/a")
    for _ in range(n):
        tracker.record_no_match(state, "https://flow.test/a")

    assert state.stuck_count == n
    assert state.phase == RunPhase.STUCK


def test_location_change_resets_stuck_count(tracker):
    state = tracker.start("https://flow.test/a")
    tracker.record_no_match(state, "https://flow.test/a")
    tracker.record_no_match(state, "https://flow.test/a")

    tracker.record_no_match(state, "https://flow.test/b")

    assert state.stuck_count == 0
    assert state.phase == RunPhase.RETRYING


def test_progress_resets_stuck_and_counts_retry(tracker):
    state = tracker.start("https://flow.test/a")
    tracker.record_no_match(state, "https://flow.test/a")

    tracker.record_progress(state, "option", "https://flow.test/a")

    assert state.stuck_count == 0
    assert state.retry_count == 1
    assert state.steps == ["option"]
    assert state.phase == RunPhase.ADVANCING


def test_completion_scan_runs_once_after_low_threshold(tracker):
    state = tracker.start("https://flow.test/a")
    for _ in range(2):
        tracker.record_no_match(state, "https://flow.test/a")
    assert not tracker.needs_completion_scan(state)

    tracker.record_no_match(state, "https://flow.test/a")
    assert tracker.needs_completion_scan(state)

    assert tracker.record_completion_scan(state, "Pick your plan") is None
    assert not tracker.needs_completion_scan(state)
    assert not state.finished


def test_completion_vocabulary_completes_run(tracker):
    state = tracker.start("https://flow.test/a")
    for _ in range(3):
        tracker.record_no_match(state, "https://flow.test/a")

    assert tracker.record_completion_scan(state, "Welcome to your new plan!") == "welcome"
    assert state.phase == RunPhase.COMPLETE


def test_high_threshold_aborts(tracker):
    state = tracker.start("https://flow.test/a")
    for _ in range(10):
        tracker.record_no_match(state, "https://flow.test/a")

    assert state.phase == RunPhase.ABORTED
    assert not tracker.needs_completion_scan(state)


def test_iteration_ceiling_aborts():
    tracker = ProgressTracker(max_iterations=3, scan_threshold=3, abort_threshold=10, completion_words=())
    state = tracker.start(None)

    assert all(tracker.begin_iteration(state) for _ in range(3))
    assert tracker.begin_iteration(state) is False
    assert state.phase == RunPhase.ABORTED
    assert state.iterations == 3


def test_error_counts_as_retry(tracker):
    state = tracker.start(None)
    tracker.record_error(state)

    assert state.retry_count == 1
    assert state.phase == RunPhase.RETRYING


def test_screenshot_counter_is_monotonic(tracker):
    state = tracker.start(None)
    assert [state.next_screenshot() for _ in range(3)] == [1, 2, 3]


@pytest.mark.parametrize("seed", range(20))
def test_any_outcome_sequence_terminates_within_ceiling(seed):
    rng = random.Random(seed)
    tracker = ProgressTracker(max_iterations=25, scan_threshold=3, abort_threshold=10, completion_words=("done",))
    state = tracker.start("u0")

    while not state.finished:
        if not tracker.begin_iteration(state):
            break
        location = f"u{rng.randint(0, 2)}"
        if rng.random() < 0.4:
            tracker.record_progress(state, "option", location)
        else:
            tracker.record_no_match(state, location)
            if tracker.needs_completion_scan(state):
                tracker.record_completion_scan(state, rng.choice(["", "all done"]))

    assert state.phase in (RunPhase.COMPLETE, RunPhase.ABORTED)
    assert state.iterations <= 25
