from utils.helpers import format_step_history, generate_placeholder_email, screenshot_filename


def test_screenshot_filename_is_zero_padded_and_sanitized():
    assert screenshot_filename(7, "option") == "step_007_option.png"
    assert screenshot_filename(12, "no match/retry") == "step_012_no_match_retry.png"
    assert screenshot_filename(1, "") == "step_001_page.png"


def test_placeholder_emails_are_unique():
    first = generate_placeholder_email("example.org")
    second = generate_placeholder_email("example.org")
    assert first.endswith("@example.org")
    assert first.startswith("onboarding+")
    assert first != second


def test_step_history_shows_trailing_entries():
    assert format_step_history([]) == "No steps resolved."
    history = [f"step{i}" for i in range(1, 13)]
    lines = format_step_history(history, limit=3).splitlines()
    assert lines == [
        "... (9 earlier steps omitted) ...",
        "10. step10",
        "11. step11",
        "12. step12",
    ]
