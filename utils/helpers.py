"""
Helper utilities for the onboarding runner
"""
import uuid
from typing import List


def screenshot_filename(step_num: int, label: str) -> str:
    """
    Build the file name for a diagnostic screenshot.

    Args:
        step_num: Monotonic screenshot counter of the run
        label: Short description (archetype name, "no_match", ...)

    Returns:
        File name such as ``step_007_option.png``
    """
    safe_label = "".join(c if c.isalnum() or c in "-_" else "_" for c in label) or "page"
    return f"step_{step_num:03d}_{safe_label}.png"


def generate_placeholder_email(domain: str = "example.com") -> str:
    """Return a unique throwaway address for identity forms."""
    return f"onboarding+{uuid.uuid4().hex[:12]}@{domain}"


def format_step_history(history: List[str], limit: int = 10) -> str:
    """
    Format the list of resolved steps for the run summary.

    Args:
        history: Archetype names in the order they fired
        limit: How many trailing entries to show

    Returns:
        Formatted string of step history
    """
    if not history:
        return "No steps resolved."

    recent_history = history[-limit:]
    formatted = []
    if len(history) > limit:
        formatted.append(f"... ({len(history) - limit} earlier steps omitted) ...")

    offset = len(history) - len(recent_history)
    formatted.extend(f"{offset + i}. {name}" for i, name in enumerate(recent_history, 1))
    return "\n".join(formatted)
