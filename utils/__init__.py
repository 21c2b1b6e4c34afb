"""
Utils package - Helper utilities for the onboarding runner
"""
from .helpers import (
    screenshot_filename,
    generate_placeholder_email,
    format_step_history
)

__all__ = [
    'screenshot_filename',
    'generate_placeholder_email',
    'format_step_history'
]
