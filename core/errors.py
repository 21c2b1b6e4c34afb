"""
Error types raised by the onboarding runner.

Only setup failures escape a run. Page races, timeouts and coverage gaps are
recovered inside the step loop and never reach the caller.
"""


class OnboardingError(Exception):
    """Base class for runner errors"""


class BrowserSessionError(OnboardingError):
    """A browser session or page could not be acquired"""
