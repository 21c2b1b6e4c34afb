"""
Configuration settings for the onboarding flow runner
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: tuple) -> tuple:
    value = os.getenv(name)
    if not value:
        return default
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _text_inputs(*selectors: str) -> str:
    """Restrict input selectors to fields that take typed text."""
    return ', '.join(f'{s}:not([type=radio]):not([type=checkbox])' for s in selectors)


class Config:
    """Central configuration class"""

    # Target flow
    START_URL = os.getenv('START_URL', 'https://example.com')

    # Browser settings
    BROWSER_HEADLESS = _env_bool('BROWSER_HEADLESS', True)
    VIEWPORT_WIDTH = 1280
    VIEWPORT_HEIGHT = 720
    NAVIGATION_GOTO_TIMEOUT_MS = int(os.getenv('NAVIGATION_GOTO_TIMEOUT_MS', 30000))

    # Output directories
    OUTPUT_DIR = Path(os.getenv('OUTPUT_DIR', 'onboarding_output'))
    SEEN_VALUES_FILE = Path(os.getenv('SEEN_VALUES_FILE', 'seen_values.json'))

    # Feature-flag gate
    GATE_ENABLED = _env_bool('GATE_ENABLED', True)
    GATE_ENDPOINT = os.getenv('GATE_ENDPOINT', '/api/some-endpoint')
    GATE_FIELD = os.getenv('GATE_FIELD', 'some_field')
    GATE_WINDOW_MS = int(os.getenv('GATE_WINDOW_MS', 60000))  # 1 minute

    # Step loop
    MAX_ITERATIONS = int(os.getenv('MAX_ITERATIONS', 60))  # Safety limit
    STUCK_SCAN_THRESHOLD = int(os.getenv('STUCK_SCAN_THRESHOLD', 3))
    STUCK_ABORT_THRESHOLD = int(os.getenv('STUCK_ABORT_THRESHOLD', 10))
    NO_MATCH_DELAY_MS = int(os.getenv('NO_MATCH_DELAY_MS', 2000))
    RUN_DEADLINE_SECONDS = float(os.getenv('RUN_DEADLINE_SECONDS', 0)) or None
    COMPLETION_WORDS = _env_list('COMPLETION_WORDS', ('complete', 'done', 'success', 'welcome'))

    # Waits inside step resolvers
    DETECT_TIMEOUT_MS = 5000
    CLICK_TIMEOUT_MS = 5000
    SETTLE_MS = 1500
    SELECTION_TIMEOUT_MS = 5000
    NAVIGATION_TIMEOUT_MS = 5000
    DOM_CHANGE_TIMEOUT_MS = 10000
    DOM_POLL_MS = 1000

    # Markup vocabulary of the onboarding provider
    LOCATOR_ATTRIBUTE = os.getenv('LOCATOR_ATTRIBUTE', 'data-locator')
    SKIP_MARKER = 'skip'
    BACK_MARKER = 'back'
    CTA_MARKER = 'CTAButton'
    RESULT_URL_MARKER = 'result'

    ACTION_SELECTOR = 'button, [role=button], a[data-locator]'
    BUTTON_SELECTOR = 'button'
    CTA_SELECTOR = '[data-locator*=CTAButton]'
    OPTION_SELECTOR = '[data-locator*=option], [data-locator*=option_square]'
    SINGLE_SELECT_SELECTOR = 'input[data-locator*=single_select]'
    MULTI_SELECT_SELECTOR = 'input[data-locator*=multi_select]'
    EMAIL_SELECTOR = 'input[type=email], input[data-locator*=email], input[name*=email]'
    IDENTIFIED_INPUT_SELECTOR = 'input[data-locator]'
    INTERACTIVE_SELECTOR = 'button, a, input, select, textarea, [role=button]'

    # field name -> (selector, placeholder value)
    DATA_ENTRY_FIELDS = {
        'height': (_text_inputs('input[data-locator*=height]', 'input[name*=height]'), '170'),
        'weight': (_text_inputs('input[data-locator*=weight]', 'input[name*=weight]'), '70'),
        'age': (_text_inputs('input[data-locator*=age]', 'input[name=age]'), '30'),
    }
    EMAIL_DOMAIN = os.getenv('EMAIL_DOMAIN', 'example.com')

    @classmethod
    def validate(cls):
        """Validate that the configuration can drive a run"""
        if not cls.START_URL:
            raise ValueError("START_URL not found in environment variables")
        if cls.MAX_ITERATIONS < 1:
            raise ValueError("MAX_ITERATIONS must be at least 1")
        if cls.STUCK_SCAN_THRESHOLD > cls.STUCK_ABORT_THRESHOLD:
            raise ValueError("STUCK_SCAN_THRESHOLD must not exceed STUCK_ABORT_THRESHOLD")
        if cls.GATE_ENABLED and not (cls.GATE_ENDPOINT and cls.GATE_FIELD):
            raise ValueError("GATE_ENDPOINT and GATE_FIELD are required when the gate is enabled")
