import pytest

from config import Config
from core.logger import RunLogger
from core.progress_tracker import RunState
from detectors.base import StepContext


class FastConfig(Config):
    """Config with every delay collapsed so tests never sleep."""
    NO_MATCH_DELAY_MS = 0
    SETTLE_MS = 0
    GATE_WINDOW_MS = 0
    DETECT_TIMEOUT_MS = 1000
    RUN_DEADLINE_SECONDS = None
    MAX_ITERATIONS = 60
    STUCK_SCAN_THRESHOLD = 3
    STUCK_ABORT_THRESHOLD = 10
    COMPLETION_WORDS = ('complete', 'done', 'success', 'welcome')
    GATE_ENDPOINT = '/api/some-endpoint'
    GATE_FIELD = 'some_field'


@pytest.fixture
def config():
    return FastConfig


@pytest.fixture
def logger(tmp_path):
    run_logger = RunLogger(tmp_path / "output")
    yield run_logger
    run_logger.close()


@pytest.fixture
def make_ctx(config, logger):
    def _make(driver, state=None):
        return StepContext(driver=driver, config=config, logger=logger, state=state or RunState(last_location=driver.url))
    return _make
