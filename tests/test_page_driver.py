import asyncio
import time
from types import SimpleNamespace

from engines.browser_engine import BrowserEngine
from engines.page_driver import Element, PageDriver


class BrokenHandle:
    """Every call fails the way a detached element handle does."""

    def __getattr__(self, name):
        async def fail(*args, **kwargs):
            raise RuntimeError("Element is not attached to the DOM")
        return fail


class StubPage:

    def __init__(self, snapshots=("<body></body>",)):
        self.url = "https://flow.test/start"
        self.snapshots = list(snapshots)
        self.listeners = []

    async def content(self):
        if len(self.snapshots) > 1:
            return self.snapshots.pop(0)
        return self.snapshots[0]

    def on(self, event, callback):
        self.listeners.append((event, callback))

    def remove_listener(self, event, callback):
        self.listeners.remove((event, callback))


def test_element_defaults_when_handle_cannot_answer():
    element = Element(BrokenHandle())

    async def answers():
        return (
            await element.is_visible(),
            await element.is_enabled(),
            await element.is_checked(),
            await element.attribute("data-locator"),
            await element.text(),
        )

    assert asyncio.run(answers()) == (True, True, False, None, "")


def test_wait_until_times_out_without_raising():
    driver = PageDriver(StubPage())
    calls = []

    async def never():
        calls.append(1)
        return False

    started = time.monotonic()
    assert asyncio.run(driver.wait_until(never, timeout_ms=50, poll_ms=10)) is False
    assert time.monotonic() - started < 1
    assert len(calls) >= 2


def test_wait_until_treats_predicate_errors_as_not_yet():
    driver = PageDriver(StubPage())
    attempts = []

    async def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise RuntimeError("Execution context was destroyed")
        return True

    assert asyncio.run(driver.wait_until(flaky, timeout_ms=1000, poll_ms=5)) is True
    assert len(attempts) == 3


def test_wait_until_with_always_failing_predicate_resolves_false():
    driver = PageDriver(StubPage())

    async def broken():
        raise RuntimeError("Target closed")

    assert asyncio.run(driver.wait_until(broken, timeout_ms=30, poll_ms=10)) is False


def test_wait_for_dom_change_sees_new_snapshot():
    page = StubPage(snapshots=["<body>a</body>", "<body>a</body>", "<body>b</body>"])
    driver = PageDriver(page, dom_poll_ms=5)

    assert asyncio.run(driver.wait_for_dom_change(timeout_ms=1000)) is True


def test_wait_for_dom_change_times_out_on_static_page():
    driver = PageDriver(StubPage(), dom_poll_ms=5)

    assert asyncio.run(driver.wait_for_dom_change(timeout_ms=30)) is False


def test_request_listener_is_removed():
    page = StubPage()
    driver = PageDriver(page)
    callback = lambda request: None

    driver.on_request(callback)
    assert page.listeners == [("request", callback)]
    driver.off_request(callback)
    assert page.listeners == []


def test_console_errors_are_forwarded_as_warnings(config, logger):
    engine = BrowserEngine(config, logger)
    page = StubPage()
    PageDriver(page).on_console(engine._forward_console)
    event, callback = page.listeners[0]

    callback(SimpleNamespace(type="error", text="Uncaught TypeError: x is undefined"))
    callback(SimpleNamespace(type="log", text="render done"))

    assert event == "console"
    run_log = logger.main_log_file.read_text(encoding="utf-8")
    assert "WARNING" in run_log and "Uncaught TypeError" in run_log
    assert "DEBUG" in run_log and "render done" in run_log
