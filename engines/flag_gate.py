"""
FeatureFlagGate - Decides whether the step loop should run at all.

Listens to outbound requests for a fixed window after the first navigation,
pulls one field out of the JSON body sent to the configured endpoint, and
lets the run proceed only for a value that has not been exercised before.
"""
import json
from dataclasses import dataclass
from typing import Any, List, Optional

from core.logger import RunLogger
from core.seen_store import SeenValueStore
from engines.page_driver import PageDriver


@dataclass
class CapturedRequest:
    url: str
    method: str = "GET"
    body: Optional[str] = None


@dataclass
class GateDecision:
    should_run: bool
    value: Any = None
    reason: str = ""


def normalize_value(value: Any) -> Any:
    """Scalars are kept as-is; objects and arrays become canonical JSON text."""
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True, ensure_ascii=False)
    return value


def extract_field(requests: List[CapturedRequest], endpoint: str, field_name: str) -> Any:
    """
    Return the field from the first matching request whose body is a JSON
    object containing it. Bodies that do not parse are skipped.
    """
    for request in requests:
        if endpoint not in request.url:
            continue
        if not request.body:
            continue
        try:
            payload = json.loads(request.body)
        except ValueError:
            continue
        if isinstance(payload, dict) and field_name in payload:
            return payload[field_name]
    return None


class FeatureFlagGate:

    def __init__(self, driver: PageDriver, store: SeenValueStore, config, logger: RunLogger):
        self.driver = driver
        self.store = store
        self.config = config
        self.logger = logger
        self._captured: List[CapturedRequest] = []
        self._listening = False

    def _on_request(self, request):
        # Runs on the event loop for every request; append only.
        if not self._listening:
            return
        try:
            body = request.post_data
        except Exception:
            body = None
        try:
            self._captured.append(CapturedRequest(url=request.url, method=request.method, body=body))
        except Exception:
            return

    async def observe(self, window_ms: int) -> List[CapturedRequest]:
        """Capture outbound requests until the window closes. The window is a hard deadline."""
        self._captured = []
        self._listening = True
        self.driver.on_request(self._on_request)
        self.logger.info(f"📡 Observing network traffic for {window_ms / 1000:.0f}s...")
        try:
            await self.driver.wait(window_ms)
        finally:
            self._listening = False
            self.driver.off_request(self._on_request)
        captured = list(self._captured)
        self._captured = []
        self.logger.info(f"📡 Captured {len(captured)} requests")
        return captured

    def decide(self, requests: List[CapturedRequest]) -> GateDecision:
        value = extract_field(requests, self.config.GATE_ENDPOINT, self.config.GATE_FIELD)
        if not value:
            return GateDecision(False, None, f"No '{self.config.GATE_FIELD}' value found")

        value = normalize_value(value)
        if value in self.store:
            return GateDecision(False, value, "Value already seen")

        self.store.add(value)
        return GateDecision(True, value, "New value recorded")

    async def evaluate(self) -> GateDecision:
        requests = await self.observe(self.config.GATE_WINDOW_MS)
        decision = self.decide(requests)
        self.logger.log_action("flag_gate", {
            "should_run": decision.should_run,
            "value": decision.value,
            "reason": decision.reason,
            "requests_seen": len(requests),
        })
        if decision.should_run:
            self.logger.info(f"🚩 Flag variant recognized ({decision.value}), starting onboarding automation...")
        else:
            self.logger.info(f"⏭️  {decision.reason}, skipping onboarding automation")
        return decision
