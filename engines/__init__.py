"""
Engines package - Browser-facing modules for the onboarding runner

The classifier and orchestrator sit on top of the detectors package and are
imported from their own modules.
"""
from .page_driver import Element, PageDriver
from .browser_engine import BrowserEngine
from .flag_gate import FeatureFlagGate, GateDecision, CapturedRequest

__all__ = ['Element', 'PageDriver', 'BrowserEngine', 'FeatureFlagGate', 'GateDecision', 'CapturedRequest']
