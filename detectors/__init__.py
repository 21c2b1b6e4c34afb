"""
Detectors package - Step archetypes and their registry
"""
from .base import StepArchetype, StepContext, StepKind
from .registry import StepRegistry, build_default_registry

__all__ = ['StepArchetype', 'StepContext', 'StepKind', 'StepRegistry', 'build_default_registry']
