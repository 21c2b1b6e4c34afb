"""
Ordered registry of step archetypes. Position is priority: the classifier
resolves the first archetype whose detector matches.
"""
from typing import Iterable, Iterator, Tuple

from .archetypes import (
    DataEntryStep,
    EmailStep,
    MultiSelectStep,
    OptionStep,
    ResultStep,
    SingleButtonStep,
    SingleSelectStep,
    SkipStep,
)
from .base import StepArchetype


class StepRegistry:
    """Immutable, ordered collection of archetypes."""

    def __init__(self, archetypes: Iterable[StepArchetype]):
        self._archetypes: Tuple[StepArchetype, ...] = tuple(archetypes)
        names = [a.name for a in self._archetypes]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate archetype names in registry: {names}")

    def __iter__(self) -> Iterator[StepArchetype]:
        return iter(self._archetypes)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(a.name for a in self._archetypes)


def build_default_registry() -> StepRegistry:
    # Order is priority. Skip precedes every CTA-style shape; input-based
    # shapes precede option tiles and the lone call-to-action.
    return StepRegistry([
        SkipStep(),
        DataEntryStep(),
        EmailStep(),
        MultiSelectStep(),
        SingleSelectStep(),
        OptionStep(),
        SingleButtonStep(),
        ResultStep(),
    ])
