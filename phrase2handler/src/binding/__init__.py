"""
Binding Module - Resolves a recognized phrase into an action call.

Given the semantic key/value groups of one phrase event, the binder:
1. Picks the trigger keyword from the primary-action key
2. Resolves the declared action (a miss is a silent no-op)
3. Coerces every declared secondary key to its type
4. Orders the arguments by the action's argument precedence
"""

from .result import (
    SemanticMeaning,
    BoundArgument,
    DispatchArity,
    DispatchState,
    DispatchResult,
    ActionResolutionMiss,
    meanings_from_pairs,
)
from .binder import ArgumentBinder, DEFAULT_PRIMARY_ACTION_KEY

__all__ = [
    "SemanticMeaning",
    "BoundArgument",
    "DispatchArity",
    "DispatchState",
    "DispatchResult",
    "ActionResolutionMiss",
    "meanings_from_pairs",
    "ArgumentBinder",
    "DEFAULT_PRIMARY_ACTION_KEY",
]
