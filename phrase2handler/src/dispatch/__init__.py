"""
Dispatch Module - Calls the handlers registered for a resolved action.

Handlers declare the call shapes they accept as data (NullaryHandler,
UnaryHandler, TypedHandler, OverloadSet). Dispatch picks a callable by
exact shape match, so a configuration mistake shows up as a reported
HandlerResolutionError rather than a failed call.
"""

from .handlers import (
    CallShape,
    Invocable,
    NullaryHandler,
    UnaryHandler,
    TypedHandler,
    OverloadSet,
    HandlerRegistry,
    describe_shape,
)
from .dispatcher import HandlerDispatcher, HandlerResolutionError

__all__ = [
    "CallShape",
    "Invocable",
    "NullaryHandler",
    "UnaryHandler",
    "TypedHandler",
    "OverloadSet",
    "HandlerRegistry",
    "describe_shape",
    "HandlerDispatcher",
    "HandlerResolutionError",
]
