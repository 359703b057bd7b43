"""
Coercion Module - Converts recognized strings to declared argument types.

The speech engine only ever produces strings. Every declared argument
carries a TypeTag and this module converts raw values to that type,
failing with CoercionError rather than guessing.
"""

from .registry import (
    TypeTag,
    TypeCoercionRegistry,
    CoercionError,
    default_registry,
)

__all__ = [
    "TypeTag",
    "TypeCoercionRegistry",
    "CoercionError",
    "default_registry",
]
