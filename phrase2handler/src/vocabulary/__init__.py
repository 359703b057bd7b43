"""
Vocabulary Module - The declared actions and semantic arguments.

The vocabulary is a CLOSED configuration built once at startup:
- Only declared trigger keywords can fire an action
- Only declared semantic keys become handler arguments
- An empty or inconsistent vocabulary is rejected with ConfigError
"""

from .vocabulary import (
    ActionVocabulary,
    ActionSpec,
    ArgumentSpec,
    ConfigError,
)

__all__ = [
    "ActionVocabulary",
    "ActionSpec",
    "ArgumentSpec",
    "ConfigError",
]
