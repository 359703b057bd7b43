"""
Recognition Module - Boundary with the speech engine.

The engine itself is external. This module defines the phrase event it
produces, the recognizer interface the listener drives, and the listener
that forwards each recognized phrase to the dispatch pipeline.
"""

from .events import PhraseRecognizedEvent, ConfidenceLevel
from .recognizer import BaseRecognizer, ScriptedRecognizer, PhraseCallback
from .listener import GrammarListener, ResourceUnavailableError
from ..config import StartBehavior

__all__ = [
    "PhraseRecognizedEvent",
    "ConfidenceLevel",
    "BaseRecognizer",
    "ScriptedRecognizer",
    "PhraseCallback",
    "GrammarListener",
    "ResourceUnavailableError",
    "StartBehavior",
]
