"""
Recognizer Interface - Boundary with the speech engine.

The speech engine is an external collaborator. This module defines the
small surface the listener needs from it, plus a scripted in-process
recognizer that delivers events handed to it (used for testing and demos
without audio hardware).
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List, Optional

from .events import PhraseRecognizedEvent

logger = logging.getLogger(__name__)

PhraseCallback = Callable[[PhraseRecognizedEvent], None]


class BaseRecognizer(ABC):
    """Abstract base class for grammar-driven phrase recognizers."""

    @abstractmethod
    def start(self) -> None:
        """Begin listening."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop listening."""
        pass

    @property
    @abstractmethod
    def is_running(self) -> bool:
        pass

    @abstractmethod
    def subscribe(self, callback: PhraseCallback) -> None:
        """Register a phrase-recognized callback."""
        pass

    @abstractmethod
    def unsubscribe(self, callback: PhraseCallback) -> None:
        """Remove a phrase-recognized callback."""
        pass

    @abstractmethod
    def dispose(self) -> None:
        """Release the underlying engine resource."""
        pass


class ScriptedRecognizer(BaseRecognizer):
    """
    A deterministic recognizer driven by emit().

    Events are only delivered while the recognizer is running, the same
    way a real engine only reports phrases while listening.
    """

    def __init__(self, grammar_file: Optional[Path] = None):
        self.grammar_file = grammar_file
        self._running = False
        self._disposed = False
        self._callbacks: List[PhraseCallback] = []

    def start(self) -> None:
        if self._disposed:
            raise RuntimeError("Recognizer has been disposed")
        self._running = True

    def stop(self) -> None:
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def subscribe(self, callback: PhraseCallback) -> None:
        self._callbacks.append(callback)

    def unsubscribe(self, callback: PhraseCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    def dispose(self) -> None:
        self._running = False
        self._callbacks.clear()
        self._disposed = True

    def emit(self, event: PhraseRecognizedEvent) -> bool:
        """
        Deliver a phrase event to all subscribers.

        Returns:
            True if the event was delivered (recognizer running)
        """
        if not self._running:
            logger.debug(f"Recognizer not running - dropped '{event.text}'")
            return False
        for callback in list(self._callbacks):
            callback(event)
        return True
