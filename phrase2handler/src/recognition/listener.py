"""
Grammar Listener - Connects a recognizer to the dispatch pipeline.

Owns the recognizer lifecycle: activation against a grammar file,
idempotent start/stop, and teardown. Every recognized phrase is handed to
the pipeline synchronously, one event at a time.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from ..config import DispatchConfig, StartBehavior
from ..vocabulary.vocabulary import ConfigError
from ..binding.result import DispatchResult
from .events import PhraseRecognizedEvent
from .recognizer import BaseRecognizer, ScriptedRecognizer

if TYPE_CHECKING:
    from ..pipeline import PhraseDispatchPipeline

logger = logging.getLogger(__name__)

RecognizerFactory = Callable[[Path], BaseRecognizer]


class ResourceUnavailableError(Exception):
    """
    The grammar file backing the recognizer was not found.

    Not fatal: it is reported and the listener simply does not start.
    """

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"File path for grammar file not found: {path}")


class GrammarListener:
    """
    Listens for grammar matches and dispatches them.

    Example:
        listener = GrammarListener(pipeline, recognizer_factory=MyEngine, config=config)
        if listener.activate():
            ...
        listener.teardown()
    """

    def __init__(
        self,
        pipeline: "PhraseDispatchPipeline",
        recognizer_factory: RecognizerFactory = ScriptedRecognizer,
        config: Optional[DispatchConfig] = None,
    ):
        """
        Initialize the listener.

        Args:
            pipeline: Dispatch pipeline receiving every recognized phrase
            recognizer_factory: Builds a recognizer for a grammar file path
            config: Configuration (defaults to the pipeline's)
        """
        self.pipeline = pipeline
        self.recognizer_factory = recognizer_factory
        self.config = config or pipeline.config
        self.recognizer: Optional[BaseRecognizer] = None
        self.activation_error: Optional[ResourceUnavailableError] = None
        self.last_result: Optional[DispatchResult] = None

    def activate(self, start_behavior: Optional[StartBehavior] = None) -> bool:
        """
        Create the recognizer for the configured grammar and subscribe to it.

        Args:
            start_behavior: Overrides config.listener.start_behavior

        Returns:
            True if a recognizer was created

        Raises:
            ConfigError: If the pipeline's vocabulary has no actions
        """
        if len(self.pipeline.vocabulary) == 0:
            raise ConfigError("Must have at least one action in the vocabulary.")

        if self.recognizer is not None:
            logger.debug("Listener already activated")
            return True

        behavior = StartBehavior.parse(start_behavior or self.config.listener.start_behavior)
        grammar_file = self.config.listener.resolve_grammar_file()

        if not grammar_file.is_file():
            self.activation_error = ResourceUnavailableError(grammar_file)
            logger.warning(str(self.activation_error))
            return False

        logger.info(f"Loading grammar path = {grammar_file}")
        self.activation_error = None
        self.recognizer = self.recognizer_factory(grammar_file)
        self.recognizer.subscribe(self._on_phrase_recognized)

        if behavior is StartBehavior.AUTO_START:
            self.recognizer.start()

        logger.info(f"Is grammar running = {self.recognizer.is_running}")
        return True

    def start(self) -> None:
        """Start the recognizer unless it is missing or already running."""
        if self.recognizer is not None and not self.recognizer.is_running:
            self.recognizer.start()
            logger.info("Grammar recognizer started")

    def stop(self) -> None:
        """Stop the recognizer unless it is missing or already stopped."""
        if self.recognizer is not None and self.recognizer.is_running:
            self.recognizer.stop()
            logger.info("Grammar recognizer stopped")

    @property
    def is_running(self) -> bool:
        return self.recognizer is not None and self.recognizer.is_running

    def teardown(self) -> None:
        """Unsubscribe and release the recognizer. Safe if never activated."""
        if self.recognizer is None:
            return
        self.recognizer.unsubscribe(self._on_phrase_recognized)
        self.recognizer.dispose()
        self.recognizer = None
        logger.info("Grammar recognizer released")

    def _on_phrase_recognized(self, event: PhraseRecognizedEvent) -> None:
        logger.debug(str(event))
        self.last_result = self.pipeline.process(event)
