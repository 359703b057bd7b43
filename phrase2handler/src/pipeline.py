"""
Phrase2Handler Pipeline - Main Orchestrator

This module provides the main entry point for dispatching recognized
phrases. It orchestrates the two stages:
1. Binding: semantic meanings to an action and typed, ordered arguments
2. Dispatch: bound arguments to the action's registered handlers

Per-event failures stay with the event:
- An unknown or missing trigger keyword is a silent no-op
- A value that cannot be coerced aborts that event only
- A handler without a matching call shape is reported and skipped
"""

import logging
from typing import Optional, Dict, Any, Iterable, Union

from .coercion.registry import TypeCoercionRegistry, CoercionError
from .vocabulary.vocabulary import ActionVocabulary, ConfigError
from .binding.binder import ArgumentBinder
from .binding.result import DispatchResult, DispatchState, SemanticMeaning
from .dispatch.dispatcher import HandlerDispatcher
from .dispatch.handlers import HandlerRegistry
from .recognition.events import PhraseRecognizedEvent
from .config import DispatchConfig


logger = logging.getLogger(__name__)


class PhraseDispatchPipeline:
    """
    Main pipeline for turning recognized phrases into handler calls.

    Example:
        handlers = HandlerRegistry()
        handlers.register(TypedHandler("move", robot.move, (str, float)))

        pipeline = PhraseDispatchPipeline(
            vocabulary_path="data/vocabulary.json",
            handlers=handlers
        )
        result = pipeline.process(event)
        if result.fired:
            print(result.invoked)
    """

    def __init__(
        self,
        vocabulary: Optional[ActionVocabulary] = None,
        vocabulary_path: Optional[str] = None,
        handlers: Optional[HandlerRegistry] = None,
        registry: Optional[TypeCoercionRegistry] = None,
        config: Optional[DispatchConfig] = None,
        primary_action_key: Optional[str] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            vocabulary: Pre-loaded ActionVocabulary
            vocabulary_path: Path to vocabulary JSON (alternative to vocabulary)
            handlers: Handler registry used to resolve handler names in the file
            registry: Type coercion registry (a default one is built if omitted)
            config: Full configuration
            primary_action_key: Overrides config.listener.primary_action_key

        Raises:
            ConfigError: If no usable vocabulary is available
        """
        self.config = config or DispatchConfig()
        self.registry = registry or TypeCoercionRegistry()

        if vocabulary is not None:
            self.vocabulary = vocabulary
        else:
            path = vocabulary_path or self.config.vocabulary.vocabulary_path
            if not path:
                raise ConfigError(
                    "Either 'vocabulary', 'vocabulary_path' or config.vocabulary.vocabulary_path "
                    "must be provided."
                )
            self.vocabulary = ActionVocabulary.load_from_file(
                path, handlers=handlers, registry=self.registry
            )

        key = primary_action_key or self.config.listener.primary_action_key
        self.binder = ArgumentBinder(self.vocabulary, self.registry, primary_action_key=key)
        self.dispatcher = HandlerDispatcher()
        logger.info(f"Pipeline ready: primary key '{key}', {self.vocabulary!r}")

    def process(
        self,
        phrase: Union[PhraseRecognizedEvent, Iterable[SemanticMeaning]]
    ) -> DispatchResult:
        """
        Bind and dispatch one phrase event.

        Args:
            phrase: A PhraseRecognizedEvent, or its semantic meanings

        Returns:
            DispatchResult describing what fired (or why nothing did)

        Exceptions raised by handlers propagate to the caller.
        """
        if isinstance(phrase, PhraseRecognizedEvent):
            meanings = phrase.semantic_meanings or []
        else:
            meanings = phrase

        # Stage 1: Binding
        result, candidates = self.binder.resolve_action(meanings)
        if not result.fired:
            return result

        try:
            self.binder.bind_arguments(result, candidates)
        except CoercionError as e:
            logger.warning(f"Binding failed, phrase dropped: {e}")
            result.state = DispatchState.ABORTED
            result.error_stage = "binding"
            result.error_message = str(e)
            return result

        # Stage 2: Dispatch
        logger.info(
            f"Dispatching '{result.trigger_keyword}' to {result.action.handler_names}"
        )
        self.dispatcher.dispatch(result)
        if result.errors:
            result.error_stage = "dispatch"
            result.error_message = "; ".join(str(e) for e in result.errors)

        return result

    def get_available_keywords(self):
        """Get all trigger keywords known to the vocabulary."""
        return self.vocabulary.get_keywords()


def create_pipeline(
    vocabulary_config: Dict[str, Any],
    handlers: Optional[HandlerRegistry] = None,
    primary_action_key: Optional[str] = None,
    registry: Optional[TypeCoercionRegistry] = None,
) -> PhraseDispatchPipeline:
    """
    Convenience function to create a pipeline from a vocabulary dictionary.

    Args:
        vocabulary_config: Vocabulary in the ActionVocabulary.load() format
        handlers: Registry resolving handler names
        primary_action_key: Semantic key that selects the action
        registry: Type coercion registry

    Returns:
        Configured PhraseDispatchPipeline
    """
    registry = registry or TypeCoercionRegistry()
    vocabulary = ActionVocabulary.load(vocabulary_config, handlers=handlers, registry=registry)
    return PhraseDispatchPipeline(
        vocabulary=vocabulary,
        registry=registry,
        primary_action_key=primary_action_key,
    )
