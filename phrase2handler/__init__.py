"""
Phrase2Handler - Recognized speech to typed handler calls

Takes the semantic key/value groups produced by a grammar-based speech
recognizer and calls the handler registered for the recognized action,
with arguments coerced to their declared types and ordered the way the
handler expects.
"""

from .src.pipeline import (
    PhraseDispatchPipeline,
    create_pipeline,
)
from .src.coercion import (
    TypeTag,
    TypeCoercionRegistry,
    CoercionError,
)
from .src.vocabulary import (
    ActionVocabulary,
    ActionSpec,
    ArgumentSpec,
    ConfigError,
)
from .src.binding import (
    ArgumentBinder,
    SemanticMeaning,
    BoundArgument,
    DispatchResult,
    DispatchArity,
    DispatchState,
    ActionResolutionMiss,
)
from .src.dispatch import (
    HandlerDispatcher,
    HandlerRegistry,
    HandlerResolutionError,
    Invocable,
    NullaryHandler,
    UnaryHandler,
    TypedHandler,
    OverloadSet,
)
from .src.recognition import (
    PhraseRecognizedEvent,
    ConfidenceLevel,
    BaseRecognizer,
    ScriptedRecognizer,
    GrammarListener,
    ResourceUnavailableError,
    StartBehavior,
)

__version__ = "0.1.0"
__author__ = "Phrase2Handler Team"

__all__ = [
    # Pipeline
    "PhraseDispatchPipeline",
    "create_pipeline",
    # Coercion
    "TypeTag",
    "TypeCoercionRegistry",
    "CoercionError",
    # Vocabulary
    "ActionVocabulary",
    "ActionSpec",
    "ArgumentSpec",
    "ConfigError",
    # Binding
    "ArgumentBinder",
    "SemanticMeaning",
    "BoundArgument",
    "DispatchResult",
    "DispatchArity",
    "DispatchState",
    "ActionResolutionMiss",
    # Dispatch
    "HandlerDispatcher",
    "HandlerRegistry",
    "HandlerResolutionError",
    "Invocable",
    "NullaryHandler",
    "UnaryHandler",
    "TypedHandler",
    "OverloadSet",
    # Recognition
    "PhraseRecognizedEvent",
    "ConfidenceLevel",
    "BaseRecognizer",
    "ScriptedRecognizer",
    "GrammarListener",
    "ResourceUnavailableError",
    "StartBehavior",
]
