"""
Argument Binder - Maps a recognized phrase to an action and its arguments.

Takes the semantic meanings of one phrase event, picks the trigger keyword
from the primary-action key, and turns every other declared key into a
typed argument. The result says which action fires and exactly which
positional arguments its handlers receive.
"""

import logging
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple

from ..coercion.registry import TypeCoercionRegistry, CoercionError
from .result import (
    SemanticMeaning,
    BoundArgument,
    DispatchArity,
    DispatchState,
    DispatchResult,
    ActionResolutionMiss,
)

if TYPE_CHECKING:
    from ..vocabulary.vocabulary import ActionVocabulary, ActionSpec, ArgumentSpec
    from ..recognition.events import PhraseRecognizedEvent

logger = logging.getLogger(__name__)

DEFAULT_PRIMARY_ACTION_KEY = "action"


class ArgumentBinder:
    """
    Resolves the action and typed, ordered arguments for a phrase event.

    The binder holds no per-event state; every call to bind() starts from
    an empty argument map.

    Attributes:
        vocabulary: Declared actions and argument specs
        registry: Conversions for declared argument types
        primary_action_key: Semantic key whose first value selects the action
    """

    def __init__(
        self,
        vocabulary: "ActionVocabulary",
        registry: TypeCoercionRegistry,
        primary_action_key: str = DEFAULT_PRIMARY_ACTION_KEY
    ):
        self.vocabulary = vocabulary
        self.registry = registry
        self.primary_action_key = primary_action_key

    def bind_event(self, event: "PhraseRecognizedEvent") -> DispatchResult:
        """Bind the semantic meanings carried by a phrase event."""
        return self.bind(event.semantic_meanings or [])

    def bind(self, meanings: Iterable[SemanticMeaning]) -> DispatchResult:
        """
        Resolve the action and build its argument list.

        Args:
            meanings: Semantic meanings in recognizer order

        Returns:
            DispatchResult in state ARGUMENT_BINDING (ready to dispatch)
            or NO_ACTION

        Raises:
            CoercionError: If any bound value cannot be converted
        """
        result, candidates = self.resolve_action(meanings)
        if result.fired:
            self.bind_arguments(result, candidates)
        return result

    def resolve_action(
        self,
        meanings: Iterable[SemanticMeaning]
    ) -> Tuple[DispatchResult, Dict[str, Tuple["ArgumentSpec", SemanticMeaning]]]:
        """
        Pick the trigger keyword and look up its action.

        Returns:
            (result in state ACTION_RESOLVED or NO_ACTION, uncoerced argument candidates)
        """
        result = DispatchResult(state=DispatchState.PRIMARY_KEY_SCAN)
        trigger_keyword, candidates = self._scan(meanings)
        result.trigger_keyword = trigger_keyword

        if not trigger_keyword:
            result.state = DispatchState.NO_ACTION
            result.miss = ActionResolutionMiss(ActionResolutionMiss.NO_PRIMARY_KEY)
            logger.debug("No primary action value - nothing to dispatch")
            return result, {}

        action = self.vocabulary.lookup_action(trigger_keyword)
        if action is None:
            result.state = DispatchState.NO_ACTION
            result.miss = ActionResolutionMiss(
                ActionResolutionMiss.UNKNOWN_KEYWORD, trigger_keyword
            )
            logger.warning(f"{result.miss} - ignoring phrase")
            return result, {}

        result.action = action
        result.state = DispatchState.ACTION_RESOLVED
        return result, candidates

    def bind_arguments(
        self,
        result: DispatchResult,
        candidates: Dict[str, Tuple["ArgumentSpec", SemanticMeaning]]
    ) -> DispatchResult:
        """
        Coerce the candidates of a resolved action and arrange them positionally.

        On CoercionError the result is left in state ACTION_RESOLVED with no
        arguments bound.
        """
        arguments = self._coerce_arguments(candidates)
        result.arguments = arguments
        result.arity, result.positional_args = self._arrange(result.action, arguments)
        result.state = DispatchState.ARGUMENT_BINDING

        logger.debug(
            f"Bound '{result.trigger_keyword}': arity={result.arity.value}, "
            f"args={result.positional_args!r}"
        )
        return result

    def _scan(
        self,
        meanings: Iterable[SemanticMeaning]
    ) -> Tuple[Optional[str], Dict[str, Tuple["ArgumentSpec", SemanticMeaning]]]:
        """
        Single in-order pass over the meanings.

        The first primary-key meaning with values supplies the trigger
        keyword; later ones are treated like any other key. Declared keys
        are collected for binding, a repeated key replaces the earlier one.
        """
        trigger_keyword: Optional[str] = None
        candidates: Dict[str, Tuple["ArgumentSpec", SemanticMeaning]] = {}

        for meaning in meanings:
            logger.debug(f"Semantic meaning key={meaning.key} values={list(meaning.values)}")

            if (
                trigger_keyword is None
                and meaning.key == self.primary_action_key
                and meaning.values
            ):
                trigger_keyword = meaning.values[0]
                continue

            spec = self.vocabulary.lookup_argument_spec(meaning.key)
            if spec is None:
                continue

            if meaning.key in candidates:
                logger.debug(f"Key '{meaning.key}' repeated - using the later meaning")
            candidates[meaning.key] = (spec, meaning)

        return trigger_keyword, candidates

    def _coerce_arguments(
        self,
        candidates: Dict[str, Tuple["ArgumentSpec", SemanticMeaning]]
    ) -> Dict[str, BoundArgument]:
        arguments: Dict[str, BoundArgument] = {}
        for key, (spec, meaning) in candidates.items():
            bound = self.bind_argument(spec, meaning)
            if bound is not None:
                arguments[key] = bound
        return arguments

    def bind_argument(
        self,
        spec: "ArgumentSpec",
        meaning: SemanticMeaning
    ) -> Optional[BoundArgument]:
        """
        Coerce one meaning according to its spec.

        Collections keep every value in recognizer order; scalars use the
        first value only. A scalar meaning without values binds nothing.

        Raises:
            CoercionError: If a value cannot be converted (names the key)
        """
        try:
            if spec.is_collection:
                value = self.registry.coerce_all(spec.type_tag, meaning.values)
            elif meaning.values:
                value = self.registry.coerce(spec.type_tag, meaning.values[0])
            else:
                logger.debug(f"Key '{spec.key}' has no values - skipped")
                return None
        except CoercionError as e:
            raise e.with_key(spec.key) from e

        return BoundArgument(spec=spec, meaning=meaning, value=value)

    @staticmethod
    def _arrange(
        action: "ActionSpec",
        arguments: Dict[str, BoundArgument]
    ) -> Tuple[DispatchArity, tuple]:
        """Decide arity and build the positional argument tuple."""
        if not arguments:
            return DispatchArity.ZERO, ()

        if len(arguments) == 1:
            (bound,) = arguments.values()
            return DispatchArity.UNARY, (bound.value,)

        # Precedence filters and orders; absent keys leave no gap
        positional: List = [
            arguments[key].value
            for key in action.argument_precedence
            if key in arguments
        ]
        return DispatchArity.NARY, tuple(positional)
