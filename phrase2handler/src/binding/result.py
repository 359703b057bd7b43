"""
Binding Data Structures

Per-event objects produced while resolving a recognized phrase. None of
these outlive the handling of the phrase event that created them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from ..vocabulary.vocabulary import ActionSpec, ArgumentSpec
    from ..dispatch.dispatcher import HandlerResolutionError


@dataclass(frozen=True)
class SemanticMeaning:
    """
    One semantic key and its recognized values, as returned by the grammar.

    Attributes:
        key: Semantic key (e.g. "action", "distance")
        values: Recognized values in recognizer order
    """
    key: str
    values: Tuple[str, ...] = ()

    def __post_init__(self):
        # Accept any sequence but store a tuple
        object.__setattr__(self, "values", tuple(self.values))


@dataclass
class BoundArgument:
    """
    A semantic meaning matched to its declared spec and coerced.

    `value` is a single coerced value, or a list of coerced values when the
    spec is a collection.
    """
    spec: "ArgumentSpec"
    meaning: SemanticMeaning
    value: Any

    @property
    def key(self) -> str:
        return self.spec.key


class DispatchArity(Enum):
    """How the bound arguments are passed to handlers."""
    ZERO = "zero"           # No arguments
    UNARY = "unary"         # The single bound value, passed directly
    NARY = "nary"           # Positional list ordered by argument precedence


class DispatchState(Enum):
    """Per-event handling state."""
    IDLE = "idle"
    PRIMARY_KEY_SCAN = "primary_key_scan"
    ACTION_RESOLVED = "action_resolved"
    NO_ACTION = "no_action"
    ARGUMENT_BINDING = "argument_binding"
    DISPATCHING = "dispatching"
    ABORTED = "aborted"


class ActionResolutionMiss(Exception):
    """
    Why no action fired for a phrase event.

    This is a normal outcome, not a failure: it is recorded on the
    DispatchResult and never raised to the caller.
    """

    NO_PRIMARY_KEY = "no_primary_key"
    UNKNOWN_KEYWORD = "unknown_keyword"

    def __init__(self, reason: str, trigger_keyword: Optional[str] = None):
        self.reason = reason
        self.trigger_keyword = trigger_keyword
        if reason == self.UNKNOWN_KEYWORD:
            message = f"Trigger keyword '{trigger_keyword}' is not in the vocabulary"
        else:
            message = "No primary action value in phrase event"
        super().__init__(message)


@dataclass
class DispatchResult:
    """
    Result of binding (and later dispatching) one phrase event.
    """
    trigger_keyword: Optional[str] = None
    action: Optional["ActionSpec"] = None
    arguments: Dict[str, BoundArgument] = field(default_factory=dict)
    arity: DispatchArity = DispatchArity.ZERO
    positional_args: Tuple[Any, ...] = ()
    state: DispatchState = DispatchState.IDLE

    # Outcome
    miss: Optional[ActionResolutionMiss] = None
    invoked: List[str] = field(default_factory=list)
    errors: List["HandlerResolutionError"] = field(default_factory=list)
    error_stage: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def fired(self) -> bool:
        """True if an action was resolved for the event."""
        return self.action is not None

    @property
    def call_shape(self) -> Tuple[type, ...]:
        """Exact types of the positional arguments."""
        return tuple(type(arg) for arg in self.positional_args)

    def get_values(self) -> Dict[str, Any]:
        """Return mapping from argument key to coerced value."""
        return {key: bound.value for key, bound in self.arguments.items()}

    def to_dict(self) -> Dict[str, Any]:
        """Export result to dictionary."""
        return {
            "trigger_keyword": self.trigger_keyword,
            "action": self.action.trigger_keyword if self.action else None,
            "arguments": {k: repr(v) for k, v in self.get_values().items()},
            "arity": self.arity.value,
            "state": self.state.value,
            "miss": self.miss.reason if self.miss else None,
            "invoked": list(self.invoked),
            "errors": [str(e) for e in self.errors],
            "error_stage": self.error_stage,
            "error_message": self.error_message,
        }


def meanings_from_pairs(pairs: Sequence[Tuple[str, Sequence[str]]]) -> List[SemanticMeaning]:
    """Build SemanticMeanings from (key, values) pairs; a bare string is one value."""
    meanings = []
    for key, values in pairs:
        if isinstance(values, str):
            values = (values,)
        meanings.append(SemanticMeaning(key=key, values=tuple(values)))
    return meanings
