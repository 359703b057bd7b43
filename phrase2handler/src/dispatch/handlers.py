"""
Handler Descriptors - Declared call shapes for action handlers.

A handler never gets picked by inspecting a function signature. Each
registered handler states the call shapes it accepts as data (arity and
ordered parameter types), and dispatch selects a callable by exact shape
match.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

# Ordered parameter types of one call, e.g. (str, float)
CallShape = Tuple[type, ...]


def describe_shape(shape: CallShape) -> str:
    """Human-readable form of a call shape, e.g. '(str, float)'."""
    return "(" + ", ".join(t.__name__ for t in shape) + ")"


class Invocable(ABC):
    """Abstract base class for a registered action handler."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def resolve(self, shape: CallShape) -> Optional[Callable[..., Any]]:
        """
        Select the callable that accepts exactly this call shape.

        Args:
            shape: Types of the positional arguments about to be passed

        Returns:
            The callable to invoke, or None if no declared shape matches
        """
        pass

    @abstractmethod
    def shapes(self) -> List[CallShape]:
        """Declared call shapes (for reporting)."""
        pass

    def __repr__(self) -> str:
        declared = ", ".join(describe_shape(s) for s in self.shapes())
        return f"{type(self).__name__}({self.name!r}, shapes=[{declared}])"


class NullaryHandler(Invocable):
    """A handler that takes no arguments."""

    def __init__(self, name: str, func: Callable[[], Any]):
        super().__init__(name)
        self.func = func

    def resolve(self, shape: CallShape) -> Optional[Callable[..., Any]]:
        return self.func if len(shape) == 0 else None

    def shapes(self) -> List[CallShape]:
        return [()]


class UnaryHandler(Invocable):
    """
    A handler that takes a single argument.

    If param_type is None the handler accepts one argument of any type;
    this is how a handler receives a collection argument or a value whose
    type is decided by configuration.
    """

    def __init__(self, name: str, func: Callable[[Any], Any], param_type: Optional[type] = None):
        super().__init__(name)
        self.func = func
        self.param_type = param_type

    def resolve(self, shape: CallShape) -> Optional[Callable[..., Any]]:
        if len(shape) != 1:
            return None
        if self.param_type is not None and shape[0] is not self.param_type:
            return None
        return self.func

    def shapes(self) -> List[CallShape]:
        return [(self.param_type or object,)]


class TypedHandler(Invocable):
    """A handler with a fixed, ordered list of parameter types."""

    def __init__(self, name: str, func: Callable[..., Any], param_types: Iterable[type]):
        super().__init__(name)
        self.func = func
        self.param_types: CallShape = tuple(param_types)

    def resolve(self, shape: CallShape) -> Optional[Callable[..., Any]]:
        if len(shape) != len(self.param_types):
            return None
        # Exact type identity: bool does not match int, np.int32 does not match int
        if all(actual is declared for actual, declared in zip(shape, self.param_types)):
            return self.func
        return None

    def shapes(self) -> List[CallShape]:
        return [self.param_types]


class OverloadSet(Invocable):
    """
    Several call shapes registered under one handler name.

    The first member that resolves a shape wins, so members should be
    registered from most to least specific.
    """

    def __init__(self, name: str, overloads: Optional[Iterable[Invocable]] = None):
        super().__init__(name)
        self.overloads: List[Invocable] = list(overloads or [])

    def add(self, overload: Invocable) -> "OverloadSet":
        self.overloads.append(overload)
        return self

    def resolve(self, shape: CallShape) -> Optional[Callable[..., Any]]:
        for overload in self.overloads:
            func = overload.resolve(shape)
            if func is not None:
                return func
        return None

    def shapes(self) -> List[CallShape]:
        return [s for overload in self.overloads for s in overload.shapes()]


class HandlerRegistry:
    """
    Name -> Invocable mapping used to resolve handler references in
    vocabulary configuration.

    Example:
        handlers = HandlerRegistry()
        handlers.register(TypedHandler("move", robot.move, (str, float)))
        vocab = ActionVocabulary.load(config, handlers=handlers)
    """

    def __init__(self, handlers: Optional[Iterable[Invocable]] = None):
        self._handlers: Dict[str, Invocable] = {}
        for handler in handlers or []:
            self.register(handler)

    def register(self, handler: Invocable) -> Invocable:
        """Register a handler under its name (last registration wins)."""
        if handler.name in self._handlers:
            logger.warning(f"Handler '{handler.name}' registered twice - replacing previous entry")
        self._handlers[handler.name] = handler
        logger.debug(f"Registered handler: {handler!r}")
        return handler

    def get(self, name: str) -> Optional[Invocable]:
        return self._handlers.get(name)

    def get_all_names(self) -> List[str]:
        return list(self._handlers.keys())

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, name: str) -> bool:
        return name in self._handlers

    def __repr__(self) -> str:
        return f"HandlerRegistry(handlers={self.get_all_names()})"
