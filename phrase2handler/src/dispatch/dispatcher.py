"""
Handler Dispatcher - Invokes the handlers of a resolved action.

Every handler registered for the action is attempted independently:
- zero arguments: called with nothing
- one argument: called with the bound value directly
- N arguments: the handler's declared call shapes are matched exactly
  against the types of the positional list; no match is reported and
  that handler is skipped

Exceptions raised inside a handler are not caught here.
"""

import logging

from ..binding.result import DispatchArity, DispatchResult, DispatchState
from .handlers import Invocable, CallShape, describe_shape

logger = logging.getLogger(__name__)


class HandlerResolutionError(Exception):
    """
    No declared call shape of a handler matches the bound arguments.

    Reported on the DispatchResult; the handler is skipped and sibling
    handlers for the same action are still attempted.
    """

    def __init__(self, action: str, handler: str, attempted: CallShape):
        self.action = action
        self.handler = handler
        self.attempted = tuple(attempted)
        super().__init__(
            f"Did not find a call shape {describe_shape(self.attempted)} on handler "
            f"'{handler}' for action '{action}', check argument configuration."
        )


class HandlerDispatcher:
    """
    Dispatches a bound phrase event to its action's handlers.

    Example:
        result = binder.bind(meanings)
        if result.fired:
            dispatcher.dispatch(result)
    """

    def dispatch(self, result: DispatchResult) -> DispatchResult:
        """
        Invoke every handler of the resolved action.

        Args:
            result: Output of ArgumentBinder.bind()

        Returns:
            The same result with `invoked` and `errors` filled in
        """
        if result.action is None:
            return result

        result.state = DispatchState.DISPATCHING
        shape: CallShape = result.call_shape

        for handler in result.action.handlers:
            self._dispatch_one(handler, result, shape)

        result.state = DispatchState.IDLE
        return result

    def _dispatch_one(self, handler: Invocable, result: DispatchResult, shape: CallShape) -> None:
        action_name = result.action.trigger_keyword
        func = handler.resolve(shape)

        if func is None:
            if result.arity is DispatchArity.NARY:
                error = HandlerResolutionError(action_name, handler.name, shape)
                logger.warning(str(error))
                result.errors.append(error)
            else:
                # Zero/one argument calls do not require a receiver
                logger.debug(
                    f"Handler '{handler.name}' does not accept {describe_shape(shape)} - skipped"
                )
            return

        logger.debug(f"Invoking '{handler.name}' for '{action_name}' with {result.positional_args!r}")
        func(*result.positional_args)
        result.invoked.append(handler.name)

