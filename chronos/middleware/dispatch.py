"""Dispatch middleware translating actions into chronos calls.

The middleware sits in a host's action pipeline. Measure actions are applied
to its chronos context, then every action, measure or not, is handed to the
next handler unchanged.
"""

from typing import Any, Callable, Mapping, Optional, Union

from chronos.core.errors import InvalidActionError, InvalidSinkError, MissingSinkError
from chronos.core.logging import get_logger
from chronos.services.context import Chronos
from chronos.services.null_chronos import NullChronos
from .actions import Action, ActionType

logger = get_logger(__name__)

ActionLike = Union[Action, Mapping[str, Any]]
NextHandler = Callable[[Any], Any]


class ChronosMiddleware:
    """Middleware that applies measure actions to a chronos context.

    A sink is required up front: a middleware that measures but can never
    deliver would silently lose every record.
    """

    def __init__(self, sink: Optional[Callable] = None, chronos: Optional[Union[Chronos, NullChronos]] = None,
                 **options: Any):
        """
        Initialize the middleware.

        Args:
            sink: Callable receiving delivered records
            chronos: Existing context to drive instead of building one
            **options: Extra Chronos constructor options
        """
        if sink is None:
            raise MissingSinkError("Undefined chronos sink")
        if not callable(sink):
            raise InvalidSinkError("Chronos sink should be callable")

        if chronos is None:
            chronos = Chronos(sink=sink, **options)
        else:
            chronos.set_sink(sink)
        self.chronos = chronos

    def dispatch(self, action: ActionLike, call_next: NextHandler) -> Any:
        """Apply a measure action, then pass the action on.

        Args:
            action: Action model or mapping with a ``type`` key
            call_next: Next handler in the pipeline

        Returns:
            Whatever the next handler returns
        """
        parsed = action if isinstance(action, Action) else self._parse(action)
        if parsed is not None:
            self._apply(parsed)
        return call_next(action)

    def __call__(self, call_next: NextHandler) -> NextHandler:
        """Wrap a handler so it can be chained like any other middleware."""
        def handler(action: ActionLike) -> Any:
            return self.dispatch(action, call_next)
        return handler

    def _parse(self, action: Any) -> Optional[Action]:
        if not isinstance(action, Mapping) or "type" not in action:
            return None
        return Action.model_validate(dict(action))

    def _apply(self, action: Action) -> None:
        try:
            action_type = ActionType(action.type)
        except ValueError:
            return

        name = action.measure_name
        if not name:
            raise InvalidActionError(f"Action {action.type} is missing a measure name")

        if action_type is ActionType.PERFORMANCE_START_MEASURE:
            self.chronos.start(name, action.measure_data, action.target_duration)
        elif action_type is ActionType.PERFORMANCE_STOP_MEASURE:
            self.chronos.stop(name)
        elif action_type is ActionType.PERFORMANCE_MEASURE_FROM_EVENT:
            if not action.event_name:
                raise InvalidActionError(f"Action {action.type} is missing an event name")
            self.chronos.measure_from_event(name, action.event_name, action.measure_data)
        elif action_type is ActionType.PERFORMANCE_MEASURE_FROM_NAVIGATION_START:
            self.chronos.measure_from_navigation_start(name, action.measure_data)
        logger.debug(f"Applied {action_type.value} for {name}")
