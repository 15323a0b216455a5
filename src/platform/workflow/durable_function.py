from typing import Any, Awaitable, Dict, List, Optional, Protocol

import attrs

from src.platform.workflow.function_run import FunctionEvent
from src.platform.workflow.step_context import IStepContext


class FunctionHandler(Protocol):
    def __call__(self, *, event: FunctionEvent, step: IStepContext) -> Awaitable[Any]: ...


@attrs.define(frozen=True)
class DurableFunction:
    function_id: str
    handler: FunctionHandler
    event: Optional[str] = None
    cron_interval_hours: Optional[int] = None

    def __attrs_post_init__(self) -> None:
        if (self.event is None) == (self.cron_interval_hours is None):
            raise ValueError(
                f'{self.function_id}: exactly one of event or cron_interval_hours is required'
            )


class FunctionRegistry:
    def __init__(self, functions: List[DurableFunction] | None = None) -> None:
        self._functions: Dict[str, DurableFunction] = {}
        for function in functions or []:
            self.register(function)

    def register(self, function: DurableFunction) -> None:
        if function.function_id in self._functions:
            raise ValueError(f'Duplicate function id: {function.function_id}')
        self._functions[function.function_id] = function

    def get(self, function_id: str) -> DurableFunction:
        try:
            return self._functions[function_id]
        except KeyError:
            raise LookupError(f'Unknown function id: {function_id}') from None

    def for_event(self, event_name: str) -> List[DurableFunction]:
        return [f for f in self._functions.values() if f.event == event_name]

    def cron_functions(self) -> List[DurableFunction]:
        return [f for f in self._functions.values() if f.cron_interval_hours is not None]

    def event_names(self) -> List[str]:
        return sorted({f.event for f in self._functions.values() if f.event is not None})
