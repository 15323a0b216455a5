from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

import orjson

from src.platform.logging.loguru_io import Logger
from src.platform.workflow.function_run import FunctionRun, utc_now
from src.platform.workflow.i_function_run_repo import IFunctionRunRepo


class SleepInterrupt(Exception):
    """Raised by sleep_until to suspend the run; the executor persists wake_at."""

    def __init__(self, *, step_id: str, wake_at: datetime) -> None:
        self.step_id = step_id
        self.wake_at = wake_at
        super().__init__(f'{step_id} sleeping until {wake_at.isoformat()}')


def to_json_compatible(value: Any) -> Any:
    """Step outputs are replayed from JSON, so first run and replay see the same shape."""
    return orjson.loads(orjson.dumps(value))


class IStepContext(ABC):
    @abstractmethod
    async def run(self, step_id: str, fn: Callable[[], Awaitable[Any]]) -> Any:
        """Execute fn once per run; later invocations return the memoized output."""
        pass

    @abstractmethod
    async def sleep_until(self, step_id: str, until: datetime) -> None:
        """Suspend the run until `until`; a no-op once that time has passed."""
        pass


class StepContext(IStepContext):
    def __init__(
        self,
        *,
        run: FunctionRun,
        run_repo: IFunctionRunRepo,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._run = run
        self._run_repo = run_repo
        self._clock = clock

    async def run(self, step_id: str, fn: Callable[[], Awaitable[Any]]) -> Any:
        if step_id in self._run.steps:
            Logger.base.debug(f'⏭️  [STEP] {self._run.id}/{step_id} memoized, skipping')
            return self._run.steps[step_id]

        output = to_json_compatible(await fn())
        await self._memoize(step_id, output)
        return output

    async def sleep_until(self, step_id: str, until: datetime) -> None:
        if step_id in self._run.steps:
            wake_at = datetime.fromisoformat(self._run.steps[step_id])
        else:
            wake_at = until if until.tzinfo else until.replace(tzinfo=timezone.utc)
            await self._memoize(step_id, wake_at.isoformat())

        if self._clock() < wake_at:
            raise SleepInterrupt(step_id=step_id, wake_at=wake_at)

    async def _memoize(self, step_id: str, output: Any) -> None:
        await self._run_repo.save_step(
            run_id=self._run.id, lease_token=self._run.lease_token, step_id=step_id, output=output
        )
        self._run.steps[step_id] = output
