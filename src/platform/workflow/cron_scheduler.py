from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import anyio

from src.platform.logging.loguru_io import Logger
from src.platform.workflow.durable_function import DurableFunction, FunctionRegistry
from src.platform.workflow.function_executor import FunctionExecutor
from src.platform.workflow.function_run import FunctionRun, utc_now
from src.platform.workflow.i_function_run_repo import IFunctionRunRepo


class CronScheduler:
    """
    Fires cron functions at fixed intervals aligned to the epoch (UTC).

    Every 8 hours fires at 00:00, 08:00 and 16:00 UTC. The run id is derived
    from the fire time, so several instances racing on the same tick create a
    single run.
    """

    def __init__(
        self,
        *,
        registry: FunctionRegistry,
        run_repo: IFunctionRunRepo,
        executor: FunctionExecutor,
        lease_seconds: int,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.registry = registry
        self.run_repo = run_repo
        self.executor = executor
        self.lease_seconds = lease_seconds
        self._clock = clock

    @staticmethod
    def next_fire_time(*, now: datetime, interval_hours: int) -> datetime:
        interval = interval_hours * 3600
        next_ts = (int(now.timestamp()) // interval + 1) * interval
        return datetime.fromtimestamp(next_ts, tz=timezone.utc)

    async def fire(self, function: DurableFunction, fire_time: datetime) -> Optional[FunctionRun]:
        run = FunctionRun.for_cron(
            function_id=function.function_id,
            fire_time=fire_time,
            lease_until=self._clock() + timedelta(seconds=self.lease_seconds),
        )
        if not await self.run_repo.create(run):
            Logger.base.info(f'⏭️  [CRON] {run.id} already fired by another instance')
            return None
        return await self.executor.execute(run)

    async def run_forever(self) -> None:
        functions = self.registry.cron_functions()
        Logger.base.info(f'⏰ [CRON] Scheduling {[f.function_id for f in functions]}')
        async with anyio.create_task_group() as tg:
            for function in functions:
                tg.start_soon(self._run_function_schedule, function)

    async def _run_function_schedule(self, function: DurableFunction) -> None:
        assert function.cron_interval_hours is not None
        while True:
            fire_time = self.next_fire_time(
                now=self._clock(), interval_hours=function.cron_interval_hours
            )
            await anyio.sleep(max(0.0, (fire_time - self._clock()).total_seconds()))
            try:
                await self.fire(function, fire_time)
            except Exception as e:
                Logger.base.exception(f'❌ [CRON] {function.function_id} at {fire_time}: {e}')
