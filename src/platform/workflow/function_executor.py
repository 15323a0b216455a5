"""
Function Executor

Invokes durable function handlers for a run and records the outcome:

- handler returns           -> COMPLETED with its (JSON) output
- step.sleep_until suspends -> SLEEPING until wake_at (the poller resumes it)
- handler raises            -> QUEUED for retry with exponential backoff, or
                               FAILED once WORKFLOW_MAX_ATTEMPTS is reached

While the handler runs a heartbeat keeps extending the run's lease, so the
poller never reclaims a run that is still making progress. If the lease is
lost anyway (the heartbeat could not reach the database in time), every
write of this execution is rejected and the handler is cancelled.

Failed runs keep the error text; that row is the failure log for event flows.
"""

from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

import anyio
from anyio import CancelScope

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.platform.workflow.durable_function import DurableFunction, FunctionRegistry
from src.platform.workflow.function_run import (
    FunctionEvent,
    FunctionRun,
    LeaseLostError,
    RunStatus,
    utc_now,
)
from src.platform.workflow.i_function_run_repo import IFunctionRunRepo
from src.platform.workflow.step_context import SleepInterrupt, StepContext, to_json_compatible


class FunctionExecutor:
    def __init__(
        self,
        *,
        registry: FunctionRegistry,
        run_repo: IFunctionRunRepo,
        max_attempts: int,
        retry_backoff_seconds: float,
        lease_seconds: int,
        heartbeat_seconds: Optional[float] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.registry = registry
        self.run_repo = run_repo
        self.max_attempts = max_attempts
        self.retry_backoff_seconds = retry_backoff_seconds
        self.lease_seconds = lease_seconds
        self.heartbeat_seconds = heartbeat_seconds or lease_seconds / 3
        self._clock = clock

    @Logger.io
    async def dispatch(self, event: FunctionEvent) -> List[FunctionRun]:
        """Start one run per function subscribed to the event and execute it now."""
        functions = self.registry.for_event(event.name)
        if not functions:
            Logger.base.warning(f'⚠️  [WORKFLOW] No function subscribed to {event.name}')
            return []

        runs: List[FunctionRun] = []
        for function in functions:
            run = FunctionRun.for_event(
                function_id=function.function_id,
                event=event,
                lease_until=self._clock() + timedelta(seconds=self.lease_seconds),
            )
            if not await self.run_repo.create(run):
                Logger.base.info(f'⏭️  [WORKFLOW] Run {run.id} already exists, duplicate delivery')
                continue
            runs.append(await self.execute(run))
        return runs

    async def execute(self, run: FunctionRun) -> FunctionRun:
        with Logger.run_context(run.id):
            try:
                return await self._execute(run)
            except LeaseLostError:
                metrics.record_function_run(function_id=run.function_id, outcome='lease_lost')
                Logger.base.warning(
                    f'🔒 [WORKFLOW] {run.id} was reclaimed by another worker, '
                    'dropping this execution'
                )
                return run

    async def _execute(self, run: FunctionRun) -> FunctionRun:
        function = self.registry.get(run.function_id)
        step = StepContext(run=run, run_repo=self.run_repo, clock=self._clock)
        Logger.base.info(
            f'▶️  [WORKFLOW] {run.function_id} run={run.id} attempt={run.attempt + 1}'
        )

        try:
            output = to_json_compatible(await self._invoke(run, function, step))
        except SleepInterrupt as interrupt:
            await self.run_repo.mark_sleeping(
                run_id=run.id, lease_token=run.lease_token, wake_at=interrupt.wake_at
            )
            run.status, run.wake_at = RunStatus.SLEEPING, interrupt.wake_at
            metrics.record_function_run(function_id=run.function_id, outcome='sleeping')
            Logger.base.info(f'💤 [WORKFLOW] {run.id} sleeping until {interrupt.wake_at}')
            return run
        except LeaseLostError:
            raise
        except Exception as e:
            return await self._record_failure(run, e)

        await self.run_repo.mark_completed(
            run_id=run.id, lease_token=run.lease_token, output=output
        )
        run.status, run.output = RunStatus.COMPLETED, output
        metrics.record_function_run(function_id=run.function_id, outcome='completed')
        Logger.base.info(f'✅ [WORKFLOW] {run.id} completed')
        return run

    async def _invoke(self, run: FunctionRun, function: DurableFunction, step: StepContext) -> Any:
        outcome: Dict[str, Any] = {}
        async with anyio.create_task_group() as tg:
            tg.start_soon(self._heartbeat, run, tg.cancel_scope)
            try:
                outcome['output'] = await function.handler(event=run.event, step=step)
            except Exception as e:
                outcome['error'] = e
            tg.cancel_scope.cancel()

        if 'error' in outcome:
            raise outcome['error']
        if 'output' not in outcome:
            # Cancelled by the heartbeat
            raise LeaseLostError(run.id)
        return outcome['output']

    async def _heartbeat(self, run: FunctionRun, scope: CancelScope) -> None:
        while True:
            await anyio.sleep(self.heartbeat_seconds)
            lease_until = self._clock() + timedelta(seconds=self.lease_seconds)
            try:
                await self.run_repo.renew_lease(
                    run_id=run.id, lease_token=run.lease_token, lease_until=lease_until
                )
            except LeaseLostError:
                Logger.base.warning(f'🔒 [WORKFLOW] {run.id} lease lost, cancelling handler')
                scope.cancel()
                return
            except Exception as e:
                # Retried on the next beat; the lease still covers several beats
                Logger.base.warning(f'⚠️  [WORKFLOW] {run.id} lease renewal failed: {e}')
                continue
            run.lease_until = lease_until

    async def _record_failure(self, run: FunctionRun, exc: Exception) -> FunctionRun:
        attempt = run.attempt + 1
        error = f'{type(exc).__name__}: {exc}'
        run.attempt, run.error = attempt, error

        if attempt < self.max_attempts:
            wake_at = self._clock() + timedelta(
                seconds=self.retry_backoff_seconds * 2 ** (attempt - 1)
            )
            await self.run_repo.schedule_retry(
                run_id=run.id,
                lease_token=run.lease_token,
                attempt=attempt,
                wake_at=wake_at,
                error=error,
            )
            run.status, run.wake_at = RunStatus.QUEUED, wake_at
            metrics.record_function_run(function_id=run.function_id, outcome='retrying')
            Logger.base.warning(
                f'🔁 [WORKFLOW] {run.id} failed ({attempt}/{self.max_attempts}), '
                f'retry at {wake_at}: {error}'
            )
            return run

        await self.run_repo.mark_failed(
            run_id=run.id, lease_token=run.lease_token, attempt=attempt, error=error
        )
        run.status = RunStatus.FAILED
        metrics.record_function_run(function_id=run.function_id, outcome='failed')
        Logger.base.opt(exception=exc).error(
            f'❌ [WORKFLOW] {run.id} failed permanently after {attempt} attempt(s): {error}'
        )
        return run
