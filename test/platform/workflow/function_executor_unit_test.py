"""
Unit tests for FunctionExecutor

Covers the run lifecycle:
1. dispatch -> one run per subscribed function, deduplicated by event id
2. handler returns -> COMPLETED
3. step.sleep_until -> SLEEPING, resumed by the poller
4. handler raises -> QUEUED with backoff, FAILED after max attempts
5. lease renewed while a handler runs; a reclaimed run rejects stale writes
"""

from datetime import timedelta
from typing import Any, List, Optional

import anyio
import pytest

from src.platform.workflow.durable_function import DurableFunction, FunctionRegistry
from src.platform.workflow.function_executor import FunctionExecutor
from src.platform.workflow.function_run import FunctionEvent, RunStatus
from src.platform.workflow.run_poller import DurableRunPoller


EVENT = 'app/test.happened'


def _make_executor(
    run_repo,
    clock,
    functions: List[DurableFunction],
    max_attempts: int = 3,
    lease_seconds: int = 60,
    heartbeat_seconds: Optional[float] = None,
):
    return FunctionExecutor(
        registry=FunctionRegistry(functions),
        run_repo=run_repo,
        max_attempts=max_attempts,
        retry_backoff_seconds=10,
        lease_seconds=lease_seconds,
        heartbeat_seconds=heartbeat_seconds,
        clock=clock,
    )


def _make_poller(run_repo, clock, executor: FunctionExecutor) -> DurableRunPoller:
    return DurableRunPoller(
        run_repo=run_repo,
        executor=executor,
        poll_interval_seconds=1,
        batch_size=10,
        lease_seconds=60,
        clock=clock,
    )


@pytest.mark.unit
class TestDispatch:
    @pytest.mark.asyncio
    async def test_completed_run_stores_output(self, run_repo, clock):
        # Arrange
        async def handler(*, event, step) -> Any:
            return {'echo': event.data['value']}

        executor = _make_executor(
            run_repo, clock, [DurableFunction(function_id='echo', handler=handler, event=EVENT)]
        )

        # Act
        runs = await executor.dispatch(FunctionEvent(name=EVENT, data={'value': 7}, id='evt-1'))

        # Assert
        assert len(runs) == 1
        assert runs[0].id == 'echo:evt-1'
        assert runs[0].status == RunStatus.COMPLETED
        assert run_repo.runs['echo:evt-1'].output == {'echo': 7}

    @pytest.mark.asyncio
    async def test_unsubscribed_event_starts_nothing(self, run_repo, clock):
        # Arrange
        executor = _make_executor(run_repo, clock, [])

        # Act
        runs = await executor.dispatch(FunctionEvent(name='app/nobody.listens', id='evt-1'))

        # Assert
        assert runs == []
        assert run_repo.runs == {}

    @pytest.mark.asyncio
    async def test_redelivered_event_runs_once(self, run_repo, clock):
        # Arrange
        calls: List[str] = []

        async def handler(*, event, step) -> Any:
            calls.append(event.id)

        executor = _make_executor(
            run_repo, clock, [DurableFunction(function_id='once', handler=handler, event=EVENT)]
        )
        event = FunctionEvent(name=EVENT, id='evt-1')

        # Act
        await executor.dispatch(event)
        second = await executor.dispatch(event)

        # Assert
        assert second == []
        assert calls == ['evt-1']

    @pytest.mark.asyncio
    async def test_every_subscribed_function_gets_its_own_run(self, run_repo, clock):
        # Arrange
        async def handler(*, event, step) -> Any:
            return None

        executor = _make_executor(
            run_repo,
            clock,
            [
                DurableFunction(function_id='first', handler=handler, event=EVENT),
                DurableFunction(function_id='second', handler=handler, event=EVENT),
            ],
        )

        # Act
        runs = await executor.dispatch(FunctionEvent(name=EVENT, id='evt-1'))

        # Assert
        assert sorted(run.id for run in runs) == ['first:evt-1', 'second:evt-1']


@pytest.mark.unit
class TestSleepAndResume:
    @pytest.mark.asyncio
    async def test_sleeping_run_resumes_after_wake_time(self, run_repo, clock):
        # Arrange
        checks: List[str] = []

        async def handler(*, event, step) -> Any:
            await step.sleep_until('wait', event.ts + timedelta(minutes=10))

            async def check() -> str:
                checks.append('checked')
                return 'done'

            return await step.run('check', check)

        executor = _make_executor(
            run_repo, clock, [DurableFunction(function_id='timer', handler=handler, event=EVENT)]
        )
        poller = _make_poller(run_repo, clock, executor)

        # Act
        runs = await executor.dispatch(FunctionEvent(name=EVENT, id='evt-1', ts=clock()))
        early = await poller.poll_once()
        clock.advance(minutes=10)
        resumed = await poller.poll_once()

        # Assert
        assert runs[0].status == RunStatus.SLEEPING
        assert runs[0].wake_at == clock()
        assert early == 0
        assert resumed == 1
        assert checks == ['checked']
        assert run_repo.runs['timer:evt-1'].status == RunStatus.COMPLETED
        assert run_repo.runs['timer:evt-1'].output == 'done'


@pytest.mark.unit
class TestFailureHandling:
    @pytest.mark.asyncio
    async def test_failed_attempt_is_queued_with_backoff(self, run_repo, clock):
        # Arrange
        async def handler(*, event, step) -> Any:
            raise RuntimeError('smtp down')

        executor = _make_executor(
            run_repo, clock, [DurableFunction(function_id='flaky', handler=handler, event=EVENT)]
        )

        # Act
        runs = await executor.dispatch(FunctionEvent(name=EVENT, id='evt-1'))

        # Assert
        stored = run_repo.runs['flaky:evt-1']
        assert runs[0].status == RunStatus.QUEUED
        assert stored.attempt == 1
        assert stored.wake_at == clock() + timedelta(seconds=10)
        assert stored.error == 'RuntimeError: smtp down'

    @pytest.mark.asyncio
    async def test_backoff_doubles_per_attempt(self, run_repo, clock):
        # Arrange
        async def handler(*, event, step) -> Any:
            raise RuntimeError('still down')

        executor = _make_executor(
            run_repo,
            clock,
            [DurableFunction(function_id='flaky', handler=handler, event=EVENT)],
            max_attempts=5,
        )
        poller = _make_poller(run_repo, clock, executor)
        await executor.dispatch(FunctionEvent(name=EVENT, id='evt-1'))

        # Act
        clock.advance(seconds=10)
        await poller.poll_once()

        # Assert
        stored = run_repo.runs['flaky:evt-1']
        assert stored.attempt == 2
        assert stored.wake_at == clock() + timedelta(seconds=20)

    @pytest.mark.asyncio
    async def test_run_fails_permanently_after_max_attempts(self, run_repo, clock):
        # Arrange
        async def handler(*, event, step) -> Any:
            raise RuntimeError('booking store unreachable')

        executor = _make_executor(
            run_repo,
            clock,
            [DurableFunction(function_id='doomed', handler=handler, event=EVENT)],
            max_attempts=2,
        )
        poller = _make_poller(run_repo, clock, executor)
        await executor.dispatch(FunctionEvent(name=EVENT, id='evt-1'))

        # Act
        clock.advance(seconds=10)
        await poller.poll_once()
        clock.advance(hours=1)
        later = await poller.poll_once()

        # Assert
        stored = run_repo.runs['doomed:evt-1']
        assert stored.status == RunStatus.FAILED
        assert stored.attempt == 2
        assert 'booking store unreachable' in stored.error
        assert later == 0

    @pytest.mark.asyncio
    async def test_retry_skips_steps_that_already_succeeded(self, run_repo, clock):
        # Arrange
        sends: List[int] = []
        attempts: List[int] = []

        async def handler(*, event, step) -> Any:
            async def send() -> int:
                sends.append(1)
                return len(sends)

            await step.run('send', send)
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError('crash after send')
            return 'ok'

        executor = _make_executor(
            run_repo, clock, [DurableFunction(function_id='partial', handler=handler, event=EVENT)]
        )
        poller = _make_poller(run_repo, clock, executor)
        await executor.dispatch(FunctionEvent(name=EVENT, id='evt-1'))

        # Act
        clock.advance(seconds=10)
        await poller.poll_once()

        # Assert
        assert len(sends) == 1
        assert run_repo.runs['partial:evt-1'].status == RunStatus.COMPLETED


@pytest.mark.unit
class TestLeaseOwnership:
    @pytest.mark.asyncio
    async def test_long_running_handler_is_not_reclaimed(self, run_repo, clock):
        # Arrange
        calls: List[str] = []
        reclaimed: List[int] = []
        poller_holder: List[DurableRunPoller] = []

        async def handler(*, event, step) -> Any:
            calls.append(event.id)
            clock.advance(seconds=301)
            # Let the heartbeat renew the lease before the poller looks
            await anyio.sleep(0.05)
            reclaimed.append(await poller_holder[0].poll_once())
            return 'sent'

        executor = _make_executor(
            run_repo,
            clock,
            [DurableFunction(function_id='broadcast', handler=handler, event=EVENT)],
            lease_seconds=300,
            heartbeat_seconds=0.01,
        )
        poller_holder.append(_make_poller(run_repo, clock, executor))

        # Act
        runs = await executor.dispatch(FunctionEvent(name=EVENT, id='evt-1'))

        # Assert
        assert calls == ['evt-1']
        assert reclaimed == [0]
        assert runs[0].status == RunStatus.COMPLETED
        assert run_repo.runs['broadcast:evt-1'].output == 'sent'

    @pytest.mark.asyncio
    async def test_reclaimed_run_rejects_outcome_of_stale_worker(self, run_repo, clock):
        # Arrange
        async def handler(*, event, step) -> Any:
            # Another worker claims the run while this one is still busy
            run_repo.runs['slow:evt-1'].lease_token = 'other-worker'
            return 'late'

        executor = _make_executor(
            run_repo, clock, [DurableFunction(function_id='slow', handler=handler, event=EVENT)]
        )

        # Act
        runs = await executor.dispatch(FunctionEvent(name=EVENT, id='evt-1'))

        # Assert
        stored = run_repo.runs['slow:evt-1']
        assert runs[0].status == RunStatus.RUNNING
        assert stored.status == RunStatus.RUNNING
        assert stored.output is None
        assert stored.lease_token == 'other-worker'

    @pytest.mark.asyncio
    async def test_stale_worker_cannot_memoize_steps(self, run_repo, clock):
        # Arrange
        async def handler(*, event, step) -> Any:
            run_repo.runs['slow:evt-1'].lease_token = 'other-worker'

            async def send() -> str:
                return 'sent'

            return await step.run('send', send)

        executor = _make_executor(
            run_repo, clock, [DurableFunction(function_id='slow', handler=handler, event=EVENT)]
        )

        # Act
        await executor.dispatch(FunctionEvent(name=EVENT, id='evt-1'))

        # Assert
        stored = run_repo.runs['slow:evt-1']
        assert stored.steps == {}
        assert stored.attempt == 0
        assert stored.status == RunStatus.RUNNING

    @pytest.mark.asyncio
    async def test_lost_lease_cancels_the_handler(self, run_repo, clock):
        # Arrange
        progress: List[str] = []

        async def handler(*, event, step) -> Any:
            run_repo.runs['slow:evt-1'].lease_token = 'other-worker'
            progress.append('started')
            await anyio.sleep(5)
            progress.append('finished')

        executor = _make_executor(
            run_repo,
            clock,
            [DurableFunction(function_id='slow', handler=handler, event=EVENT)],
            heartbeat_seconds=0.01,
        )

        # Act
        with anyio.fail_after(2):
            await executor.dispatch(FunctionEvent(name=EVENT, id='evt-1'))

        # Assert
        assert progress == ['started']
        assert run_repo.runs['slow:evt-1'].status == RunStatus.RUNNING
