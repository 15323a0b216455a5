import copy
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pytest

from src.platform.workflow.function_run import (
    FunctionRun,
    LeaseLostError,
    RunStatus,
    new_lease_token,
)
from src.platform.workflow.i_function_run_repo import IFunctionRunRepo


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class InMemoryFunctionRunRepo(IFunctionRunRepo):
    """Stores copies, so callers only see what was explicitly persisted."""

    def __init__(self) -> None:
        self.runs: Dict[str, FunctionRun] = {}

    def _owned(self, run_id: str, lease_token: Optional[str]) -> FunctionRun:
        run = self.runs[run_id]
        if run.lease_token != lease_token:
            raise LeaseLostError(run_id)
        return run

    async def create(self, run: FunctionRun) -> bool:
        if run.id in self.runs:
            return False
        self.runs[run.id] = copy.deepcopy(run)
        return True

    async def get(self, *, run_id: str) -> Optional[FunctionRun]:
        run = self.runs.get(run_id)
        return copy.deepcopy(run) if run else None

    async def save_step(
        self, *, run_id: str, lease_token: Optional[str], step_id: str, output: Any
    ) -> None:
        self._owned(run_id, lease_token).steps[step_id] = copy.deepcopy(output)

    async def renew_lease(
        self, *, run_id: str, lease_token: Optional[str], lease_until: datetime
    ) -> None:
        self._owned(run_id, lease_token).lease_until = lease_until

    async def mark_sleeping(
        self, *, run_id: str, lease_token: Optional[str], wake_at: datetime
    ) -> None:
        run = self._owned(run_id, lease_token)
        run.status, run.wake_at = RunStatus.SLEEPING, wake_at
        run.lease_until = run.lease_token = None

    async def mark_completed(self, *, run_id: str, lease_token: Optional[str], output: Any) -> None:
        run = self._owned(run_id, lease_token)
        run.status, run.output = RunStatus.COMPLETED, output
        run.lease_until = run.lease_token = None

    async def mark_failed(
        self, *, run_id: str, lease_token: Optional[str], attempt: int, error: str
    ) -> None:
        run = self._owned(run_id, lease_token)
        run.status, run.attempt, run.error = RunStatus.FAILED, attempt, error
        run.lease_until = run.lease_token = None

    async def schedule_retry(
        self,
        *,
        run_id: str,
        lease_token: Optional[str],
        attempt: int,
        wake_at: datetime,
        error: str,
    ) -> None:
        run = self._owned(run_id, lease_token)
        run.status, run.attempt, run.wake_at, run.error = RunStatus.QUEUED, attempt, wake_at, error
        run.lease_until = run.lease_token = None

    async def claim_due(
        self, *, now: datetime, limit: int, lease_seconds: int
    ) -> List[FunctionRun]:
        claimed: List[FunctionRun] = []
        for run in self.runs.values():
            if len(claimed) >= limit:
                break
            waiting = run.status in (RunStatus.QUEUED, RunStatus.SLEEPING) and (
                run.wake_at is not None and run.wake_at <= now
            )
            abandoned = run.status == RunStatus.RUNNING and (
                run.lease_until is not None and run.lease_until < now
            )
            if waiting or abandoned:
                run.status = RunStatus.RUNNING
                run.lease_until = now + timedelta(seconds=lease_seconds)
                run.lease_token = new_lease_token()
                claimed.append(copy.deepcopy(run))
        return claimed


@pytest.fixture
def clock(fixed_now: datetime) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def run_repo() -> InMemoryFunctionRunRepo:
    return InMemoryFunctionRunRepo()
