from datetime import datetime, timedelta
from typing import Any, AsyncContextManager, Callable, List, Optional

from sqlalchemy import and_, or_, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.workflow.function_run import (
    FunctionEvent,
    FunctionRun,
    LeaseLostError,
    RunStatus,
    new_lease_token,
)
from src.platform.workflow.function_run_model import FunctionRunModel
from src.platform.workflow.i_function_run_repo import IFunctionRunRepo


class FunctionRunRepoImpl(IFunctionRunRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @staticmethod
    def _to_entity(model: FunctionRunModel) -> FunctionRun:
        return FunctionRun(
            id=model.id,
            function_id=model.function_id,
            event=FunctionEvent(
                name=model.event_name,
                data=model.event_data or {},
                id=model.event_id,
                ts=model.event_ts,
            ),
            status=RunStatus(model.status),
            attempt=model.attempt,
            steps=dict(model.steps or {}),
            wake_at=model.wake_at,
            lease_until=model.lease_until,
            lease_token=model.lease_token,
            output=model.output,
            error=model.error,
        )

    @Logger.io
    async def create(self, run: FunctionRun) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                insert(FunctionRunModel)
                .values(
                    id=run.id,
                    function_id=run.function_id,
                    event_name=run.event.name,
                    event_id=run.event.id,
                    event_data=run.event.data,
                    event_ts=run.event.ts,
                    status=run.status.value,
                    attempt=run.attempt,
                    steps=run.steps,
                    wake_at=run.wake_at,
                    lease_until=run.lease_until,
                    lease_token=run.lease_token,
                )
                .on_conflict_do_nothing(index_elements=[FunctionRunModel.id])
            )
            await session.commit()
            return result.rowcount == 1  # pyright: ignore[reportAttributeAccessIssue]

    @Logger.io
    async def get(self, *, run_id: str) -> Optional[FunctionRun]:
        async with self.session_factory() as session:
            model = await session.get(FunctionRunModel, run_id)
            return self._to_entity(model) if model else None

    @Logger.io
    async def save_step(
        self, *, run_id: str, lease_token: Optional[str], step_id: str, output: Any
    ) -> None:
        async with self.session_factory() as session:
            model = await session.get(FunctionRunModel, run_id, with_for_update=True)
            if model is None:
                raise NotFoundError(f'Function run {run_id} not found')
            if model.lease_token != lease_token:
                raise LeaseLostError(run_id)
            # Reassign so SQLAlchemy sees the JSONB change
            model.steps = {**(model.steps or {}), step_id: output}
            await session.commit()

    async def _update_owned(self, run_id: str, lease_token: Optional[str], **values: Any) -> None:
        async with self.session_factory() as session:
            result = await session.execute(
                update(FunctionRunModel)
                .where(
                    FunctionRunModel.id == run_id,
                    FunctionRunModel.lease_token == lease_token,
                )
                .values(**values)
            )
            if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
                await session.rollback()
                raise LeaseLostError(run_id)
            await session.commit()

    @Logger.io
    async def renew_lease(
        self, *, run_id: str, lease_token: Optional[str], lease_until: datetime
    ) -> None:
        await self._update_owned(run_id, lease_token, lease_until=lease_until)

    @Logger.io
    async def mark_sleeping(
        self, *, run_id: str, lease_token: Optional[str], wake_at: datetime
    ) -> None:
        await self._update_owned(
            run_id,
            lease_token,
            status=RunStatus.SLEEPING.value,
            wake_at=wake_at,
            lease_until=None,
            lease_token=None,
        )

    @Logger.io
    async def mark_completed(self, *, run_id: str, lease_token: Optional[str], output: Any) -> None:
        await self._update_owned(
            run_id,
            lease_token,
            status=RunStatus.COMPLETED.value,
            output=output,
            wake_at=None,
            lease_until=None,
            lease_token=None,
            error=None,
        )

    @Logger.io
    async def mark_failed(
        self, *, run_id: str, lease_token: Optional[str], attempt: int, error: str
    ) -> None:
        await self._update_owned(
            run_id,
            lease_token,
            status=RunStatus.FAILED.value,
            attempt=attempt,
            error=error,
            wake_at=None,
            lease_until=None,
            lease_token=None,
        )

    @Logger.io
    async def schedule_retry(
        self,
        *,
        run_id: str,
        lease_token: Optional[str],
        attempt: int,
        wake_at: datetime,
        error: str,
    ) -> None:
        await self._update_owned(
            run_id,
            lease_token,
            status=RunStatus.QUEUED.value,
            attempt=attempt,
            wake_at=wake_at,
            error=error,
            lease_until=None,
            lease_token=None,
        )

    @Logger.io
    async def claim_due(
        self, *, now: datetime, limit: int, lease_seconds: int
    ) -> List[FunctionRun]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(FunctionRunModel)
                .where(
                    or_(
                        and_(
                            FunctionRunModel.status.in_(
                                [RunStatus.QUEUED.value, RunStatus.SLEEPING.value]
                            ),
                            FunctionRunModel.wake_at <= now,
                        ),
                        and_(
                            FunctionRunModel.status == RunStatus.RUNNING.value,
                            FunctionRunModel.lease_until < now,
                        ),
                    )
                )
                .order_by(FunctionRunModel.wake_at)
                .limit(limit)
                .with_for_update(skip_locked=True)
            )
            models = list(result.scalars().all())

            lease_until = now + timedelta(seconds=lease_seconds)
            for model in models:
                model.status = RunStatus.RUNNING.value
                model.lease_until = lease_until
                model.lease_token = new_lease_token()
            await session.commit()

            return [self._to_entity(model) for model in models]
