from datetime import datetime
from typing import Callable

import anyio

from src.platform.logging.loguru_io import Logger
from src.platform.workflow.function_executor import FunctionExecutor
from src.platform.workflow.function_run import utc_now
from src.platform.workflow.i_function_run_repo import IFunctionRunRepo


class DurableRunPoller:
    """Resumes sleeping runs, retries queued ones and recovers runs whose worker died."""

    def __init__(
        self,
        *,
        run_repo: IFunctionRunRepo,
        executor: FunctionExecutor,
        poll_interval_seconds: float,
        batch_size: int,
        lease_seconds: int,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.run_repo = run_repo
        self.executor = executor
        self.poll_interval_seconds = poll_interval_seconds
        self.batch_size = batch_size
        self.lease_seconds = lease_seconds
        self._clock = clock

    async def poll_once(self) -> int:
        runs = await self.run_repo.claim_due(
            now=self._clock(), limit=self.batch_size, lease_seconds=self.lease_seconds
        )
        for run in runs:
            await self.executor.execute(run)
        return len(runs)

    async def run_forever(self) -> None:
        Logger.base.info(
            f'⏱️  [POLLER] Started (interval={self.poll_interval_seconds}s, batch={self.batch_size})'
        )
        while True:
            try:
                claimed = await self.poll_once()
            except Exception as e:
                Logger.base.exception(f'❌ [POLLER] Poll failed: {e}')
                claimed = 0

            # A full batch means more runs are probably due
            if claimed < self.batch_size:
                await anyio.sleep(self.poll_interval_seconds)
