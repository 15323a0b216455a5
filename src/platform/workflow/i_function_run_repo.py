from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Optional

from src.platform.workflow.function_run import FunctionRun


class IFunctionRunRepo(ABC):
    """
    Persistence of durable function runs (the resumption point survives restarts).

    Writes made while a run executes carry the lease token of the claim they
    belong to and raise LeaseLostError once another worker has reclaimed it.
    """

    @abstractmethod
    async def create(self, run: FunctionRun) -> bool:
        """Insert the run; returns False if a run with the same id already exists."""
        pass

    @abstractmethod
    async def get(self, *, run_id: str) -> Optional[FunctionRun]:
        pass

    @abstractmethod
    async def save_step(
        self, *, run_id: str, lease_token: Optional[str], step_id: str, output: Any
    ) -> None:
        pass

    @abstractmethod
    async def renew_lease(
        self, *, run_id: str, lease_token: Optional[str], lease_until: datetime
    ) -> None:
        pass

    @abstractmethod
    async def mark_sleeping(
        self, *, run_id: str, lease_token: Optional[str], wake_at: datetime
    ) -> None:
        pass

    @abstractmethod
    async def mark_completed(self, *, run_id: str, lease_token: Optional[str], output: Any) -> None:
        pass

    @abstractmethod
    async def mark_failed(
        self, *, run_id: str, lease_token: Optional[str], attempt: int, error: str
    ) -> None:
        pass

    @abstractmethod
    async def schedule_retry(
        self,
        *,
        run_id: str,
        lease_token: Optional[str],
        attempt: int,
        wake_at: datetime,
        error: str,
    ) -> None:
        pass

    @abstractmethod
    async def claim_due(
        self, *, now: datetime, limit: int, lease_seconds: int
    ) -> List[FunctionRun]:
        """
        Claim runs ready to execute and mark them RUNNING until now + lease.

        Due means queued/sleeping with wake_at <= now, or running with an expired
        lease (the worker that held it died or stopped renewing). Each claimed
        run gets a fresh lease token.
        """
        pass
