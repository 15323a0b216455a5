"""
Durable function run state.

A run is one invocation of a DurableFunction for one triggering event (or one
cron fire). Everything needed to resume it after a restart lives on the run:
the event it was triggered by, the memoized step outputs and the time it
should wake up.
"""

from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Optional

import attrs
import uuid_utils


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_lease_token() -> str:
    return str(uuid_utils.uuid7())


class LeaseLostError(Exception):
    """The run was reclaimed by another worker; this worker must stop writing to it."""

    def __init__(self, run_id: str) -> None:
        self.run_id = run_id
        super().__init__(f'Lease on run {run_id} is no longer held')


class RunStatus(StrEnum):
    QUEUED = 'queued'  # waiting for a retry at wake_at
    RUNNING = 'running'  # claimed by a worker until lease_until
    SLEEPING = 'sleeping'  # suspended by step.sleep_until until wake_at
    COMPLETED = 'completed'
    FAILED = 'failed'


CRON_EVENT_NAME = 'cron'


@attrs.define
class FunctionEvent:
    name: str
    data: dict[str, Any] = attrs.field(factory=dict)
    id: Optional[str] = None
    ts: datetime = attrs.field(factory=utc_now)


@attrs.define
class FunctionRun:
    id: str
    function_id: str
    event: FunctionEvent
    status: RunStatus = RunStatus.RUNNING
    attempt: int = 0
    steps: dict[str, Any] = attrs.field(factory=dict)
    wake_at: Optional[datetime] = None
    lease_until: Optional[datetime] = None
    # Fencing token of the current claim; every claim issues a new one
    lease_token: Optional[str] = attrs.field(factory=new_lease_token)
    output: Any = None
    error: Optional[str] = None

    @classmethod
    def for_event(
        cls, *, function_id: str, event: FunctionEvent, lease_until: datetime
    ) -> 'FunctionRun':
        # Redelivery of the same event id maps onto the same run
        run_id = f'{function_id}:{event.id}' if event.id else str(uuid_utils.uuid7())
        return cls(id=run_id, function_id=function_id, event=event, lease_until=lease_until)

    @classmethod
    def for_cron(
        cls, *, function_id: str, fire_time: datetime, lease_until: datetime
    ) -> 'FunctionRun':
        fire_iso = fire_time.isoformat()
        return cls(
            id=f'{function_id}:{fire_iso}',
            function_id=function_id,
            event=FunctionEvent(name=CRON_EVENT_NAME, data={'fired_at': fire_iso}, ts=fire_time),
            lease_until=lease_until,
        )
