"""
Unit test fixtures for the cinema service

Ports are AsyncMocks; the two stateful ones (users, Clerk metadata) get small
in-memory fakes so sequences of calls can be asserted on the final state.
"""

from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from src.platform.exception.exceptions import ConflictError
from src.platform.workflow.step_context import IStepContext, to_json_compatible
from src.service.cinema.app.interface.i_identity_provider import IIdentityProvider
from src.service.cinema.app.interface.i_user_command_repo import IUserCommandRepo
from src.service.cinema.app.interface.i_user_query_repo import IUserQueryRepo
from src.service.cinema.domain.entity.user_entity import UserEntity


class RecordingStep(IStepContext):
    """Runs steps inline and records them; sleeps never suspend."""

    def __init__(self) -> None:
        self.steps: Dict[str, Any] = {}
        self.sleeps: Dict[str, datetime] = {}

    async def run(self, step_id: str, fn: Callable[[], Awaitable[Any]]) -> Any:
        if step_id not in self.steps:
            self.steps[step_id] = to_json_compatible(await fn())
        return self.steps[step_id]

    async def sleep_until(self, step_id: str, until: datetime) -> None:
        self.sleeps[step_id] = until


class InMemoryUserRepo(IUserCommandRepo, IUserQueryRepo):
    def __init__(self) -> None:
        self.users: Dict[str, UserEntity] = {}

    async def create(self, *, user: UserEntity) -> UserEntity:
        if user.id in self.users:
            raise ConflictError(f'User {user.id} already exists')
        self.users[user.id] = user
        return user

    async def update(self, *, user: UserEntity) -> bool:
        if user.id not in self.users:
            return False
        self.users[user.id] = user
        return True

    async def delete(self, *, user_id: str) -> bool:
        return self.users.pop(user_id, None) is not None

    async def get_by_id(self, *, user_id: str) -> Optional[UserEntity]:
        return self.users.get(user_id)

    async def list_by_ids(self, *, user_ids: List[str]) -> List[UserEntity]:
        return [self.users[user_id] for user_id in user_ids if user_id in self.users]

    async def list_all(self) -> List[UserEntity]:
        return list(self.users.values())


class InMemoryIdentityProvider(IIdentityProvider):
    def __init__(self) -> None:
        self.metadata: Dict[str, Dict[str, Any]] = {}

    async def get_private_metadata(self, *, user_id: str) -> Dict[str, Any]:
        return dict(self.metadata.get(user_id, {}))

    async def update_private_metadata(self, *, user_id: str, metadata: Dict[str, Any]) -> None:
        self.metadata[user_id] = dict(metadata)


@pytest.fixture
def step() -> RecordingStep:
    return RecordingStep()


@pytest.fixture
def user_repo() -> InMemoryUserRepo:
    return InMemoryUserRepo()


@pytest.fixture
def identity_provider() -> InMemoryIdentityProvider:
    return InMemoryIdentityProvider()


@pytest.fixture
def email_sender() -> AsyncMock:
    sender = AsyncMock()
    sender.send_email = AsyncMock(return_value=None)
    return sender
