from typing import Any, Dict

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_user_command_repo import IUserCommandRepo
from src.service.cinema.domain.entity.user_entity import UserEntity


class SyncUserCreationUseCase:
    """
    Mirror a newly created Clerk user.

    Clerk emits at most one creation per identity, so a duplicate id is not
    defended against: the ConflictError propagates and the run records it.
    """

    def __init__(self, *, user_command_repo: IUserCommandRepo) -> None:
        self.user_command_repo = user_command_repo

    @Logger.io
    async def execute(self, *, payload: Dict[str, Any]) -> UserEntity:
        user = UserEntity.from_clerk_payload(payload)
        return await self.user_command_repo.create(user=user)
