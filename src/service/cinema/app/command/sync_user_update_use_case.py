from typing import Any, Dict

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_user_command_repo import IUserCommandRepo
from src.service.cinema.domain.entity.user_entity import UserEntity


class SyncUserUpdateUseCase:
    def __init__(self, *, user_command_repo: IUserCommandRepo) -> None:
        self.user_command_repo = user_command_repo

    @Logger.io
    async def execute(self, *, payload: Dict[str, Any]) -> bool:
        """Returns False (and changes nothing) when the user is unknown locally."""
        user = UserEntity.from_clerk_payload(payload)
        updated = await self.user_command_repo.update(user=user)
        if not updated:
            Logger.base.info(f'ℹ️  [USER-SYNC] {user.id} not found, update skipped')
        return updated
