from typing import Any, Dict

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_user_command_repo import IUserCommandRepo


class SyncUserDeletionUseCase:
    def __init__(self, *, user_command_repo: IUserCommandRepo) -> None:
        self.user_command_repo = user_command_repo

    @Logger.io
    async def execute(self, *, payload: Dict[str, Any]) -> bool:
        return await self.user_command_repo.delete(user_id=payload['id'])
