from typing import AsyncContextManager, Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_user_query_repo import IUserQueryRepo
from src.service.cinema.domain.entity.user_entity import UserEntity
from src.service.cinema.driven_adapter.model.user_model import UserModel


class UserQueryRepoImpl(IUserQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @staticmethod
    def _to_entity(user_model: UserModel) -> UserEntity:
        return UserEntity(
            id=user_model.id,
            email=user_model.email,
            name=user_model.name,
            image=user_model.image,
        )

    @Logger.io
    async def get_by_id(self, *, user_id: str) -> Optional[UserEntity]:
        async with self.session_factory() as session:
            user_model = await session.get(UserModel, user_id)
            return self._to_entity(user_model) if user_model else None

    @Logger.io
    async def list_by_ids(self, *, user_ids: List[str]) -> List[UserEntity]:
        if not user_ids:
            return []
        async with self.session_factory() as session:
            result = await session.execute(select(UserModel).where(UserModel.id.in_(user_ids)))
            return [self._to_entity(m) for m in result.scalars().all()]

    @Logger.io
    async def list_all(self) -> List[UserEntity]:
        async with self.session_factory() as session:
            result = await session.execute(select(UserModel).order_by(UserModel.created_at))
            return [self._to_entity(m) for m in result.scalars().all()]
