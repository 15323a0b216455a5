from typing import AsyncContextManager, Callable

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_user_command_repo import IUserCommandRepo
from src.service.cinema.domain.entity.user_entity import UserEntity
from src.service.cinema.driven_adapter.model.user_model import UserModel


class UserCommandRepoImpl(IUserCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def create(self, *, user: UserEntity) -> UserEntity:
        async with self.session_factory() as session:
            session.add(UserModel(id=user.id, email=user.email, name=user.name, image=user.image))
            try:
                await session.commit()
            except IntegrityError as e:
                raise ConflictError(f'User {user.id} already exists') from e
            return user

    @Logger.io
    async def update(self, *, user: UserEntity) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                update(UserModel)
                .where(UserModel.id == user.id)
                .values(email=user.email, name=user.name, image=user.image)
            )
            await session.commit()
            return result.rowcount > 0  # pyright: ignore[reportAttributeAccessIssue]

    @Logger.io
    async def delete(self, *, user_id: str) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(delete(UserModel).where(UserModel.id == user_id))
            await session.commit()
            return result.rowcount > 0  # pyright: ignore[reportAttributeAccessIssue]
