from abc import ABC, abstractmethod

from src.service.cinema.domain.entity.user_entity import UserEntity


class IUserCommandRepo(ABC):
    """User Command Repository - write side, fed only by identity-provider events"""

    @abstractmethod
    async def create(self, *, user: UserEntity) -> UserEntity:
        """Insert; a duplicate id raises ConflictError."""
        pass

    @abstractmethod
    async def update(self, *, user: UserEntity) -> bool:
        """Overwrite by id; returns False when no such user exists."""
        pass

    @abstractmethod
    async def delete(self, *, user_id: str) -> bool:
        pass
