from abc import ABC, abstractmethod
from typing import List


class IShowCommandRepo(ABC):
    @abstractmethod
    async def release_seats(self, *, show_id: str, seats: List[str], holder_id: str) -> int:
        """
        Free those of `seats` still held by `holder_id`, atomically.

        Returns how many seats were freed.
        """
        pass
