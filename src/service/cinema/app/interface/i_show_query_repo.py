from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.service.cinema.domain.entity.show_entity import ShowEntity
from src.service.cinema.domain.value_object.show_details import ShowDetails


class IShowQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, show_id: str) -> Optional[ShowEntity]:
        pass

    @abstractmethod
    async def list_starting_between_with_movie(
        self, *, start: datetime, end: datetime
    ) -> List[ShowDetails]:
        """Shows with start time in [start, end], inclusive on both ends"""
        pass
