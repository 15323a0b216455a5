from abc import ABC, abstractmethod
from typing import List

from src.service.cinema.domain.entity.movie_entity import MovieEntity


class IMovieQueryRepo(ABC):
    @abstractmethod
    async def list_by_ids(self, *, movie_ids: List[str]) -> List[MovieEntity]:
        """Unknown ids are skipped"""
        pass
