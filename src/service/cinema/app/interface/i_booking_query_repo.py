from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.cinema.domain.entity.booking_entity import BookingEntity
from src.service.cinema.domain.value_object.show_details import BookingDetails


class IBookingQueryRepo(ABC):
    """Repository interface for booking read operations"""

    @abstractmethod
    async def get_by_id(self, *, booking_id: str) -> Optional[BookingEntity]:
        pass

    @abstractmethod
    async def get_by_id_with_details(self, *, booking_id: str) -> Optional[BookingDetails]:
        """Booking with its show and the show's movie joined"""
        pass

    @abstractmethod
    async def list_by_user_with_details(self, *, user_id: str) -> List[BookingDetails]:
        """Newest first"""
        pass
