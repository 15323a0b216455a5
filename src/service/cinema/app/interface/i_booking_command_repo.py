from abc import ABC, abstractmethod


class IBookingCommandRepo(ABC):
    @abstractmethod
    async def delete(self, *, booking_id: str) -> bool:
        """Returns False when the booking was already gone."""
        pass
