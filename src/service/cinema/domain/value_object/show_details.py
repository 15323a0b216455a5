from typing import Optional

import attrs

from src.service.cinema.domain.entity.booking_entity import BookingEntity
from src.service.cinema.domain.entity.movie_entity import MovieEntity
from src.service.cinema.domain.entity.show_entity import ShowEntity


@attrs.define
class ShowDetails:
    """Show with its movie joined; movie is None when the reference is dangling."""

    show: ShowEntity
    movie: Optional[MovieEntity] = None


@attrs.define
class BookingDetails:
    booking: BookingEntity
    show: Optional[ShowEntity] = None
    movie: Optional[MovieEntity] = None
