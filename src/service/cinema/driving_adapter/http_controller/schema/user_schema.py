from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.service.cinema.domain.entity.movie_entity import MovieEntity
from src.service.cinema.domain.entity.show_entity import ShowEntity
from src.service.cinema.domain.value_object.show_details import BookingDetails


class UpdateFavoriteRequest(BaseModel):
    model_config = ConfigDict(json_schema_extra={'example': {'movieId': '1022789'}})

    movieId: str


class MovieResponse(BaseModel):
    """TMDB style field names, as stored"""

    id: str
    title: str
    overview: str
    poster_path: str
    backdrop_path: str
    release_date: Optional[date] = None
    original_language: Optional[str] = None
    tagline: Optional[str] = None
    genres: List[Dict[str, Any]] = []
    casts: List[Dict[str, Any]] = []
    vote_average: float
    runtime: int

    @classmethod
    def from_entity(cls, movie: MovieEntity) -> 'MovieResponse':
        return cls(
            id=movie.id,
            title=movie.title,
            overview=movie.overview,
            poster_path=movie.poster_path,
            backdrop_path=movie.backdrop_path,
            release_date=movie.release_date,
            original_language=movie.original_language,
            tagline=movie.tagline,
            genres=movie.genres,
            casts=movie.casts,
            vote_average=movie.vote_average,
            runtime=movie.runtime,
        )


class ShowResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    movie: Optional[MovieResponse] = None
    show_date_time: datetime
    show_price: int
    occupied_seats: Dict[str, str] = {}

    @classmethod
    def from_entity(cls, show: ShowEntity, movie: Optional[MovieEntity]) -> 'ShowResponse':
        return cls(
            id=show.id,
            movie=MovieResponse.from_entity(movie) if movie else None,
            show_date_time=show.show_date_time,
            show_price=show.show_price,
            occupied_seats=show.occupied_seats,
        )


class BookingResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    user: str
    show: Optional[ShowResponse] = None
    amount: int
    booked_seats: List[str]
    is_paid: bool
    payment_link: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_details(cls, details: BookingDetails) -> 'BookingResponse':
        booking = details.booking
        return cls(
            id=booking.id,
            user=booking.user_id,
            show=ShowResponse.from_entity(details.show, details.movie) if details.show else None,
            amount=booking.amount,
            booked_seats=booking.booked_seats,
            is_paid=booking.is_paid,
            payment_link=booking.payment_link,
            created_at=booking.created_at,
        )

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', by_alias=True)
