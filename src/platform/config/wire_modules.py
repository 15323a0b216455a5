"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.cinema.app.command import toggle_favorite_movie_use_case
from src.service.cinema.app.query import list_favorite_movies_use_case, list_user_bookings_use_case
from src.service.cinema.driving_adapter.http_controller import user_controller


WIRE_MODULES: list[ModuleType] = [
    toggle_favorite_movie_use_case,
    list_favorite_movies_use_case,
    list_user_bookings_use_case,
    user_controller,
]
