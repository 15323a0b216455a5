"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.platform.workflow.function_run_model import FunctionRunModel
from src.service.cinema.driven_adapter.model.booking_model import BookingModel
from src.service.cinema.driven_adapter.model.movie_model import MovieModel
from src.service.cinema.driven_adapter.model.show_model import ShowModel
from src.service.cinema.driven_adapter.model.user_model import UserModel

__all__ = [
    'BookingModel',
    'FunctionRunModel',
    'MovieModel',
    'ShowModel',
    'UserModel',
]
