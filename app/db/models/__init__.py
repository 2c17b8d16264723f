from app.db.base import Base
from .user import User
from .series import Genre, Serie, series_genres
from .season import Episode, Season
from .tracking import UserSerieRating, UserSerieState

__all__ = [
    "Base",
    "User",
    "Genre",
    "Serie",
    "series_genres",
    "Season",
    "Episode",
    "UserSerieRating",
    "UserSerieState",
]
