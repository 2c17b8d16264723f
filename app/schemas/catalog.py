from datetime import date
from typing import List, Optional

from pydantic import BaseModel
from pydantic.config import ConfigDict


class Genre(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class Episode(BaseModel):
    id: int
    serie_id: int
    season_id: int
    name: str
    number: int
    air_date: Optional[date] = None
    overview: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class Season(BaseModel):
    id: int
    serie_id: int
    name: str
    number: int
    air_date: Optional[date] = None
    overview: Optional[str] = None
    poster: str

    model_config = ConfigDict(from_attributes=True)


class SeasonDetail(Season):
    episodes: List[Episode] = []


class Serie(BaseModel):
    id: int
    name: str
    air_date: Optional[date] = None
    in_production: bool
    tagline: Optional[str] = None
    image: str
    description: Optional[str] = None
    language: str
    network: Optional[str] = None
    url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SerieDetail(Serie):
    """A serie with its genres, seasons and rating summary.

    ``rating`` and ``state`` belong to the requesting user and are only
    present when the request was authenticated.
    """

    genres: List[Genre] = []
    seasons: List[Season] = []
    averagerating: Optional[float] = None
    ratingcount: int = 0
    rating: Optional[int] = None
    state: Optional[str] = None
