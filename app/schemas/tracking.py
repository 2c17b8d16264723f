from pydantic import BaseModel
from pydantic.config import ConfigDict


class Rating(BaseModel):
    user_id: int
    serie_id: int
    rating: int

    model_config = ConfigDict(from_attributes=True)


class State(BaseModel):
    user_id: int
    serie_id: int
    state: str

    model_config = ConfigDict(from_attributes=True)
