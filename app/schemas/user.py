from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class User(BaseModel):
    id: int
    username: str
    email: str
    admin: bool
    created: Optional[datetime] = None
    updated: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    user: User
    token: str
    expires_in: int = Field(..., serialization_alias="expiresIn")

    model_config = ConfigDict(populate_by_name=True)
