from pydantic import Field

from .common import CamelModel
from .users import User


class LoginRequest(CamelModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginResponse(CamelModel):
    token: str
    user: User
