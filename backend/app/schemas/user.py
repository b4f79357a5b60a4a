from typing import Annotated
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from app.db.base import MAX_ID
from app.models.user import UserRole

# Ids that fit a database INTEGER; anything else is rejected as invalid input
EntityId = Annotated[int, Field(ge=1, le=MAX_ID)]


class CamelModel(BaseModel):
    """Wire models speak camelCase; snake_case names are accepted on input too."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UserSummary(CamelModel):
    id: int
    name: str
    email: str


class UserPublic(UserSummary):
    role: UserRole


class AuthResponse(CamelModel):
    token: str
    user: UserPublic
