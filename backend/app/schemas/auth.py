from typing import Annotated, Literal, Optional, Union
from pydantic import EmailStr, Field, StringConstraints
from app.schemas.user import CamelModel, EntityId

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class RegistrationBase(CamelModel):
    email: EmailStr
    # Minimum length is a setting, checked by AuthService
    password: str = Field(..., min_length=1)
    name: NonEmptyStr


class EmployeeRegistration(RegistrationBase):
    role: Literal["EMPLOYEE"]
    manager_id: Optional[EntityId] = None


class ManagerRegistration(RegistrationBase):
    """Managers have no manager; a stray ``managerId`` is dropped."""
    role: Literal["MANAGER"]


# Tagged by "role"; the endpoint declares the discriminator
Registration = Union[EmployeeRegistration, ManagerRegistration]


class LoginRequest(CamelModel):
    email: EmailStr
    password: str
