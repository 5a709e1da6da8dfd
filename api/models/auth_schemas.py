from datetime import datetime
from typing import Optional

from pydantic import Field

from api.models.common import CamelModel
from models.user import Role


# ============ Request Schemas ============

class SignupRequest(CamelModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    role: Optional[Role] = Field(default=None, description="Defaults to candidate")

    model_config = CamelModel.model_config | {
        "json_schema_extra": {
            "example": {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "password": "correct horse battery staple",
                "role": "candidate"
            }
        }
    }


class LoginRequest(CamelModel):
    email: str
    password: str


# ============ Response Schemas ============

class UserResponse(CamelModel):
    """Public view of a user; the password hash is never exposed"""
    id: str
    name: str
    email: str
    role: Role
    created_at: Optional[datetime] = None


class SignupResponse(CamelModel):
    message: str
    user: UserResponse


class LoginResponse(CamelModel):
    token: str
    user: UserResponse
