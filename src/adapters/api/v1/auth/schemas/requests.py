"""Request payload Pydantic models for authentication endpoints."""

from pydantic import BaseModel, EmailStr, Field, constr

from src.domain.entities.account import Role

# ---------------------------------------------------------------------------
# Shared / primitive types ---------------------------------------------------
# ---------------------------------------------------------------------------

UsernameStr = constr(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")

# ---------------------------------------------------------------------------
# Concrete request models ----------------------------------------------------
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Payload expected by ``POST /register``."""

    username: UsernameStr = Field(..., examples=["john_doe"])
    email: EmailStr = Field(..., examples=["john@example.com"])
    password: str = Field(..., min_length=1, max_length=72, examples=["Str0ngP@ssw0rd"])
    role: Role = Field(default=Role.USER, examples=["user"])


class LoginRequest(BaseModel):
    """Payload expected by ``POST /login``.

    ``username`` accepts either the username or the email address.
    """

    username: str = Field(..., min_length=1, max_length=255, examples=["john_doe"])
    password: str = Field(..., min_length=1, max_length=72, examples=["Str0ngP@ssw0rd"])
