from datetime import date, datetime  # For profile and timestamp fields
from enum import Enum  # For type-safe role enumeration
from typing import Optional  # For optional fields
from uuid import uuid4  # For opaque account identifiers

from pydantic import EmailStr, field_validator
from sqlalchemy import DateTime, Enum as SAEnum, text  # Explicit column types for Alembic
from sqlmodel import Column, Field, SQLModel, String


class Role(str, Enum):
    """Represents the role of an account within the system.

    The role is embedded in every session token and checked by role-gated
    routes.

    Attributes:
        ADMIN: Administrative access.
        TEACHER: Teaching staff.
        USER: Standard account, assigned when registration names no role.
    """

    ADMIN = "admin"
    TEACHER = "teacher"
    USER = "user"


class Gender(str, Enum):
    """Self-declared gender shown on the public profile."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class Account(SQLModel, table=True):
    """Represents an Account entity and acts as an Aggregate Root.

    An account is created disabled by registration and becomes enabled once
    its owner proves control of the email address. Only enabled accounts can
    obtain a session token through login. Accounts are never deleted by the
    authentication flows.

    Attributes:
        id: Opaque identifier (UUID4 string) assigned at creation.
        username: Unique username usable as a login identifier.
        email: Unique email address usable as a login identifier.
        password: Bcrypt hash of the password; never returned by any endpoint.
        role: The account's role, embedded in session tokens.
        is_enabled: Whether email activation has completed.
        gender, date_of_birth, grade_level, avatar_url: Optional public
            profile fields.
        created_at: The timestamp of when the account was created.
        updated_at: The timestamp of the last update to the account.
    """

    __tablename__ = "accounts"  # Explicit table name for clarity

    id: str = Field(
        default_factory=lambda: str(uuid4()),  # Assigned at creation
        primary_key=True,
        max_length=36,
        description="Opaque, stable account identifier.",
    )
    username: str = Field(
        sa_column=Column(String(50), unique=True, index=True, nullable=False),  # Unique, indexed column
        min_length=3,
        max_length=50,
        description="Unique username for login.",
    )
    email: EmailStr = Field(
        sa_column=Column(String(255), unique=True, index=True, nullable=False),  # Unique, indexed column
        description="Unique email address for login and notifications.",
    )
    password: str = Field(
        sa_column=Column(String(255), nullable=False),  # Sufficient for bcrypt hashes
        description="Bcrypt-hashed password.",
    )
    role: Role = Field(
        default=Role.USER,
        sa_column=Column(
            SAEnum(Role, name="role", values_callable=lambda roles: [r.value for r in roles]),
            nullable=False,
            server_default=Role.USER.value,
        ),
        description="The account's role.",
    )
    is_enabled: bool = Field(
        default=False,  # Disabled until email activation
        nullable=False,
        description="True once the email address has been confirmed.",
    )
    gender: Optional[Gender] = Field(
        default=None,
        sa_column=Column(
            SAEnum(Gender, name="gender", values_callable=lambda genders: [g.value for g in genders]),
            nullable=True,
        ),
    )
    date_of_birth: Optional[date] = Field(default=None, nullable=True)
    grade_level: Optional[int] = Field(default=None, nullable=True)
    avatar_url: Optional[str] = Field(default=None, max_length=512, nullable=True)
    created_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(
            DateTime,  # Explicit DateTime type for Alembic
            server_default=text("CURRENT_TIMESTAMP"),  # Database timestamp
            nullable=False,
        ),
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(
            DateTime,
            server_default=text("CURRENT_TIMESTAMP"),
            onupdate=text("CURRENT_TIMESTAMP"),  # Refreshed on every UPDATE
            nullable=False,
        ),
    )

    __table_args__ = ({"extend_existing": True},)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: EmailStr) -> str:
        """Normalizes the email address to lowercase so lookups are case-insensitive."""
        return value.lower()
