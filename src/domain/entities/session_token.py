from typing import Optional

from sqlalchemy import ForeignKey, Text
from sqlmodel import Column, Field, SQLModel, String


class SessionToken(SQLModel, table=True):
    """The single currently valid session token of an account.

    At most one row exists per account (unique ``account_id``). Any bearer
    token that is not the stored one is rejected, even with a valid
    signature, which is how logout and re-login revoke older tokens.

    Attributes:
        id: Surrogate primary key.
        account_id: Owning account; unique, cascades on account deletion.
        token: The signed JWT issued to the account.
    """

    __tablename__ = "session_tokens"

    id: Optional[int] = Field(default=None, primary_key=True)
    account_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("accounts.id", ondelete="CASCADE"),
            unique=True,  # One live session per account
            index=True,
            nullable=False,
        ),
    )
    token: str = Field(sa_column=Column(Text, nullable=False))

    __table_args__ = ({"extend_existing": True},)
