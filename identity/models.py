from __future__ import annotations  # Identifier and session context models

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AccountIdentifier(BaseModel):  # Authenticated candidate account
    model_config = ConfigDict(frozen=True)

    kind: Literal["account"] = "account"
    user_id: str = Field(min_length=1)

    @property
    def value(self) -> str:  # Partition value stored alongside the kind
        return self.user_id

    @property
    def key(self) -> str:  # Stable string form for logs and registries
        return f"account:{self.user_id}"


class AnonymousIdentifier(BaseModel):  # Token-invited candidate scoped by email
    model_config = ConfigDict(frozen=True)

    kind: Literal["anonymous"] = "anonymous"
    email: str = Field(min_length=3)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:  # Emails are compared case-insensitively
        return value.strip().lower()

    @property
    def value(self) -> str:
        return self.email

    @property
    def key(self) -> str:
        return f"anonymous:{self.email}"


Identifier = Annotated[Union[AccountIdentifier, AnonymousIdentifier], Field(discriminator="kind")]


class AuthSession(BaseModel):  # Authenticated session handed over by the identity provider
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(min_length=1)
    email: Optional[str] = None
    full_name: Optional[str] = None


def identifier_from_parts(kind: str, value: str) -> Union[AccountIdentifier, AnonymousIdentifier]:  # Rebuild from stored columns
    if kind == "account":
        return AccountIdentifier(user_id=value)
    if kind == "anonymous":
        return AnonymousIdentifier(email=value)
    raise ValueError(f"Unknown identifier kind '{kind}'")


__all__ = [
    "AccountIdentifier",
    "AnonymousIdentifier",
    "AuthSession",
    "Identifier",
    "identifier_from_parts",
]
