from __future__ import annotations  # Identity package exports

from .models import AccountIdentifier, AnonymousIdentifier, AuthSession, Identifier, identifier_from_parts
from .resolver import IdentityUnresolved, resolve_identity

__all__ = [
    "AccountIdentifier",
    "AnonymousIdentifier",
    "AuthSession",
    "Identifier",
    "IdentityUnresolved",
    "identifier_from_parts",
    "resolve_identity",
]
