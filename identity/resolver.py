"""Select the single identifier that scopes a candidate's answers and progress."""
from __future__ import annotations

from typing import Optional, Union

from .models import AccountIdentifier, AnonymousIdentifier, AuthSession


class IdentityUnresolved(LookupError):
    """Raised when neither an authenticated session nor an invitation email is available.

    Callers treat this as fatal for the current screen and send the visitor
    to registration.
    """


def resolve_identity(
    session: Optional[AuthSession] = None,
    invitation_email: Optional[str] = None,
) -> Union[AccountIdentifier, AnonymousIdentifier]:
    """Pick the identifier for the current actor.

    An authenticated session always wins over an invitation-scoped email.
    No lookups are performed here; token validation happens upstream.
    """

    if session is not None and session.user_id.strip():
        return AccountIdentifier(user_id=session.user_id.strip())
    email = (invitation_email or "").strip()
    if email:
        return AnonymousIdentifier(email=email)
    raise IdentityUnresolved("No authenticated session or invitation email available")


__all__ = ["IdentityUnresolved", "resolve_identity"]
