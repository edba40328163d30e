# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Bearer credential → caller email.

Token issuance lives upstream. A token found in ``AUTH_TOKENS`` maps to its
email; otherwise, when the gateway is trusted, the token is the email.
"""
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from clubflow.core.config import settings

_bearer = HTTPBearer(auto_error=False)


def email_for_token(token: str) -> Optional[str]:
    token = token.strip()
    if not token:
        return None
    if token in settings.AUTH_TOKENS:
        return settings.AUTH_TOKENS[token].lower()
    if settings.AUTH_TRUST_BEARER_EMAIL and "@" in token:
        return token.lower()
    return None


def get_current_email(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> str:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Missing bearer credential")
    email = email_for_token(credentials.credentials)
    if email is None:
        raise HTTPException(status_code=401, detail="Invalid bearer credential")
    return email
