"""Bearer token helpers for the console session and relayed workflow calls."""
from __future__ import annotations

import logging
from typing import Any, Dict

import jwt

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
AUTHORIZATION_HEADER = "Authorization"
MASK_CHAR = "*"


def bearer(token: str) -> str:
    return f"{BEARER_PREFIX}{token}"


def redact_bearer(value: str) -> str:
    """Mask everything after a literal ``Bearer `` prefix, keeping the length.

    Values without the prefix are returned unchanged.
    """
    if not value.startswith(BEARER_PREFIX):
        return value
    return BEARER_PREFIX + MASK_CHAR * (len(value) - len(BEARER_PREFIX))


def is_authorization_header(name: str) -> bool:
    return name.lower() == AUTHORIZATION_HEADER.lower()


def read_display_claims(token: str | None) -> Dict[str, Any]:
    """Decode the console token without verification, for display only.

    The console never holds the login service's signing secret, so nothing read
    here may be used for an authorization decision.
    """
    if not token:
        return {}
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        logger.debug("Console token is not a readable JWT")
        return {}


def display_name(token: str | None) -> str | None:
    claims = read_display_claims(token)
    name = claims.get("username") or claims.get("did") or claims.get("sub")
    return str(name) if name else None
