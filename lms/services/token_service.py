"""Bearer token signing and validation (ES256).

The identity provider is external; this module is the verifying side.
It also signs tokens with the same key so dev tooling and tests can mint
credentials that the API accepts.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives.asymmetric import ec

# ---------------------------------------------------------------------------
# Key management
# ---------------------------------------------------------------------------
# Dev/test: generate an ephemeral EC key pair on import.
# Production: load the identity provider's public key (not implemented yet).
_private_key = ec.generate_private_key(ec.SECP256R1())
_public_key = _private_key.public_key()

ALGORITHM = "ES256"
ISSUER = "lms-identity"
AUDIENCE = "lms-service"
ACCESS_TOKEN_TTL_MIN = 15


def create_access_token(
    *,
    sub: str,
    roles: list[str] | None = None,
    ttl_minutes: int = ACCESS_TOKEN_TTL_MIN,
) -> str:
    """Build and sign an access token carrying sub and roles."""
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + timedelta(minutes=ttl_minutes),
        "iat": now,
        "jti": str(uuid.uuid4()),
        "roles": roles or ["learner"],
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins algorithm to ES256 to prevent alg:none and alg-switching attacks.

    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat", "jti"]},
    )
