"""
➡️ But : Lire l'identité de l'appelant depuis son access token.

Les tokens sont émis par le fournisseur d'identité (secret partagé) ; l'API ne fait
que les valider et en extraire le claim `sub` (= user id des tables videos/avatars).
create_access_token() sert aux scripts de dev et aux tests.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TypedDict

from jose import jwt, JWTError


@dataclass(frozen=True)
class JWTSettings:
    secret: str
    issuer: str = "content-factory"
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(minutes=60)


class AccessClaims(TypedDict, total=False):
    sub: str            # user id
    iss: str
    email: str
    jti: str
    iat: int
    exp: int


class InvalidTokenError(Exception):
    """Signature invalide, token expiré ou sans `sub`."""


def create_access_token(*, user_id: str, settings: JWTSettings, email: str = "") -> str:
    issued_at = datetime.now(timezone.utc)
    claims: AccessClaims = {
        "sub": str(user_id),
        "iss": settings.issuer,
        "email": email,
        "jti": uuid.uuid4().hex,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + settings.access_ttl).timestamp()),
    }
    return jwt.encode(claims, settings.secret, algorithm=settings.algorithm)


def decode_token(token: str, settings: JWTSettings) -> AccessClaims:
    """Vérifie signature + expiration ; l'audience n'est pas contrôlée."""
    try:
        return jwt.decode(
            token,
            settings.secret,
            algorithms=[settings.algorithm],
            options={"verify_aud": False},
        )
    except JWTError as e:
        raise InvalidTokenError(str(e)) from e


def user_id_from_token(token: str, settings: JWTSettings) -> str:
    sub = decode_token(token, settings).get("sub")
    if not sub:
        raise InvalidTokenError("Token without subject")
    return sub
