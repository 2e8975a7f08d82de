"""JWT token creation and decoding.

Token claims:
  - sub:   user email
  - type:  "access" (there is no refresh token)
  - exp:   expiry timestamp (settings.access_token_expire_minutes)
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from abasta.config import settings

ALGORITHM = settings.jwt_algorithm


def create_access_token(
    email: str,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {
        "sub": email,
        "type": "access",
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT. Returns empty dict on failure."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return {}
