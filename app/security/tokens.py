"""JWT access tokens (PyJWT). Issue and verify; no FastAPI."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from app.security.exceptions import AuthenticationError

CLAIM_SUB = "sub"
CLAIM_IAT = "iat"
CLAIM_EXP = "exp"


@dataclass(frozen=True)
class TokenService:
    """Issues and decodes signed access tokens carrying only the user id."""

    secret: str
    algorithm: str = "HS256"
    expiration_minutes: int = 60

    def issue(self, user_id: UUID) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            CLAIM_SUB: str(user_id),
            CLAIM_IAT: int(now.timestamp()),
            CLAIM_EXP: int((now + timedelta(minutes=self.expiration_minutes)).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> UUID:
        """Return the user id in a valid token. Raises AuthenticationError otherwise."""
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": [CLAIM_SUB, CLAIM_EXP]},
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Token expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationError("Invalid token") from e
        try:
            return UUID(payload[CLAIM_SUB])
        except (TypeError, ValueError) as e:
            raise AuthenticationError("Invalid token") from e
