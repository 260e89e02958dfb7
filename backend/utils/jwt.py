from datetime import datetime, timedelta
from jose import jwt, ExpiredSignatureError, JWTError
from jose.exceptions import JWTClaimsError

from config.env import JWT_SECRET, JWT_ALGORITHM, TOKEN_LIFETIME_HOURS


class TokenError(Exception):
    pass


class TokenExpired(TokenError):
    pass


class TokenMalformed(TokenError):
    pass


class TokenBadSignature(TokenError):
    pass


class TokenCodec:
    """
    Signs and verifies the session credential.

    The token carries the user id in ``sub`` and, optionally, the role the
    user had when the token was issued. That role is a snapshot: promoting
    the user later does not change tokens already handed out.
    """

    def __init__(
        self,
        secret: str | None = JWT_SECRET,
        algorithm: str = JWT_ALGORITHM,
        lifetime: timedelta = timedelta(hours=TOKEN_LIFETIME_HOURS),
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime

    def _require_secret(self) -> str:
        secret = (self.secret or "").strip()
        if not secret:
            raise RuntimeError("JWT_SECRET is not configured")
        return secret

    def issue(self, subject_id, role: str | None = None, now: datetime | None = None) -> str:
        now = now or datetime.utcnow()
        payload = {
            "sub": str(subject_id),
            "iat": now,
            "exp": now + self.lifetime,
        }
        if role:
            payload["role"] = role
        return jwt.encode(payload, self._require_secret(), algorithm=self.algorithm)

    def verify(self, token: str) -> tuple[str, str | None]:
        secret = self._require_secret()

        try:
            jwt.get_unverified_claims(token)
        except JWTError as e:
            raise TokenMalformed(str(e)) from e

        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise TokenExpired(str(e)) from e
        except JWTClaimsError as e:
            raise TokenMalformed(str(e)) from e
        except JWTError as e:
            raise TokenBadSignature(str(e)) from e

        subject_id = payload.get("sub")
        if not subject_id:
            raise TokenMalformed("Token has no subject")

        return subject_id, payload.get("role")
