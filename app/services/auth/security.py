from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from app.core.config import Settings
from app.utils.exceptions import AuthenticationError


class TokenService:
    """Issues and verifies signed bearer tokens"""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret_key=settings.access_token_secret,
            algorithm=settings.algorithm,
            expire_minutes=settings.access_token_expire_minutes
        )

    def issue(self, claims: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """Sign ``claims`` into a token that expires after the configured lifetime"""
        to_encode = dict(claims)
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))
        to_encode.update({"exp": expire, "iat": now})
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> Dict[str, Any]:
        """Decode a bearer token, raising ``AuthenticationError`` on any failure"""
        if not token:
            raise AuthenticationError()

        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            raise AuthenticationError()

        if not payload.get("email"):
            raise AuthenticationError()

        return payload
