from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import HTTPException, status
from jose import JWTError, jwt

from app.config.settings import Settings, get_settings
from app.domains.scheduling.application.dto import RequestContext, Role

# accountType values issued by the identity service
ACCOUNT_TYPE_ROLES = {
    "patient": Role.PATIENT,
    "doctor": Role.PRACTITIONER,
    "admin": Role.ADMIN,
}


class TokenService:
    """
    Verifies bearer tokens and turns their claims into a RequestContext.

    Tokens are issued by the identity service; create_access_token exists
    for local tooling and tests.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.SECRET_KEY = self.settings.JWT_SECRET_KEY
        self.ALGORITHM = self.settings.JWT_ALGORITHM

    def create_access_token(self, data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
        to_encode = data.copy()
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=60))
        to_encode.update({"exp": expire, "iat": now})
        return jwt.encode(to_encode, self.SECRET_KEY, algorithm=self.ALGORITHM)

    def decode_token(self, token: str) -> dict[str, Any]:
        """
        Decode and verify a JWT (signature and expiry).

        Raises:
            HTTPException: 401 if the token is invalid
        """
        try:
            return jwt.decode(token, self.SECRET_KEY, algorithms=[self.ALGORITHM])
        except JWTError as e:
            raise self._unauthorized(f"Invalid token: {e}") from e

    def build_context(self, payload: dict[str, Any]) -> RequestContext:
        """Map token claims (sub, role or accountType, email) to a RequestContext."""
        try:
            user_id = int(payload["sub"])
        except (KeyError, TypeError, ValueError) as e:
            raise self._unauthorized("Token has no valid subject") from e

        role = self._resolve_role(payload)
        if role is None:
            raise self._unauthorized("Token has no recognised role")

        return RequestContext(user_id=user_id, role=role, email=payload.get("email"))

    def get_request_context(self, token: str) -> RequestContext:
        return self.build_context(self.decode_token(token))

    @staticmethod
    def _resolve_role(payload: dict[str, Any]) -> Role | None:
        raw_role = payload.get("role")
        if raw_role:
            try:
                return Role(str(raw_role).lower())
            except ValueError:
                return None
        account_type = payload.get("accountType")
        if account_type:
            return ACCOUNT_TYPE_ROLES.get(str(account_type).lower())
        return None

    @staticmethod
    def _unauthorized(detail: str) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )
