# utils/tokenJWT.py
from jose import jwt, JWTError, ExpiredSignatureError
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models import users as models

ACCESS_COOKIE_NAME = "accessToken"
REFRESH_COOKIE_NAME = "refreshToken"


class TokenError(Exception):
    """Base class for token verification failures."""


class InvalidToken(TokenError):
    """Bad signature, malformed token or unusable payload."""


class TokenExpired(TokenError):
    """Signature is valid but the embedded expiry has passed."""


class TokenIssuer:
    """Creates and verifies the access/refresh JWT pair.

    Access and refresh tokens are signed with two independent secrets and
    carry their own lifetimes, so an access token can never be replayed as a
    refresh token and vice versa.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("Both signing secrets are required")
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_settings(cls, cfg) -> "TokenIssuer":
        return cls(
            access_secret=cfg.JWT_SECRET,
            refresh_secret=cfg.JWT_REFRESH_SECRET,
            algorithm=cfg.JWT_ALGORITHM,
            access_ttl=timedelta(minutes=cfg.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=cfg.REFRESH_TOKEN_EXPIRE_DAYS),
        )

    def _issue(self, user_id: int, token_type: str, secret: str, ttl: timedelta,
               issued_at: Optional[datetime]) -> str:
        now = issued_at or datetime.now(timezone.utc)
        to_encode = {"sub": str(user_id), "type": token_type, "iat": now, "exp": now + ttl}
        return jwt.encode(to_encode, secret, algorithm=self.algorithm)

    def issue_access_token(self, user_id: int, issued_at: Optional[datetime] = None) -> str:
        return self._issue(user_id, "access", self.access_secret, self.access_ttl, issued_at)

    def issue_refresh_token(self, user_id: int, issued_at: Optional[datetime] = None) -> str:
        return self._issue(user_id, "refresh", self.refresh_secret, self.refresh_ttl, issued_at)

    def verify(self, token: str, secret: str, token_type: Optional[str] = None) -> int:
        """Return the user id embedded in ``token``.

        Raises TokenExpired when the expiry has passed and InvalidToken for
        anything else (wrong secret, tampering, missing subject).
        """
        if not token:
            raise InvalidToken("Missing token")
        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise TokenExpired("Token expired") from e
        except JWTError as e:
            raise InvalidToken("Invalid token") from e

        if token_type is not None and payload.get("type") != token_type:
            raise InvalidToken("Invalid token")
        try:
            return int(payload["sub"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidToken("Invalid token") from e

    def verify_access_token(self, token: str) -> int:
        return self.verify(token, self.access_secret, token_type="access")

    def verify_refresh_token(self, token: str) -> int:
        return self.verify(token, self.refresh_secret, token_type="refresh")


token_issuer = TokenIssuer.from_settings(settings)

# Non-browser clients may send the access token as a bearer header instead of a cookie
bearer_scheme = HTTPBearer(auto_error=False)


def get_token_issuer() -> TokenIssuer:
    return token_issuer


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# Session gate: resolve the caller's id from the access token alone (no database lookup)
def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> int:
    token = request.cookies.get(ACCESS_COOKIE_NAME)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise _unauthorized("Not authenticated")

    try:
        user_id = issuer.verify_access_token(token)
    except TokenExpired:
        raise _unauthorized("Token expired")
    except TokenError:
        raise _unauthorized("Invalid token")

    request.state.user_id = user_id
    return user_id


# Load the full user record behind the session
def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> models.User:
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
