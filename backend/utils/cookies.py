# backend/utils/cookies.py
from fastapi import Response

from config import settings
from utils.tokenJWT import ACCESS_COOKIE_NAME, REFRESH_COOKIE_NAME, TokenIssuer


def _cookie_kwargs() -> dict:
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "strict",
        "path": "/",
    }


# Write both session cookies; each one lives exactly as long as its token
def set_auth_cookies(response: Response, issuer: TokenIssuer, access_token: str, refresh_token: str) -> None:
    response.set_cookie(
        ACCESS_COOKIE_NAME, access_token,
        max_age=int(issuer.access_ttl.total_seconds()), **_cookie_kwargs()
    )
    response.set_cookie(
        REFRESH_COOKIE_NAME, refresh_token,
        max_age=int(issuer.refresh_ttl.total_seconds()), **_cookie_kwargs()
    )


def clear_auth_cookies(response: Response) -> None:
    for name in (ACCESS_COOKIE_NAME, REFRESH_COOKIE_NAME):
        response.delete_cookie(name, **_cookie_kwargs())
