# backend/routes/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status, Request, Response
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import (
    REFRESH_COOKIE_NAME, TokenError, TokenIssuer,
    get_current_user, get_current_user_id, get_token_issuer,
)
from utils.cookies import set_auth_cookies, clear_auth_cookies
from utils.validators import credential_error
from utils.audit import write_log, client_ip
from models import users as models
from schemas import user as schemas
from database import get_db

router = APIRouter(prefix="/auth", tags=["Auth"])

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INTERNAL_ERROR = "Internal server error"
USER_EXISTS = "User already exists"


def _internal_error(db: Session, action: str, exc: Exception) -> HTTPException:
    db.rollback()
    logger.exception("Unexpected error during %s: %s", action, exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


# Issue a fresh token pair, persist the refresh token together with the audit
# entry in one commit, and only then attach both cookies
def _start_session(db: Session, user: models.User, response: Response, issuer: TokenIssuer,
                   request: Request, action: str, meta=None) -> None:
    access_token = issuer.issue_access_token(user.id)
    refresh_token = issuer.issue_refresh_token(user.id)

    # Single active session: the newest refresh token replaces any previous one
    user.refresh_token = refresh_token
    write_log(db, user_id=user.id, action=action, resource="auth",
              ip=client_ip(request), meta=meta, commit=False)
    db.commit()
    db.refresh(user)

    set_auth_cookies(response, issuer, access_token, refresh_token)


# Register a new shop account
@router.post("/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: schemas.UserCreate,
    response: Response,
    request: Request,
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    error = credential_error(payload.email, payload.password)
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    try:
        existing = db.query(models.User).filter(
            or_(models.User.email == payload.email, models.User.username == payload.username)
        ).first()
        if existing:
            write_log(db, user_id=None, action="REGISTER", resource="auth", status="FAIL",
                      ip=client_ip(request), meta={"email": payload.email, "reason": "User exists"})
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=USER_EXISTS)

        new_user = models.User(
            username=payload.username,
            email=payload.email,
            password_hash=get_password_hash(payload.password),
            shop_name=payload.shop_name,
        )
        db.add(new_user)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent registration took the email or username after the lookup above
            db.rollback()
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=USER_EXISTS)
        db.refresh(new_user)

        # Second write; if it fails the account exists without a session until the next login
        _start_session(db, new_user, response, issuer, request, "REGISTER", meta={"email": new_user.email})
    except HTTPException:
        raise
    except Exception as e:
        raise _internal_error(db, "register", e)

    return {"message": "User registered successfully", "user": schemas.UserResponse.model_validate(new_user)}


# Authenticate with email + password and start a new session
@router.post("/login", response_model=schemas.AuthResponse)
def login(
    payload: schemas.UserLogin,
    response: Response,
    request: Request,
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    # The strength rule is applied to login attempts too, same as registration
    error = credential_error(payload.email, payload.password)
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    try:
        db_user = db.query(models.User).filter(models.User.email == payload.email).first()

        # Unknown email and wrong password are indistinguishable to the caller
        if not db_user or not verify_password(payload.password, db_user.password_hash):
            write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                      status="FAIL", ip=client_ip(request), meta={"email": payload.email})
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

        _start_session(db, db_user, response, issuer, request, "LOGIN", meta={"email": db_user.email})
    except HTTPException:
        raise
    except Exception as e:
        raise _internal_error(db, "login", e)

    return {"message": "Logged in successfully", "user": schemas.UserResponse.model_validate(db_user)}


# Rotate the token pair using the refresh cookie
@router.post("/refresh", response_model=schemas.AuthResponse)
def refresh(
    response: Response,
    request: Request,
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    token = request.cookies.get(REFRESH_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        user_id = issuer.verify_refresh_token(token)
    except TokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    try:
        db_user = db.query(models.User).filter(models.User.id == user_id).first()
        # Only the stored token is live: logout or a newer login revokes this one
        if not db_user or not db_user.refresh_token or db_user.refresh_token != token:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

        _start_session(db, db_user, response, issuer, request, "TOKEN_REFRESH")
    except HTTPException:
        raise
    except Exception as e:
        raise _internal_error(db, "refresh", e)

    return {"message": "Token refreshed", "user": schemas.UserResponse.model_validate(db_user)}


# End the session: drop the stored refresh token and both cookies
@router.post("/logout", response_model=schemas.MessageResponse)
def logout(
    response: Response,
    request: Request,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    try:
        db_user = db.query(models.User).filter(models.User.id == user_id).first()
        if db_user is not None:
            db_user.refresh_token = None
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGOUT", resource="auth",
                  ip=client_ip(request), commit=False)
        db.commit()
    except Exception as e:
        raise _internal_error(db, "logout", e)

    clear_auth_cookies(response)
    return {"message": "Logged out successfully"}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: models.User = Depends(get_current_user)):
    return current_user
