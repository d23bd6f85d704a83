"""
kart_api.api.routers.auth

Account and session endpoints.

Responsibilities:
- Registration, password login, social login, admin login.
- Logout (clears the cookie; tokens are stateless and stay valid until expiry).
- A diagnostic endpoint reporting which credential channels reached the API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel
from starlette.status import HTTP_201_CREATED, HTTP_404_NOT_FOUND

from kart_api.api.cookies import clear_session_cookie, set_session_cookie
from kart_api.api.deps import account_service, settings_from_app
from kart_api.auth.extractor import CHANNELS, resolve, sources_from_request
from kart_api.auth.tokens import ExpiryPolicy
from kart_api.db.models import User
from kart_api.services.account_service import AccountService
from kart_api.settings import Settings

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class SocialLoginRequest(BaseModel):
    name: str = ""
    email: str = ""


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    created_at: datetime
    # Returned for clients that cannot rely on cookies (cross-origin).
    token: str | None = None

    @classmethod
    def from_user(cls, user: User, token: str | None = None) -> UserResponse:
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            created_at=user.created_at,
            token=token,
        )


class AdminLoginResponse(BaseModel):
    token: str
    role: str = "admin"


@router.post("/registration", response_model=UserResponse, status_code=HTTP_201_CREATED)
async def registration(
    body: RegisterRequest,
    response: Response,
    accounts: AccountService = Depends(account_service),
    settings: Settings = Depends(settings_from_app),
) -> UserResponse:
    session = await accounts.register(name=body.name, email=body.email, password=body.password)
    set_session_cookie(response, session.token, settings=settings)
    return UserResponse.from_user(session.user, session.token)


@router.post("/login", response_model=UserResponse)
async def login(
    body: LoginRequest,
    response: Response,
    accounts: AccountService = Depends(account_service),
    settings: Settings = Depends(settings_from_app),
) -> UserResponse:
    session = await accounts.login(email=body.email, password=body.password)
    set_session_cookie(response, session.token, settings=settings)
    return UserResponse.from_user(session.user, session.token)


@router.post("/googlelogin", response_model=UserResponse)
async def google_login(
    body: SocialLoginRequest,
    response: Response,
    accounts: AccountService = Depends(account_service),
    settings: Settings = Depends(settings_from_app),
) -> UserResponse:
    session = await accounts.social_login(name=body.name, email=body.email)
    set_session_cookie(response, session.token, settings=settings)
    return UserResponse.from_user(session.user, session.token)


@router.api_route("/logout", methods=["GET", "POST"])
async def logout(
    response: Response,
    settings: Settings = Depends(settings_from_app),
) -> dict[str, str]:
    clear_session_cookie(response, settings=settings)
    return {"message": "Logout successful"}


@router.post("/adminlogin", response_model=AdminLoginResponse)
async def admin_login(
    body: LoginRequest,
    response: Response,
    accounts: AccountService = Depends(account_service),
    settings: Settings = Depends(settings_from_app),
) -> AdminLoginResponse:
    token = accounts.admin_login(email=body.email, password=body.password)
    set_session_cookie(response, token, settings=settings, policy=ExpiryPolicy.admin)
    return AdminLoginResponse(token=token)


@router.api_route("/diagnostic", methods=["GET", "POST"])
async def diagnostic(
    request: Request,
    settings: Settings = Depends(settings_from_app),
) -> dict[str, Any]:
    if settings.is_production:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")

    sources = await sources_from_request(request)
    credential = resolve(sources)
    # Presence only; token values are never echoed back.
    return {
        "channels": {
            channel.value: extractor(sources) is not None for channel, extractor in CHANNELS
        },
        "selected": credential.channel.value if credential is not None else None,
        "origin": request.headers.get("origin"),
    }
