"""
kart_api.api.routers.users

Principal-scoped identity endpoints.

Responsibilities:
- Return the current user (user token).
- Return the current administrator (admin token).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from kart_api.api.deps import account_service
from kart_api.api.routers.auth import UserResponse
from kart_api.auth.deps import get_admin, get_principal
from kart_api.auth.models import Principal
from kart_api.services.account_service import AccountService

router = APIRouter(prefix="/api/user", tags=["user"])


@router.api_route("/getcurrentuser", methods=["GET", "POST"], response_model=UserResponse)
async def get_current_user(
    principal: Principal = Depends(get_principal),
    accounts: AccountService = Depends(account_service),
) -> UserResponse:
    user = await accounts.current_user(principal.subject)
    return UserResponse.from_user(user)


@router.api_route("/getadmin", methods=["GET", "POST"])
async def get_admin_identity(principal: Principal = Depends(get_admin)) -> dict[str, str]:
    return {"email": principal.subject, "role": "admin"}
