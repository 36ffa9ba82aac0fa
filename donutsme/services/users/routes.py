"""HTTP surface for creator profiles, settings, and wallet sync."""

from fastapi import APIRouter, Depends

from donutsme.api.deps import current_user, users_service
from donutsme.clients.privy_client import AuthClaims
from donutsme.common.errors import NotFound
from donutsme.services.users.schemas import ProfileUpdateRequest, RegisterRequest, SettingsUpdateRequest
from donutsme.services.users.service import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("/register", status_code=201)
def register(
    req: RegisterRequest,
    claims: AuthClaims = Depends(current_user),
    service: UserService = Depends(users_service),
):
    """Register the authenticated identity as a creator."""

    profile = service.register(claims.user_id, req)
    return {"success": True, "user": profile}


@router.get("/me")
def get_me(claims: AuthClaims = Depends(current_user), service: UserService = Depends(users_service)):
    profile = service.get_profile(claims.user_id)
    if profile is None:
        raise NotFound("User profile does not exist", error="User not found")
    return {"success": True, "user": profile}


@router.put("/me")
def update_me(
    req: ProfileUpdateRequest,
    claims: AuthClaims = Depends(current_user),
    service: UserService = Depends(users_service),
):
    return {"success": True, "user": service.update_profile(claims.user_id, req)}


@router.get("/check-username/{username}")
def check_username(username: str, service: UserService = Depends(users_service)):
    """Public availability check used by the signup form."""

    return {"success": True, "available": not service.is_username_taken(username)}


@router.post("/sync-wallets")
def sync_wallets(claims: AuthClaims = Depends(current_user), service: UserService = Depends(users_service)):
    return {"success": True, "wallets": service.sync_wallets(claims.user_id)}


@router.get("/settings")
def get_settings(claims: AuthClaims = Depends(current_user), service: UserService = Depends(users_service)):
    return {"success": True, "settings": service.get_settings(claims.user_id)}


@router.put("/settings")
def update_settings(
    req: SettingsUpdateRequest,
    claims: AuthClaims = Depends(current_user),
    service: UserService = Depends(users_service),
):
    return {"success": True, "settings": service.update_settings(claims.user_id, req)}
