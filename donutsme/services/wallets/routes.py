"""HTTP surface for wallets and balances."""

from fastapi import APIRouter, Depends, Query

from donutsme.api.deps import current_user, wallets_service
from donutsme.clients.privy_client import AuthClaims
from donutsme.services.wallets.service import WalletService

router = APIRouter(prefix="/api/wallets", tags=["wallets"])


@router.get("")
def list_wallets(claims: AuthClaims = Depends(current_user), service: WalletService = Depends(wallets_service)):
    return {"success": True, "wallets": service.list_wallets(claims.user_id)}


@router.get("/primary")
def primary_wallet(claims: AuthClaims = Depends(current_user), service: WalletService = Depends(wallets_service)):
    return {"success": True, "wallet": service.primary_wallet(claims.user_id)}


# Declared before /{wallet_id} so the literal path wins.
@router.get("/total-balance")
def total_balance(claims: AuthClaims = Depends(current_user), service: WalletService = Depends(wallets_service)):
    """USD total across all of the creator's wallets (may be partial)."""

    total = service.total_balance(claims.user_id)
    return {"success": True, **total.model_dump(by_alias=True, mode="json")}


@router.get("/{wallet_id}")
def get_wallet(
    wallet_id: str,
    claims: AuthClaims = Depends(current_user),
    service: WalletService = Depends(wallets_service),
):
    return {"success": True, "wallet": service.get_owned_wallet(claims.user_id, wallet_id)}


@router.get("/{wallet_id}/balance")
def wallet_balance(
    wallet_id: str,
    claims: AuthClaims = Depends(current_user),
    service: WalletService = Depends(wallets_service),
):
    balance = service.wallet_balance(claims.user_id, wallet_id)
    return {"success": True, "balance": balance.model_dump()}


@router.get("/{wallet_id}/balance/history")
def balance_history(
    wallet_id: str,
    limit: int = Query(default=30, ge=1, le=500),
    claims: AuthClaims = Depends(current_user),
    service: WalletService = Depends(wallets_service),
):
    return {"success": True, "history": service.balance_history(claims.user_id, wallet_id, limit)}
