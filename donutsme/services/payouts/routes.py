"""HTTP surface for creator payouts."""

from fastapi import APIRouter, Depends, Query

from donutsme.api.deps import current_user, payouts_service
from donutsme.clients.privy_client import AuthClaims
from donutsme.services.payouts.schemas import PayoutCreateRequest
from donutsme.services.payouts.service import PayoutService

router = APIRouter(prefix="/api/payouts", tags=["payouts"])


@router.post("/create")
def create_payout(
    req: PayoutCreateRequest,
    claims: AuthClaims = Depends(current_user),
    service: PayoutService = Depends(payouts_service),
):
    """Request a payout of `amount` (major units) to the creator's bank account."""

    payout = service.create_payout(claims.user_id, req.amount, req.currency)
    return {"success": True, "payout": payout}


@router.get("")
def list_payouts(
    limit: int = Query(default=20, ge=1, le=100),
    claims: AuthClaims = Depends(current_user),
    service: PayoutService = Depends(payouts_service),
):
    return {"success": True, "payouts": service.list_payouts(claims.user_id, limit)}


@router.get("/{payout_id}")
def get_payout(
    payout_id: str,
    claims: AuthClaims = Depends(current_user),
    service: PayoutService = Depends(payouts_service),
):
    return {"success": True, "payout": service.get_payout(claims.user_id, payout_id)}
