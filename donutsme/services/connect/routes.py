"""HTTP surface for payout-account onboarding and processor webhooks."""

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from donutsme.api.deps import accounts_service, current_user, webhooks_service
from donutsme.clients.privy_client import AuthClaims
from donutsme.services.connect.schemas import OnboardRequest
from donutsme.services.connect.service import AccountService
from donutsme.services.connect.webhooks import WebhookService

router = APIRouter(prefix="/api/stripe", tags=["stripe"])


@router.post("/onboard")
def onboard(
    req: OnboardRequest | None = None,
    claims: AuthClaims = Depends(current_user),
    service: AccountService = Depends(accounts_service),
):
    """Start (or resume) payout-account onboarding and return the hosted URL."""

    req = req or OnboardRequest()
    link = service.start_onboarding(claims.user_id, email=req.email, country=req.country)
    return {"success": True, "url": link.url, "accountId": link.account_id}


@router.get("/account")
def account_status(claims: AuthClaims = Depends(current_user), service: AccountService = Depends(accounts_service)):
    return {"success": True, "account": service.refresh_status(claims.user_id)}


@router.post("/refresh-url")
def refresh_url(claims: AuthClaims = Depends(current_user), service: AccountService = Depends(accounts_service)):
    return {"success": True, "url": service.refresh_onboarding_url(claims.user_id)}


@router.get("/dashboard-url")
def dashboard_url(claims: AuthClaims = Depends(current_user), service: AccountService = Depends(accounts_service)):
    return {"success": True, "url": service.dashboard_url(claims.user_id)}


@router.get("/balance")
def balance(claims: AuthClaims = Depends(current_user), service: AccountService = Depends(accounts_service)):
    return {"success": True, "balance": service.balance(claims.user_id)}


@router.post("/webhook")
async def webhook(request: Request, service: WebhookService = Depends(webhooks_service)):
    """Processor notifications; the signature covers the raw body bytes."""

    payload = await request.body()
    signature = request.headers.get("stripe-signature")
    await run_in_threadpool(service.handle, payload, signature)
    return {"received": True}
