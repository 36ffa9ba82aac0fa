"""FastAPI dependencies: bearer-token auth and access to app-scoped services."""

from fastapi import Header, Request

from donutsme.clients.privy_client import AuthClaims
from donutsme.common.errors import Unauthorized
from donutsme.common.logging import user_id_ctx


async def current_user(request: Request, authorization: str | None = Header(default=None)) -> AuthClaims:
    """Resolve the caller from `Authorization: Bearer <access token>`.

    Async so the `user_id` log context set here is inherited by the handler.
    """

    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthorized("Missing or invalid authorization header")
    claims = request.app.state.identity.verify_access_token(authorization[len("Bearer "):])
    user_id_ctx.set(claims.user_id)
    return claims


def users_service(request: Request):
    return request.app.state.users


def wallets_service(request: Request):
    return request.app.state.wallets


def accounts_service(request: Request):
    return request.app.state.accounts


def payouts_service(request: Request):
    return request.app.state.payouts


def webhooks_service(request: Request):
    return request.app.state.webhooks
