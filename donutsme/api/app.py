"""Composition root: wires settings, clients, and services into one FastAPI app."""

from contextlib import asynccontextmanager
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from donutsme.clients.privy_client import PrivyClient
from donutsme.clients.stripe_client import StripeProcessor
from donutsme.common.cache import TTLCache
from donutsme.common.config import Settings, settings as default_settings
from donutsme.common.db import create_schema, make_engine, make_session_factory
from donutsme.common.errors import register_error_handlers
from donutsme.common.logging import trace_id_ctx
from donutsme.common.metrics import http_request_duration_seconds, http_requests_total, metrics_response
from donutsme.services.connect.routes import router as connect_router
from donutsme.services.connect.service import AccountService
from donutsme.services.connect.signatures import WebhookVerifier
from donutsme.services.connect.webhooks import WebhookService
from donutsme.services.payouts.routes import router as payouts_router
from donutsme.services.payouts.service import PayoutService
from donutsme.services.users.routes import router as users_router
from donutsme.services.users.service import UserService
from donutsme.services.wallets.routes import router as wallets_router
from donutsme.services.wallets.service import WalletService


def create_app(
    settings: Settings | None = None,
    *,
    session_factory=None,
    processor: StripeProcessor | None = None,
    identity: PrivyClient | None = None,
    verifier: WebhookVerifier | None = None,
) -> FastAPI:
    """Build the API process.

    Every collaborator can be injected; anything left out is built from
    `settings`. Tests pass a sqlite session factory and fake providers.
    """

    settings = settings or default_settings
    engine = None
    if session_factory is None:
        engine = make_engine(settings.database_url)
        session_factory = make_session_factory(engine)
    processor = processor or StripeProcessor(settings.stripe_secret_key)
    identity = identity or PrivyClient(
        settings.privy_app_id,
        settings.privy_app_secret,
        settings.privy_verification_key,
        auth_url=settings.privy_auth_url,
        api_url=settings.privy_api_url,
        timeout=settings.http_timeout_seconds,
    )
    verifier = verifier or WebhookVerifier(
        settings.stripe_webhook_secret,
        tolerance_seconds=settings.stripe_webhook_tolerance_seconds,
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        # Production schemas come from alembic; sqlite is the local dev store.
        if engine is not None and settings.database_url.startswith("sqlite"):
            create_schema(engine)
        yield
        identity.close()

    app = FastAPI(title="Donutsme API", lifespan=lifespan)
    app.state.settings = settings
    app.state.identity = identity
    app.state.processor = processor
    app.state.users = UserService(session_factory, identity, TTLCache(settings.profile_cache_ttl_seconds))
    app.state.wallets = WalletService(session_factory, identity)
    app.state.accounts = AccountService(
        session_factory,
        processor,
        settings.client_url,
        default_country=settings.stripe_account_country,
    )
    app.state.payouts = PayoutService(session_factory, processor)
    app.state.webhooks = WebhookService(session_factory, verifier)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Tag the request with a trace id and record count and latency."""

        trace_id = request.headers.get("x-request-id") or str(uuid4())
        trace_id_ctx.set(trace_id)
        start = perf_counter()
        route = request.url.path
        method = request.method
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            route_obj = request.scope.get("route")
            if route_obj is not None and getattr(route_obj, "path", None):
                route = route_obj.path
            response.headers["x-request-id"] = trace_id
            return response
        finally:
            elapsed = max(0.0, perf_counter() - start)
            http_request_duration_seconds.labels(
                service=settings.service_name,
                route=route,
                method=method,
            ).observe(elapsed)
            http_requests_total.labels(
                service=settings.service_name,
                route=route,
                method=method,
                status_code=str(status_code),
            ).inc()

    register_error_handlers(app)
    app.include_router(users_router)
    app.include_router(wallets_router)
    app.include_router(connect_router)
    app.include_router(payouts_router)

    @app.get("/")
    def root():
        return {"name": "Donutsme API", "status": "running"}

    @app.get("/health")
    def health():
        """Container health probe endpoint."""

        return {"ok": True}

    @app.get("/metrics")
    def metrics():
        """Prometheus scrape endpoint."""

        return metrics_response()

    return app
