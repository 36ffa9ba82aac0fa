"""Process entrypoint: `uvicorn donutsme.api.main:app`."""

from donutsme.api.app import create_app
from donutsme.common.config import settings
from donutsme.common.logging import configure_logging
from donutsme.common.startup import log_startup_config
from donutsme.common.tracing import instrument_app, setup_tracing

configure_logging()
setup_tracing(settings.service_name, settings.otel_exporter_otlp_endpoint)
log_startup_config(
    settings.service_name,
    [
        "SERVICE_NAME",
        "DATABASE_URL",
        "CLIENT_URL",
        "PRIVY_APP_ID",
        "PRIVY_APP_SECRET",
        "STRIPE_SECRET_KEY",
        "STRIPE_WEBHOOK_SECRET",
        "OTEL_EXPORTER_OTLP_ENDPOINT",
    ],
)
app = create_app(settings)
instrument_app(app)
