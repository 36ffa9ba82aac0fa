"""Re-pull recent payouts from the processor and reconcile local Payout Records.

Covers payouts whose webhooks were never delivered, or whose local insert was
lost after the processor accepted them.
"""

import argparse
import json

from sqlalchemy import select

from donutsme.clients.stripe_client import StripeProcessor
from donutsme.common.config import settings
from donutsme.common.db import make_engine, make_session_factory
from donutsme.common.logging import configure_logging
from donutsme.services.connect.models import StripeAccount
from donutsme.services.payouts.service import PayoutService


def main() -> None:
    """CLI entrypoint for payout backfill."""

    parser = argparse.ArgumentParser(description="Backfill payout records from the processor.")
    parser.add_argument("--account", default=None, help="Only this connected account id")
    parser.add_argument("--limit", type=int, default=100)
    args = parser.parse_args()

    configure_logging()
    session_factory = make_session_factory(make_engine(settings.database_url))
    service = PayoutService(session_factory, StripeProcessor(settings.stripe_secret_key))

    if args.account:
        account_ids = [args.account]
    else:
        with session_factory() as db:
            account_ids = list(db.execute(select(StripeAccount.id)).scalars())

    report = {account_id: service.backfill_payouts(account_id, limit=args.limit) for account_id in account_ids}
    print(json.dumps(report, indent=2))


if __name__ == "__main__":
    main()
