"""Request/response schemas for payout endpoints."""

from datetime import datetime

from pydantic import Field

from donutsme.common.schemas import CamelModel


class PayoutCreateRequest(CamelModel):
    """Amount is in major units ("12.50"); numbers are accepted too."""

    amount: str | int | float | None = None
    currency: str = Field(default="usd", min_length=3, max_length=3)


class PayoutCreatedOut(CamelModel):
    id: str
    amount: str
    currency: str
    status: str
    arrival_date: datetime | None = None


class PayoutOut(CamelModel):
    id: str
    amount: str
    currency: str
    status: str
    arrival_date: datetime | None = None
    method: str | None = None
    failure_code: str | None = None
    failure_message: str | None = None
    created_at: datetime | None = None


class PayoutDetailOut(PayoutOut):
    destination_type: str | None = None
    updated_at: datetime | None = None
