"""Request/response schemas for creator profile endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from donutsme.common.schemas import CamelModel
from donutsme.services.wallets.schemas import WalletOut

USERNAME_PATTERN = r"^[a-zA-Z0-9_-]{3,50}$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(CamelModel):
    username: str = Field(min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    display_name: str | None = Field(default=None, max_length=100)
    bio: str | None = Field(default=None, max_length=500)
    email: str | None = Field(default=None, max_length=255, pattern=EMAIL_PATTERN)


class ProfileUpdateRequest(CamelModel):
    display_name: str | None = Field(default=None, max_length=100)
    bio: str | None = Field(default=None, max_length=500)
    email: str | None = Field(default=None, max_length=255, pattern=EMAIL_PATTERN)


class SettingsUpdateRequest(CamelModel):
    auto_convert_btc: bool | None = None
    payout_schedule: Literal["manual", "daily", "weekly", "monthly"] | None = None
    notification_email: bool | None = None
    notification_transaction: bool | None = None
    notification_payout: bool | None = None


class UserOut(CamelModel):
    id: str
    username: str
    display_name: str | None = None
    bio: str | None = None
    email: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SettingsOut(CamelModel):
    user_id: str
    auto_convert_btc: bool
    payout_schedule: str
    notification_email: bool
    notification_transaction: bool
    notification_payout: bool


class ProfileOut(UserOut):
    wallets: list[WalletOut] = Field(default_factory=list)
    settings: SettingsOut | None = None
