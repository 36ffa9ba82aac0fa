"""Creator registration, profile, settings, and wallet sync."""

import re

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from donutsme.clients.privy_client import PrivyClient
from donutsme.common.cache import TTLCache
from donutsme.common.errors import AppError, Conflict, NotFound, ValidationFailed
from donutsme.common.logging import logger
from donutsme.services.users.models import User, UserSettings
from donutsme.services.users.schemas import (
    USERNAME_PATTERN,
    ProfileOut,
    ProfileUpdateRequest,
    RegisterRequest,
    SettingsOut,
    SettingsUpdateRequest,
    UserOut,
)
from donutsme.services.wallets.models import Wallet
from donutsme.services.wallets.schemas import WalletOut


class UserService:
    """Owns `users` / `user_settings` rows and mirrors provider wallets into `wallets`.

    Complete profiles are read through `profile_cache`; every write that can
    change a profile invalidates that creator's entry.
    """

    def __init__(self, session_factory, identity: PrivyClient, profile_cache: TTLCache) -> None:
        self.session_factory = session_factory
        self.identity = identity
        self.profile_cache = profile_cache

    @staticmethod
    def _cache_key(user_id: str) -> str:
        return f"profile:{user_id}"

    def is_registered(self, user_id: str) -> bool:
        with self.session_factory() as db:
            return db.get(User, user_id) is not None

    def is_username_taken(self, username: str) -> bool:
        if not re.fullmatch(USERNAME_PATTERN, username):
            raise ValidationFailed(
                "Username must be 3-50 characters and contain only letters, numbers, underscores, and hyphens",
                error="Invalid username",
            )
        with self.session_factory() as db:
            existing = db.execute(select(User.id).where(User.username == username.lower())).first()
            return existing is not None

    def register(self, user_id: str, req: RegisterRequest) -> ProfileOut:
        """Create the creator row plus default settings, then pull their wallets."""

        username = req.username.lower()
        with self.session_factory() as db:
            if db.get(User, user_id) is not None:
                raise Conflict("This Privy account is already registered", error="User already registered")
            if db.execute(select(User.id).where(User.username == username)).first() is not None:
                raise Conflict("This username is already in use", error="Username taken")
            db.add(
                User(
                    id=user_id,
                    username=username,
                    display_name=req.display_name or req.username,
                    bio=req.bio,
                    email=req.email,
                )
            )
            db.add(UserSettings(user_id=user_id, auto_convert_btc=False, payout_schedule="manual"))
            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                raise Conflict("This username is already in use", error="Username taken") from exc
        logger.info("user_registered user_id=%s username=%s", user_id, username)

        try:
            self.sync_wallets(user_id)
        except AppError as exc:
            # The creator can retry through POST /users/sync-wallets.
            logger.warning("wallet_sync_after_register_failed user_id=%s error=%s", user_id, exc.message)

        profile = self.get_profile(user_id)
        if profile is None:
            raise NotFound("User profile does not exist", error="User not found")
        return profile

    def get_profile(self, user_id: str) -> ProfileOut | None:
        key = self._cache_key(user_id)
        cached = self.profile_cache.get(key)
        if cached is not None:
            return cached

        with self.session_factory() as db:
            user = db.get(User, user_id)
            if user is None:
                return None
            wallets = db.execute(select(Wallet).where(Wallet.user_id == user_id)).scalars().all()
            user_settings = db.get(UserSettings, user_id)
            profile = ProfileOut(
                **UserOut.model_validate(user).model_dump(),
                wallets=[WalletOut.model_validate(w) for w in wallets],
                settings=SettingsOut.model_validate(user_settings) if user_settings else None,
            )
        self.profile_cache.set(key, profile)
        return profile

    def update_profile(self, user_id: str, req: ProfileUpdateRequest) -> UserOut:
        with self.session_factory() as db:
            user = db.get(User, user_id)
            if user is None:
                raise NotFound("User profile does not exist", error="User not found")
            for field, value in req.model_dump(exclude_unset=True).items():
                setattr(user, field, value)
            db.commit()
            db.refresh(user)
            result = UserOut.model_validate(user)
        self.profile_cache.invalidate(self._cache_key(user_id))
        return result

    def sync_wallets(self, user_id: str) -> list[WalletOut]:
        """Insert provider wallets not yet known locally; the first embedded wallet becomes primary."""

        provider_wallets = self.identity.get_user_wallets(user_id)
        with self.session_factory() as db:
            has_primary = (
                db.execute(select(Wallet.id).where(Wallet.user_id == user_id, Wallet.is_primary.is_(True))).first()
                is not None
            )
            for linked in provider_wallets.all:
                known = db.execute(select(Wallet.id).where(Wallet.address == linked.address)).first()
                if known is not None or db.get(Wallet, linked.local_id) is not None:
                    continue
                make_primary = linked.is_embedded and not has_primary
                db.add(
                    Wallet(
                        id=linked.local_id,
                        user_id=user_id,
                        address=linked.address,
                        chain_type=linked.chain_type,
                        wallet_type="embedded" if linked.is_embedded else "external",
                        is_primary=make_primary,
                    )
                )
                has_primary = has_primary or make_primary
                logger.info("wallet_synced user_id=%s address=%s", user_id, linked.address)
            db.commit()
            wallets = db.execute(select(Wallet).where(Wallet.user_id == user_id)).scalars().all()
            result = [WalletOut.model_validate(w) for w in wallets]
        self.profile_cache.invalidate(self._cache_key(user_id))
        return result

    def get_settings(self, user_id: str) -> SettingsOut:
        with self.session_factory() as db:
            row = db.get(UserSettings, user_id)
            if row is None:
                raise NotFound("No settings found for this user", error="Settings not found")
            return SettingsOut.model_validate(row)

    def update_settings(self, user_id: str, req: SettingsUpdateRequest) -> SettingsOut:
        with self.session_factory() as db:
            row = db.get(UserSettings, user_id)
            if row is None:
                raise NotFound("No settings found for this user", error="Settings not found")
            for field, value in req.model_dump(exclude_unset=True).items():
                if value is not None:
                    setattr(row, field, value)
            db.commit()
            db.refresh(row)
            result = SettingsOut.model_validate(row)
        self.profile_cache.invalidate(self._cache_key(user_id))
        return result
