"""Identity and wallet provider client (Privy).

Access tokens are ES256 JWTs verified locally against the app's verification
key; user and wallet lookups go over HTTP with app credentials. One instance
(and one pooled `httpx.Client`) is built at startup and injected.
"""

import jwt
import httpx
from pydantic import BaseModel, ConfigDict, Field

from donutsme.common.errors import Unauthorized, UpstreamError
from donutsme.common.logging import logger
from donutsme.common.metrics import upstream_failures_total

PRIVY_ISSUER = "privy.io"


class AuthClaims(BaseModel):
    user_id: str
    app_id: str
    session_id: str | None = None


class LinkedWallet(BaseModel):
    """A `type == "wallet"` entry of a provider user's linked accounts."""

    model_config = ConfigDict(extra="allow")

    address: str
    id: str | None = None
    wallet_id: str | None = None
    chain_type: str = "ethereum"
    wallet_client_type: str | None = None
    verified_at: int | None = None
    first_verified_at: int | None = None

    @property
    def is_embedded(self) -> bool:
        return self.wallet_client_type == "privy"

    @property
    def local_id(self) -> str:
        # Older linked accounts carry no wallet id; the address is unique per chain.
        return self.wallet_id or self.id or self.address


class ProviderWallets(BaseModel):
    embedded: list[LinkedWallet] = Field(default_factory=list)
    external: list[LinkedWallet] = Field(default_factory=list)

    @property
    def all(self) -> list[LinkedWallet]:
        return [*self.embedded, *self.external]


class AssetBalance(BaseModel):
    model_config = ConfigDict(extra="allow")

    chain: str
    asset: str
    raw_value: str
    raw_value_decimals: int
    display_values: dict[str, str] = Field(default_factory=dict)

    @property
    def display_native(self) -> str:
        for key in ("eth", "btc", "sol"):
            if key in self.display_values:
                return self.display_values[key]
        return "0"

    @property
    def display_usd(self) -> str:
        return self.display_values.get("usd", "0")


class WalletBalanceResponse(BaseModel):
    balances: list[AssetBalance] = Field(default_factory=list)


class PrivyClient:
    def __init__(
        self,
        app_id: str,
        app_secret: str,
        verification_key: str,
        auth_url: str = "https://auth.privy.io",
        api_url: str = "https://api.privy.io",
        timeout: float = 10.0,
        http: httpx.Client | None = None,
    ) -> None:
        self.app_id = app_id
        self.verification_key = verification_key
        self.auth_url = auth_url.rstrip("/")
        self.api_url = api_url.rstrip("/")
        self.http = http or httpx.Client(
            auth=(app_id, app_secret),
            headers={"privy-app-id": app_id},
            timeout=timeout,
        )

    def verify_access_token(self, token: str) -> AuthClaims:
        """Validate signature, issuer, audience and expiry of an access token."""

        try:
            claims = jwt.decode(
                token,
                self.verification_key,
                algorithms=["ES256"],
                issuer=PRIVY_ISSUER,
                audience=self.app_id,
                options={"require": ["sub", "exp", "iss", "aud"]},
            )
        except jwt.PyJWTError as exc:
            logger.warning("access_token_rejected error=%s", exc)
            raise Unauthorized("Invalid or expired token") from exc
        return AuthClaims(user_id=claims["sub"], app_id=claims["aud"], session_id=claims.get("sid"))

    def _get(self, operation: str, url: str) -> dict:
        try:
            resp = self.http.get(url)
        except httpx.HTTPError as exc:
            upstream_failures_total.labels(dependency="privy", operation=operation).inc()
            raise UpstreamError(f"Privy API unreachable: {exc}") from exc
        if resp.status_code >= 400:
            upstream_failures_total.labels(dependency="privy", operation=operation).inc()
            raise UpstreamError(f"Privy API error: {resp.status_code} - {resp.text}")
        return resp.json()

    def get_user(self, user_id: str) -> dict:
        return self._get("users.get", f"{self.auth_url}/api/v1/users/{user_id}")

    def get_user_wallets(self, user_id: str) -> ProviderWallets:
        """Split a user's linked wallets into provider-embedded and external ones."""

        user = self.get_user(user_id)
        wallets = ProviderWallets()
        for account in user.get("linked_accounts") or []:
            if account.get("type") != "wallet":
                continue
            wallet = LinkedWallet.model_validate(account)
            (wallets.embedded if wallet.is_embedded else wallets.external).append(wallet)
        return wallets

    def get_wallet_balance(self, wallet_id: str) -> WalletBalanceResponse:
        data = self._get("wallets.balance", f"{self.api_url}/v1/wallets/{wallet_id}/balance")
        return WalletBalanceResponse.model_validate(data)

    def close(self) -> None:
        self.http.close()
