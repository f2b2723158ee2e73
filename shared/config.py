"""
Shared configuration management for the Launchpad services.
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings.

    Field names match the environment variables case-insensitively, so
    ``LAUNCH_SKIM_BP=200`` populates ``launch_skim_bp``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")
    app_version: str = Field(default="dev")

    # Solana
    network: str = Field(default="devnet")
    rpc_endpoint: str = Field(default="https://api.devnet.solana.com")
    rpc_timeout_seconds: float = Field(default=10.0)

    # Honest status cache
    honest_cache_ms: int = Field(default=60_000)

    # Pool discovery
    pool_cache_ms: int = Field(default=600_000)
    pool_sweep_interval_seconds: float = Field(default=900.0)
    raydium_pools_url: str = Field(default="https://api.raydium.io/v2/ammV3/ammPools")
    dexscreener_url: str = Field(default="https://api.dexscreener.com/latest/dex")

    # Fees
    launch_fee_wallet: Optional[str] = Field(default=None)
    fee_wallet: Optional[str] = Field(default=None)
    launch_flat_fee_sol: float = Field(default=0.0)
    launch_skim_bp: int = Field(default=0)

    # Canary
    canary_mode: bool = Field(default=False)
    canary_wallets: str = Field(default="")
    canary_max_sol: float = Field(default=0.02)
    canary_max_token_ui: float = Field(default=50.0)

    # Rate limiting
    rate_limit_identifier_policy: str = Field(default="unknown-bucket")
    meme_endpoint_limit: int = Field(default=20)
    meme_endpoint_window_ms: int = Field(default=600_000)
    meme_ai_limit: int = Field(default=5)
    meme_ai_window_ms: int = Field(default=600_000)
    meme_ai_daily_max: int = Field(default=0)
    meme_kit_cache_ms: int = Field(default=600_000)

    # AI taglines
    openai_api_key: Optional[str] = Field(default=None)
    openai_base_url: str = Field(default="https://api.openai.com/v1")
    openai_model: str = Field(default="gpt-4o-mini")

    # Admin
    admin_token: Optional[str] = Field(default=None)

    @field_validator("launch_skim_bp", mode="before")
    @classmethod
    def _clamp_skim_bp(cls, value):
        value = int(value or 0)
        return min(10_000, max(0, value))

    @field_validator("launch_flat_fee_sol", mode="before")
    @classmethod
    def _clamp_flat_fee(cls, value):
        return max(0.0, float(value or 0))

    @field_validator("canary_mode", mode="before")
    @classmethod
    def _parse_canary_mode(cls, value):
        # The launch scripts export CANARY_MODE=1 rather than a boolean literal.
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)

    @field_validator("rate_limit_identifier_policy")
    @classmethod
    def _check_identifier_policy(cls, value: str) -> str:
        if value not in ("unknown-bucket", "reject"):
            raise ValueError("rate_limit_identifier_policy must be 'unknown-bucket' or 'reject'")
        return value

    @property
    def is_mainnet(self) -> bool:
        return self.network.lower() == "mainnet"

    @property
    def canary_wallet_list(self) -> List[str]:
        return [w.strip() for w in self.canary_wallets.split(",") if w.strip()]

    @property
    def resolved_fee_wallet(self) -> Optional[str]:
        return self.launch_fee_wallet or self.fee_wallet or None


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
