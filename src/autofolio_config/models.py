"""Pydantic models for application configuration with validation."""

from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field, field_validator


DEFAULT_DISPLAY_CHECKPOINTS = [0, 30, 60, 90, 120, 150, 180, 210, 240, 270, 300, 330, 364]


class SimulationConfig(BaseModel):
    """Backtest simulation parameters."""

    fee_rate: float = Field(
        default=0.003,
        ge=0.0,
        lt=1.0,
        description="Swap fee charged on the buy side of every rebalance (0.003 = 0.3%)"
    )
    allocation_tolerance: float = Field(
        default=0.01,
        ge=0.0,
        le=1.0,
        description="Allowed difference between the allocation total and 100%"
    )
    default_initial_investment: float = Field(
        default=10000.0,
        gt=0.0,
        description="Initial investment used when a backtest does not specify one"
    )
    default_threshold_percent: float = Field(
        default=10.0,
        ge=0.0,
        le=100.0,
        description="Drift threshold relative to each asset's target percentage"
    )
    display_checkpoints: List[int] = Field(
        default_factory=lambda: list(DEFAULT_DISPLAY_CHECKPOINTS),
        description="Day indexes sampled for chart display"
    )

    @field_validator("display_checkpoints")
    @classmethod
    def validate_checkpoints(cls, v: List[int]) -> List[int]:
        """Checkpoints must be non-negative and strictly increasing."""
        if any(day < 0 for day in v):
            raise ValueError("Display checkpoints must be non-negative day indexes")
        if any(later <= earlier for earlier, later in zip(v, v[1:])):
            raise ValueError("Display checkpoints must be strictly increasing")
        return v


class MonitorConfig(BaseModel):
    """Periodic portfolio monitoring settings."""

    interval_seconds: int = Field(
        default=300,
        ge=30,
        le=86400,
        description="How often every active portfolio is checked"
    )
    initial_delay_seconds: float = Field(
        default=5.0,
        ge=0.0,
        le=300.0,
        description="Delay before the first check after startup"
    )
    portfolios_file_path: str = Field(
        default="/app/portfolios.yaml",
        description="YAML file listing the monitored portfolios"
    )
    check_history_size: int = Field(
        default=1000,
        ge=1,
        le=100000,
        description="Number of portfolio checks kept in memory"
    )


class PriceConfig(BaseModel):
    """Price source settings."""

    jupiter_price_url: str = Field(
        default="https://api.jup.ag/price/v2",
        description="Jupiter price API endpoint"
    )
    coingecko_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="CoinGecko API base URL for historical prices"
    )
    price_cache_ttl_seconds: int = Field(
        default=60,
        ge=0,
        le=3600,
        description="How long current prices are cached"
    )
    history_cache_ttl_seconds: int = Field(
        default=3600,
        ge=0,
        le=86400,
        description="How long historical price series are cached"
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        ge=1.0,
        le=120.0,
        description="Timeout for price API requests"
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per price request before giving up"
    )
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=30.0,
        description="Wait time between price request attempts"
    )
    history_days: int = Field(
        default=365,
        ge=2,
        le=3650,
        description="Days of history requested for backtests"
    )
    token_mints: Dict[str, str] = Field(
        default_factory=lambda: {
            "SOL": "So11111111111111111111111111111111111111112",
            "USDC": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
            "USDT": "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB",
            "BTC": "3NZ9JMVBmGAqocybic2c7LQCJScmgsAZ6vQqTDzcqmJh",
        },
        description="Asset symbol to Solana token mint address"
    )
    coingecko_ids: Dict[str, str] = Field(
        default_factory=lambda: {
            "SOL": "solana",
            "BTC": "bitcoin",
            "ETH": "ethereum",
            "USDC": "usd-coin",
            "USDT": "tether",
        },
        description="Asset symbol to CoinGecko coin id"
    )
    pegged_assets: List[str] = Field(
        default_factory=lambda: ["USDC", "USDT"],
        description="Stablecoins priced at 1.0 when the price API omits them"
    )


class SolanaConfig(BaseModel):
    """Solana RPC settings for wallet balances."""

    rpc_url: str = Field(
        default="https://api.mainnet-beta.solana.com",
        description="Solana JSON-RPC endpoint"
    )
    token_program_id: str = Field(
        default="TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA",
        description="SPL token program id used to list token accounts"
    )
    request_timeout_seconds: float = Field(
        default=15.0,
        ge=1.0,
        le=120.0,
        description="Timeout for RPC requests"
    )


class NotificationConfig(BaseModel):
    """Drift alert delivery settings."""

    enabled: bool = Field(
        default=False,
        description="Enable/disable drift notifications"
    )
    channel: str = Field(
        default="",
        description="Default ntfy topic for portfolios without their own channel"
    )
    ntfy_url: str = Field(
        default="https://ntfy.sh",
        description="ntfy server URL"
    )
    dashboard_url: str = Field(
        default="https://autofolio.space",
        description="Link included in notifications"
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        ge=1.0,
        le=120.0,
        description="Timeout for ntfy requests"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root log level"
    )
    format: Literal["text", "json"] = Field(
        default="text",
        description="Log line format"
    )
    file_path: Optional[str] = Field(
        default=None,
        description="Optional log file, rotated daily and compressed"
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        return v.upper() if isinstance(v, str) else v


class AppConfig(BaseModel):
    """Root application configuration."""

    simulation: SimulationConfig = Field(
        default_factory=SimulationConfig,
        description="Backtest simulation parameters"
    )
    monitor: MonitorConfig = Field(
        default_factory=MonitorConfig,
        description="Portfolio monitoring settings"
    )
    prices: PriceConfig = Field(
        default_factory=PriceConfig,
        description="Price source settings"
    )
    solana: SolanaConfig = Field(
        default_factory=SolanaConfig,
        description="Solana RPC settings"
    )
    notifications: NotificationConfig = Field(
        default_factory=NotificationConfig,
        description="Notification settings"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration"
    )
