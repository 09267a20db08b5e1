"""Configuration management for the gamepass bot.

Handles all application configuration including environment variables, YAML
config files, and default settings. Provides structured configuration classes
for the Telegram transport, the scan pipeline, Roblox pricing lookups and the
group registry.
"""

from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings


class ScanConfig(BaseSettings):
    """Scan pipeline throttling and output settings.

    Attributes:
        trigger_word: Literal reply text that starts a scan.
        cooldown_seconds: Minimum time between two admitted scans per user.
        request_delay_seconds: Pause between two listing quotes in one scan.
        max_retries: Extra attempts on HTTP 429 for rate-limited calls.
        chunk_limit: Character budget per outgoing report message.
    """
    trigger_word: str = Field(default="scan", validation_alias="SCAN_TRIGGER_WORD")
    cooldown_seconds: float = Field(default=5.0, validation_alias="SCAN_COOLDOWN_SECONDS")
    request_delay_seconds: float = Field(default=0.35, validation_alias="SCAN_REQUEST_DELAY")
    max_retries: int = Field(default=3, validation_alias="SCAN_MAX_RETRIES")
    chunk_limit: int = 3500  # Telegram hard limit is 4096


class PricingConfig(BaseSettings):
    """Roblox game pass pricing parameters.

    Attributes:
        payout_rate: Share of the price the seller receives after the fee.
        price_fields: Product-info keys that may carry the price, in priority order.
        experiment_flags: Boolean keys of priceInformation meaning regional pricing.
        experiment_features: enabledFeatures tokens meaning regional pricing.
    """
    payout_rate: Decimal = Decimal("0.7")
    price_fields: list[str] = ["PriceInRobux", "priceInRobux", "price"]
    experiment_flags: list[str] = [
        "isInActivePriceOptimizationExperiment",
        "isInPriceOptimizationExperiment",
        "isPriceOptimized",
    ]
    experiment_features: list[str] = [
        "RegionalPriceExperiment",
        "RegionalPricing",
        "PriceOptimization",
        "PriceOptimizationExperiment",
        "DynamicPricing",
    ]


class RobloxConfig(BaseSettings):
    """Roblox API endpoints and credentials.

    Attributes:
        game_passes_url: Base URL of the game pass API.
        users_url: Base URL of the users API.
        groups_url: Base URL of the groups API.
        security_cookie: Optional .ROBLOSECURITY cookie for the details endpoint.
    """
    game_passes_url: str = "https://apis.roblox.com/game-passes/v1/game-passes"
    users_url: str = "https://users.roblox.com/v1"
    groups_url: str = "https://groups.roblox.com/v1"
    security_cookie: str | None = Field(default=None, validation_alias="ROBLOSECURITY")


class RegistryConfig(BaseSettings):
    """Group registry storage configuration.

    Attributes:
        db_path: Path to the JSON file holding registered groups.
    """
    db_path: str = Field(default="data/groups.json", validation_alias="GROUPS_DB_PATH")


class BotConfig(BaseSettings):
    """Main Telegram bot configuration.

    Attributes:
        bot_token: Telegram bot API token from environment.
        owner_id: Telegram user allowed to manage registered groups.
        scan_chat_id: Chat where scan replies are recognised.
        eligible_chat_id: Chat where /eligible may be used.
        port: Server port for webhook mode.
        listen_host: Interface the webhook server binds to.
        railway_domain: Railway public domain for webhooks.
        railway_url: Railway URL for webhooks (fallback).
        timeout: HTTP request timeout in seconds.
        log_level: Root logging level.
    """
    bot_token: str = Field(..., validation_alias="BOT_TOKEN")
    owner_id: int | None = Field(default=None, validation_alias="OWNER_ID")
    scan_chat_id: int | None = Field(default=None, validation_alias="SCAN_CHAT_ID")
    eligible_chat_id: int | None = Field(default=None, validation_alias="ELIGIBLE_CHAT_ID")
    port: int = Field(default=8000, validation_alias="PORT")
    listen_host: str = Field(default="127.0.0.1", validation_alias="BOT_LISTEN_HOST")
    railway_domain: str | None = Field(default=None, validation_alias="RAILWAY_PUBLIC_DOMAIN")
    railway_url: str | None = Field(default=None, validation_alias="RAILWAY_URL")
    timeout: int = 20
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @property
    def webhook_domain(self) -> str | None:
        """Get webhook domain for Railway deployment.

        Returns:
            Domain string if available, None for polling mode.
        """
        return self.railway_domain or self.railway_url

    @property
    def use_webhook(self) -> bool:
        """Determine if webhook mode should be used.

        Returns:
            True if webhook domain is configured, False for polling mode.
        """
        return bool(self.webhook_domain)


class Config:
    """Application configuration manager.

    Centralizes loading and management of all configuration sources including
    environment variables, YAML files, and default values. Provides typed
    access to configuration sections for different application components.
    """

    def __init__(self, config_dir: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_dir: Path to configuration directory, defaults to gamepass_bot/config.
        """
        if config_dir is None:
            config_dir = Path(__file__).parent / "config"

        self.config_dir = Path(config_dir)

        self.bot = BotConfig()
        self.scan = ScanConfig()
        self.roblox = RobloxConfig()
        self.registry = RegistryConfig()
        self.pricing = self._load_pricing()

    def _load_pricing(self) -> PricingConfig:
        """Load pricing rules from YAML configuration.

        Returns:
            PricingConfig built from pricing.yml, or defaults if the file is missing.
        """
        pricing_path = self.config_dir / "pricing.yml"
        if not pricing_path.exists():
            return PricingConfig()

        with open(pricing_path) as f:
            data: dict[str, Any] = yaml.safe_load(f) or {}

        defaults = PricingConfig()
        experiment = data.get("regional_pricing", {})
        return PricingConfig(
            payout_rate=Decimal(str(data.get("payout_rate", defaults.payout_rate))),
            price_fields=data.get("price_fields", defaults.price_fields),
            experiment_flags=experiment.get("flags", defaults.experiment_flags),
            experiment_features=experiment.get("features", defaults.experiment_features),
        )


# Global configuration instance
config = Config()
