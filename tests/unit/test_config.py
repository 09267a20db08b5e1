"""Tests for environment and YAML configuration loading."""

from decimal import Decimal

from gamepass_bot.config import BotConfig, Config, PricingConfig, RegistryConfig, ScanConfig


def test_listen_host_defaults_to_loopback(monkeypatch) -> None:
    monkeypatch.delenv("BOT_LISTEN_HOST", raising=False)

    assert BotConfig().listen_host == "127.0.0.1"


def test_listen_host_env_override(monkeypatch) -> None:
    monkeypatch.setenv("BOT_LISTEN_HOST", "0.0.0.0")

    assert BotConfig().listen_host == "0.0.0.0"


def test_optional_ids_read_from_env(monkeypatch) -> None:
    monkeypatch.setenv("OWNER_ID", "42")
    monkeypatch.setenv("SCAN_CHAT_ID", "-100123")
    monkeypatch.delenv("ELIGIBLE_CHAT_ID", raising=False)

    bot = BotConfig()

    assert bot.owner_id == 42
    assert bot.scan_chat_id == -100123
    assert bot.eligible_chat_id is None


def test_webhook_mode_follows_domain(monkeypatch) -> None:
    monkeypatch.delenv("RAILWAY_PUBLIC_DOMAIN", raising=False)
    monkeypatch.delenv("RAILWAY_URL", raising=False)
    assert BotConfig().use_webhook is False

    monkeypatch.setenv("RAILWAY_URL", "bot.example.app")
    bot = BotConfig()
    assert bot.use_webhook is True
    assert bot.webhook_domain == "bot.example.app"


def test_scan_defaults(monkeypatch) -> None:
    for name in ("SCAN_TRIGGER_WORD", "SCAN_COOLDOWN_SECONDS", "SCAN_REQUEST_DELAY", "SCAN_MAX_RETRIES"):
        monkeypatch.delenv(name, raising=False)

    scan = ScanConfig()

    assert scan.trigger_word == "scan"
    assert scan.cooldown_seconds == 5.0
    assert scan.request_delay_seconds == 0.35
    assert scan.max_retries == 3
    assert scan.chunk_limit == 3500


def test_registry_path_env_override(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("GROUPS_DB_PATH", str(tmp_path / "groups.json"))

    assert RegistryConfig().db_path == str(tmp_path / "groups.json")


def test_bundled_pricing_yaml_loaded() -> None:
    pricing = Config().pricing

    assert pricing.payout_rate == Decimal("0.7")
    assert pricing.price_fields[0] == "PriceInRobux"
    assert "RegionalPriceExperiment" in pricing.experiment_features
    assert "isPriceOptimized" in pricing.experiment_flags


def test_custom_pricing_yaml(tmp_path) -> None:
    (tmp_path / "pricing.yml").write_text(
        "payout_rate: 0.6\n"
        "regional_pricing:\n"
        "  features:\n"
        "    - SomethingNew\n",
        encoding="utf-8",
    )

    pricing = Config(config_dir=tmp_path).pricing

    assert pricing.payout_rate == Decimal("0.6")
    assert pricing.experiment_features == ["SomethingNew"]
    assert pricing.experiment_flags == PricingConfig().experiment_flags
    assert pricing.price_fields == PricingConfig().price_fields


def test_missing_pricing_yaml_uses_defaults(tmp_path) -> None:
    pricing = Config(config_dir=tmp_path).pricing

    assert pricing == PricingConfig()
