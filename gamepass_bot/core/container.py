"""Dependency-injection container.

This module defines a dependency-injection (DI) container that wires together
the application's components. Scan state (cooldowns and the scan queue) lives
in singletons created once per process and injected into the Telegram
handlers.
"""

from dependency_injector import containers, providers

from gamepass_bot.bot.listing_resolver import ListingResolver
from gamepass_bot.bot.response_formatter import EligibilityReportBuilder, ReportBuilder
from gamepass_bot.bot.scan_orchestrator import ScanOrchestrator
from gamepass_bot.bot.scan_queue import CooldownGate, ScanQueue
from gamepass_bot.config import Config
from gamepass_bot.services.http import RateLimitedFetcher
from gamepass_bot.services.membership import MembershipClient
from gamepass_bot.services.pricing import PricingClient
from gamepass_bot.services.registry import RegistryStore


class Container(containers.DeclarativeContainer):
    """DI container for the application.

    This container holds the wiring for all the application's components.
    """

    config = providers.Configuration()

    # Services
    fetcher = providers.Singleton(RateLimitedFetcher, max_retries=config.scan.max_retries)
    pricing_client = providers.Singleton(
        PricingClient, fetcher=fetcher, max_retries=config.scan.max_retries
    )
    membership_client = providers.Singleton(MembershipClient, fetcher=fetcher)
    registry_store = providers.Singleton(RegistryStore, db_path=config.registry.db_path)

    # Bot components
    listing_resolver = providers.Singleton(ListingResolver)
    scan_orchestrator = providers.Singleton(
        ScanOrchestrator,
        resolver=listing_resolver,
        pricing_client=pricing_client,
        request_delay=config.scan.request_delay_seconds,
    )
    cooldown_gate = providers.Singleton(CooldownGate, cooldown_seconds=config.scan.cooldown_seconds)
    scan_queue = providers.Singleton(ScanQueue)
    report_builder = providers.Singleton(ReportBuilder, chunk_limit=config.scan.chunk_limit)
    eligibility_report_builder = providers.Singleton(EligibilityReportBuilder)


def build_container(app_config: Config) -> Container:
    """Create a container populated from application settings.

    Args:
        app_config: Loaded application configuration.

    Returns:
        Container ready to be wired into the handler modules.
    """
    container = Container()
    container.config.from_dict(
        {
            "scan": app_config.scan.model_dump(),
            "registry": app_config.registry.model_dump(),
        }
    )
    return container
