"""Application entry point.

Main module that initializes and runs the Telegram bot application. Handles both
webhook mode (for production deployment on Railway) and polling mode (for local
development). Configures logging, builds the dependency container and registers
bot handlers for commands and scan replies.
"""

import logging

from telegram import BotCommand
from telegram.ext import Application, CommandHandler, MessageHandler, filters

from .bot import handlers
from .bot.messages import COMMAND_DESCRIPTIONS
from .config import config
from .core.container import Container, build_container

# Logging
logging.basicConfig(
    format="%(asctime)s - %(levelname)s - %(message)s",
    level=getattr(logging, config.bot.log_level.upper(), logging.INFO),
)
logger = logging.getLogger(__name__)


async def register_commands(application: Application) -> None:
    """Publish the command list shown in Telegram clients."""
    commands = [BotCommand(name, description) for name, description in COMMAND_DESCRIPTIONS.items()]
    await application.bot.set_my_commands(commands)
    logger.info("Bot commands registered")


async def cleanup_resources(container: Container) -> None:
    """Stop the scan worker and close the shared HTTP session."""
    try:
        await container.scan_queue().close()
        logger.info("Scan queue stopped")

        await container.fetcher().close()
        logger.info("HTTP session closed")
    except Exception as e:
        logger.warning(f"Error during cleanup: {e}")


def create_application(container: Container) -> Application:
    """Build the Telegram application with all handlers registered.

    Args:
        container: Wired dependency container.

    Returns:
        Configured Application instance.
    """
    app = Application.builder().token(config.bot.bot_token).build()

    async def post_init(application: Application) -> None:
        await register_commands(application)

    async def post_shutdown(application: Application) -> None:
        await cleanup_resources(container)

    app.post_init = post_init
    app.post_shutdown = post_shutdown

    app.add_handler(CommandHandler("start", handlers.start))
    app.add_handler(CommandHandler("eligible", handlers.eligible))
    app.add_handler(CommandHandler("add_group", handlers.add_group))
    app.add_handler(
        MessageHandler(filters.TEXT & filters.REPLY & ~filters.COMMAND, handlers.handle_scan_trigger)
    )

    return app


def main() -> None:
    """Main application entry point.

    Builds the dependency container, registers handlers, and starts the bot in
    either webhook mode (production) or polling mode (development).

    Raises:
        RuntimeError: If BOT_TOKEN environment variable is not set.
    """
    if not config.bot.bot_token:
        raise RuntimeError("Set BOT_TOKEN environment variable")

    container = build_container(config)
    container.wire(modules=[handlers])

    app = create_application(container)

    # Run in webhook or polling mode
    if config.bot.use_webhook:
        path = f"/{config.bot.bot_token}"
        webhook_url = f"https://{config.bot.webhook_domain}{path}"
        logger.info(f"Starting webhook on {config.bot.listen_host}:{config.bot.port}")

        app.run_webhook(
            listen=config.bot.listen_host,
            port=config.bot.port,
            url_path=path,
            webhook_url=webhook_url,
        )
    else:
        logger.warning("No public domain found; falling back to long-polling")
        app.run_polling()


if __name__ == "__main__":
    main()
