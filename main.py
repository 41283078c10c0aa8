"""
RouteScout - Main Entry Point

Polls spot prices for the configured tokens on five exchanges, evaluates
whether withdrawing from one exchange and depositing on another (directly
or via a route token) is profitable after fees, and serves the results.

Features:
- Concurrent price fetches with per-call timeouts
- Fee-aware transfer route evaluation
- Telegram notifications with step-by-step transfer guides
- Dashboard and JSON API guarded by access keys
- Prometheus metrics export
"""
import asyncio
import logging
import signal
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from config import LOG_LEVEL, MODE, WEB_HOST, WEB_PORT, AppConfig, load_config
from engine import ArbitrageEngine
from engine_metrics import MetricsEngine
from exchanges import create_price_source
from src.auth.service import access_key_service
from src.notifications import NotificationService

# Dashboard
from dashboard import app, manager

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)

# Reduce noise from libraries
logging.getLogger('aiohttp').setLevel(logging.WARNING)
logging.getLogger('uvicorn.access').setLevel(logging.WARNING)


class ArbitrageBot:
    """Wires configuration, price source, engine, notifier and dashboard together"""

    def __init__(self, config: AppConfig, mode: str = "live"):
        self.config = config
        self.mode = mode
        self.metrics = MetricsEngine(mode=mode)
        self.notifier = NotificationService(
            telegram_bot_token=config.telegram_token,
            telegram_chat_id=config.telegram_chat_id,
            timeout=config.fetch_timeout_sec,
        )
        self.engine = ArbitrageEngine(
            config,
            create_price_source(mode, timeout=config.fetch_timeout_sec),
            notifier=self.notifier,
            metrics=self.metrics,
        )
        self.task: Optional[asyncio.Task] = None

        if mode == "simulation":
            logger.info("🎮 Running in SIMULATION MODE with mock data")

    def setup(self):
        """Connect the engine to the dashboard"""
        manager.set_engine(self.engine)
        logger.info(f"Monitoring tokens: {', '.join(self.config.tokens)}")
        if len(access_key_service) == 0:
            logger.warning("No access keys loaded, dashboard login is disabled")
        else:
            logger.info(f"Dashboard login enabled for {len(access_key_service)} access keys")
        if self.notifier.telegram_configured:
            logger.info("Telegram notifications enabled")

    async def start(self):
        """Start the evaluation loop"""
        self.setup()
        logger.info("=" * 60)
        logger.info("🚀 ROUTESCOUT STARTING")
        logger.info(f"Dashboard available at http://localhost:{WEB_PORT}")
        logger.info(f"Prometheus metrics at http://localhost:{WEB_PORT}/metrics")
        logger.info("=" * 60)
        self.task = asyncio.create_task(self.engine.run())

    async def stop(self):
        """Stop the evaluation loop"""
        logger.info("Shutting down...")
        self.engine.stop()
        if self.task:
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass
        logger.info("Bot stopped")


bot: Optional[ArbitrageBot] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan handler"""
    global bot
    bot = ArbitrageBot(load_config(), mode=MODE)
    await bot.start()
    yield
    await bot.stop()


app.router.lifespan_context = lifespan


def handle_sigint(sig, frame):
    """Handle Ctrl+C gracefully"""
    logger.info("Received SIGINT, shutting down...")
    sys.exit(0)


def main():
    """Main entry point"""
    signal.signal(signal.SIGINT, handle_sigint)
    uvicorn.run(
        app,
        host=WEB_HOST,
        port=WEB_PORT,
        log_level="warning"
    )


if __name__ == "__main__":
    main()
