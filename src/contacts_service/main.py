"""Service entry point: load settings, wire the container, serve HTTP."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Any

from .api import create_app, start_http_server
from .app import build_container
from .core.config import Settings, load_settings
from .observability.logger import setup_logging

logger = logging.getLogger(__name__)


def prepare_settings(
    config_path: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load, validate, and apply the logging configuration."""
    settings = load_settings(config_path=config_path, overrides=overrides)
    settings.validate_settings()
    setup_logging(
        level=settings.observability.log_level,
        format=settings.observability.log_format,
    )
    return settings


async def run(
    config_path: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> None:
    """Serve until SIGINT/SIGTERM, then shut down in reverse order."""
    settings = prepare_settings(config_path, overrides)

    if settings.observability.metrics_port:
        from .observability.metrics import start_metrics_server

        start_metrics_server(port=settings.observability.metrics_port)

    container = build_container(settings)
    await container.start()

    app = create_app(container.service, container.notifier)
    runner = await start_http_server(app, settings.http.host, settings.http.port)

    # Set up graceful shutdown
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _signal_handler() -> None:
        logger.info("Received shutdown signal")
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    try:
        await stop_event.wait()
    finally:
        await runner.cleanup()
        await container.stop()
        logger.info("Shutdown complete")
