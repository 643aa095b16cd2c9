import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import Settings, get_settings
from app.infrastructure.notifications import (
    ConnectionRegistry,
    LivenessMonitor,
    PendingNotificationQueue,
)
from app.infrastructure.storage import build_pending_store
from app.interfaces.api.dependencies import RelayContext
from app.interfaces.api.routes import register_routes
from app.utils import resolve_timezone

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Apply ``level`` to the root logger, adding a handler when none exists."""

    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(level.upper())


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the relay FastAPI application."""

    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the pending queue and run the liveness monitor while serving."""

        store, engine = build_pending_store(settings)
        queue = PendingNotificationQueue(store, tz=resolve_timezone(settings.app_timezone))
        await queue.open()
        registry = ConnectionRegistry()
        monitor = LivenessMonitor(registry, interval=settings.heartbeat_interval_seconds)
        app.state.relay = RelayContext(
            settings=settings, registry=registry, queue=queue, monitor=monitor
        )
        monitor_task = asyncio.create_task(monitor.run())
        try:
            yield
        finally:
            monitor_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await monitor_task
            app.state.relay = None
            if engine is not None:
                engine.dispose()

    app = FastAPI(title="Notification Relay", lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info("Notification relay listening on port %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
