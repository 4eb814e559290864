import asyncio
import logging
import os
import signal
import threading
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog.api.data import router as data_router
from catalog.api.health import router as health_router
from catalog.api.websocket import manager as connection_manager
from catalog.api.websocket import router as websocket_router
from catalog.config.settings import Settings, get_settings
from catalog.db.database import Database
from catalog.middleware.errors import ErrorHandlerMiddleware, register_exception_handlers
from catalog.middleware.monitoring import RequestMonitoringMiddleware
from catalog.monitoring.logger import configure_from_settings
from catalog.services.price_feed import PriceFeedBroadcaster

logger = logging.getLogger("catalog")


class ShutdownController:
    """Stops the server on a fatal error, forcing the exit if it hangs."""

    def __init__(self, grace_period: float):
        self.grace_period = grace_period
        self.requested = False

    def request(self) -> None:
        if self.requested:
            return
        self.requested = True

        logger.critical(f"Fatal error, shutting down (forced exit in {self.grace_period}s)")
        timer = threading.Timer(self.grace_period, os._exit, args=(1,))
        timer.daemon = True
        timer.start()
        os.kill(os.getpid(), signal.SIGTERM)


def install_fatal_handlers(loop: asyncio.AbstractEventLoop, shutdown: ShutdownController):
    """Treat unhandled async errors as fatal. Returns the previous loop handler."""
    previous = loop.get_exception_handler()

    def handle_exception(loop, context):
        exc = context.get("exception")
        logger.critical(f"Unhandled async error: {context.get('message')}", exc_info=exc)
        shutdown.request()

    loop.set_exception_handler(handle_exception)
    return previous


def watch_background_task(task: asyncio.Task, shutdown: ShutdownController) -> None:
    """Shut down if a background task dies with an exception."""

    def on_done(done: asyncio.Task):
        if done.cancelled():
            return
        exc = done.exception()
        if exc is not None:
            logger.critical(f"Background task {done.get_name()} crashed: {exc}", exc_info=exc)
            shutdown.request()

    task.add_done_callback(on_done)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    configure_from_settings(settings)
    logger.info(f"Starting {settings.APP_NAME} {settings.VERSION} ({settings.ENVIRONMENT})")

    loop = asyncio.get_running_loop()
    shutdown = ShutdownController(settings.SHUTDOWN_GRACE_PERIOD)
    app.state.shutdown = shutdown
    previous_handler = install_fatal_handlers(loop, shutdown)

    database = Database(settings)
    await database.init()
    app.state.database = database
    app.state.started_at = time.monotonic()

    background_tasks: list[asyncio.Task] = []
    price_feed: Optional[PriceFeedBroadcaster] = None
    if settings.PRICE_FEED_ENABLED:
        price_feed = PriceFeedBroadcaster(
            connection_manager,
            settings.PRICE_FEED_SYMBOLS,
            interval=settings.PRICE_FEED_INTERVAL,
        )
        task = asyncio.create_task(price_feed.run(), name="price-feed")
        watch_background_task(task, shutdown)
        background_tasks.append(task)

    logger.info("Application startup complete")
    yield

    logger.info("Shutting down application")

    if price_feed:
        await price_feed.stop()
    for task in background_tasks:
        task.cancel()
    await asyncio.gather(*background_tasks, return_exceptions=True)

    await database.close()
    loop.set_exception_handler(previous_handler)

    logger.info("Application shutdown complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        lifespan=lifespan
    )
    app.state.settings = settings

    expose_stack = not settings.is_production
    register_exception_handlers(app, expose_stack=expose_stack)

    # Catch-all for unhandled errors (first - closest to the app)
    app.add_middleware(ErrorHandlerMiddleware, expose_stack=expose_stack)

    # Request monitoring middleware
    app.add_middleware(RequestMonitoringMiddleware)

    # CORS middleware (last - furthest from the app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS if settings.is_production else ["*"],
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(health_router, prefix="/api", tags=["health"])
    app.include_router(data_router, prefix="/api/data", tags=["data"])
    app.include_router(websocket_router)

    @app.get("/")
    async def root():
        return {"message": f"{settings.APP_NAME} API", "version": settings.VERSION}

    return app


app = create_app()
