# maintenix/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CollectorRegistry, Gauge
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.middleware.base import BaseHTTPMiddleware

from maintenix.api import api_router
from maintenix.auth import models as auth_models  # noqa
from maintenix.auth.config import AuthSettings
from maintenix.config import EmailSettings, Settings
from maintenix.database import build_engine, build_sessionmaker
from maintenix.exception import register_exception_handlers
from maintenix.notifications.service import NotificationSender, build_notification_sender
from maintenix.password_reset.config import PasswordResetSettings
from maintenix.password_reset.utils import AccountLocks, Clock, RateLimiter, utcnow

logger = logging.getLogger(__name__)


class InflightMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, gauge: Gauge):
        super().__init__(app)
        self.gauge = gauge

    async def dispatch(self, request, call_next):
        self.gauge.inc()
        try:
            return await call_next(request)
        finally:
            self.gauge.dec()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s...", app.title)
    yield
    await app.state.engine.dispose()
    logger.info("Shutdown complete")


def create_app(
    settings: Settings | None = None,
    *,
    email_settings: EmailSettings | None = None,
    auth_settings: AuthSettings | None = None,
    password_reset_settings: PasswordResetSettings | None = None,
    notifier: NotificationSender | None = None,
    clock: Clock = utcnow,
) -> FastAPI:
    """
    Builds the application and everything it shares between requests.

    Run with ``uvicorn maintenix.main:create_app --factory``.
    """
    settings = settings or Settings()
    email_settings = email_settings or EmailSettings()
    auth_settings = auth_settings or AuthSettings()
    password_reset_settings = password_reset_settings or PasswordResetSettings()

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

    engine = build_engine(settings.DATABASE_URL)
    app.state.settings = settings
    app.state.auth_settings = auth_settings
    app.state.password_reset_settings = password_reset_settings
    app.state.engine = engine
    app.state.session_factory = build_sessionmaker(engine)
    app.state.notifier = notifier or build_notification_sender(
        email_settings, password_reset_settings.OTP_EXPIRE_MINUTES
    )
    app.state.clock = clock
    app.state.rate_limiter = RateLimiter(clock)
    app.state.account_locks = AccountLocks()

    # Each app owns its metrics so several can live in one process
    registry = CollectorRegistry()
    Instrumentator(registry=registry).instrument(app).expose(
        app,
        endpoint="/metrics",
        include_in_schema=False,
    )
    inprogress = Gauge(
        "inprogress_requests", "In-progress HTTP requests", registry=registry
    )
    app.add_middleware(InflightMiddleware, gauge=inprogress)

    register_exception_handlers(app)
    app.include_router(api_router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS.split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    @app.get("/")
    async def read_root():
        return {"msg": f"Welcome to {settings.PROJECT_NAME}!"}

    @app.get("/health-check")
    async def health_check():
        return {"status": "healthy"}

    return app
