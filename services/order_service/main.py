from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.config.database import create_schema, get_engine
from shared.config.settings import get_settings, load_observability_settings
from shared.errors import register_error_handlers
from shared.observability import setup_observability
from shared.security import limiter
from .router import router, public_router
from .models import Order  # noqa: F401  registers model with SQLAlchemy Base

logger = structlog.get_logger(__name__)


async def init_order_service() -> None:
    """Fails fast on bad configuration, then makes sure the orders table exists."""
    settings = get_settings()
    await create_schema(get_engine())
    logger.info(
        "order_service_ready",
        user_service_url=settings.user_service_url,
        product_service_url=settings.product_service_url,
    )


async def shutdown_order_service() -> None:
    await get_engine().dispose()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_order_service()
    yield
    await shutdown_order_service()


order_app = FastAPI(title="Order Service", version="1.0.0", lifespan=lifespan)

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(order_app, load_observability_settings("order_service"))

# --- ERRORS & SECURITY SETUP ---
register_error_handlers(order_app)
order_app.state.limiter = limiter
order_app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

order_app.include_router(public_router)
order_app.include_router(router)
