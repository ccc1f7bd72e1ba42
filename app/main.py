import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.cache import CacheManager
from app.config import settings
from app.errors import StorageFailureError
from app.middleware import TimingMiddleware
from app.routers import accounts, messages, metrics

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    try:
        await app.state.cache.connect()
    except Exception:
        logger.warning("Redis unavailable, message lists will not be cached", exc_info=True)
    yield
    # Shutdown
    await app.state.cache.disconnect()


async def storage_failure_handler(request: Request, exc: StorageFailureError) -> JSONResponse:
    # The cause may carry SQL or connection detail; it is logged, not returned.
    logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc.__cause__)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Message Board API",
        description="Account registration, login and message posting",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.cache = CacheManager(settings.REDIS_URL)

    # Middleware
    app.add_middleware(TimingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StorageFailureError, storage_failure_handler)

    # Routers
    app.include_router(accounts.router)
    app.include_router(messages.router)
    app.include_router(metrics.router)

    @app.get("/health")
    async def health():
        return {"status": "healthy", "version": "1.0.0"}

    return app


app = create_app()
