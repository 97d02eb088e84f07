import logging
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI
from sqlalchemy import text

from huddle.config import settings
from huddle.database import engine

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Initialize Sentry
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=0.2 if settings.ENVIRONMENT == "production" else 1.0,
        send_default_pii=False,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: verify DB connection
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))

    yield

    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="Huddle API",
    version="0.1.0",
    lifespan=lifespan,
)

from huddle.middleware.error_handler import register_error_handlers  # noqa: E402

register_error_handlers(app)

# Routers
from huddle.routers.friends import router as friends_router  # noqa: E402
from huddle.routers.profiles import router as profiles_router  # noqa: E402

app.include_router(friends_router)
app.include_router(profiles_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
