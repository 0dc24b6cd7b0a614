"""FastAPI application entry point."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from dao_notifications.database import init_db
from dao_notifications.logging_config import configure_logging
from dao_notifications.routers import notifications


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    init_db()
    yield


app = FastAPI(title="DAO Notifications API", lifespan=lifespan)


@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Simple health probe for liveness checks."""
    return {"status": "ok"}


# Include routers
app.include_router(notifications.router)
