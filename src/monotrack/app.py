"""FastAPI application with lifespan and health endpoint."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from monotrack.api.router import router as pages_router
from monotrack.config import get_settings
from monotrack.documents.store import DocumentStore
from monotrack.logging_config import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging, load config, create the store."""
    settings = get_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings
    app.state.store = DocumentStore()
    yield


app = FastAPI(
    title="MonoTrack",
    lifespan=lifespan,
)
app.include_router(pages_router)


@app.get("/health")
async def health():
    """Health check endpoint for local development and deployments."""
    return {
        "status": "ok",
        "service": "monotrack",
        "version": "0.1.0",
    }
