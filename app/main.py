"""FastAPI application entry point."""

import logging

from fastapi import FastAPI

from app import __version__
from app.api import compare, health
from app.config import settings

logging.basicConfig(
    level=logging.DEBUG if settings.debug else settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Change Detection API",
    description="Minimal before/after diffs for objects and collections",
    version=__version__,
    debug=settings.debug,
)

app.include_router(health.router, tags=["health"])
app.include_router(compare.router, prefix="/compare", tags=["compare"])
