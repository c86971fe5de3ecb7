"""
Leitor FastAPI application.

Entry point for the functions service.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend import db
from backend.config import settings
from backend.routes import functions as function_routes

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Initializes the database pool on startup and closes it on shutdown.
    """
    await db.init_pool()
    print("Database pool initialized")

    yield

    await db.close_pool()
    print("Database pool closed")


app = FastAPI(
    title="Leitor",
    docs_url=None,
    redoc_url=None,
    lifespan=lifespan,
)

# Browser clients call the functions cross-origin with apikey headers.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

# Register routes
app.include_router(function_routes.router)


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}
