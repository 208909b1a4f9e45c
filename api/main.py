"""FastAPI application for the NDIS Invoice API."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from ndis_invoice import __version__
from ndis_invoice.config import get_settings

app = FastAPI(
    title="NDIS Invoice API",
    description="Service invoice calculation against the NDIS rate catalog.",
    version=__version__,
)

# Set ALLOWED_ORIGINS="*" to allow any origin (for standalone HTML usage)
_origins = list(get_settings().allowed_origins)
_allow_all = "*" in _origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if _allow_all else _origins,
    allow_credentials=not _allow_all,  # credentials not allowed with wildcard
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)

app.include_router(router)


@app.get("/")
async def root():
    return {
        "name": "NDIS Invoice API",
        "version": __version__,
        "docs": "/docs",
        "health": "/api/v1/health",
    }
