"""
FastAPI application for the presign/delete API.

The storage adapter is injected into ``create_app``; ``create_app_from_env``
builds one from S3_* environment variables (uvicorn ``--factory`` target).
"""
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from .config import ServerSettings
from .routes import router
from .storage import S3Storage


def create_app(storage: S3Storage, settings: Optional[ServerSettings] = None) -> FastAPI:
    """Build the API around an explicit storage dependency."""
    settings = settings or ServerSettings()

    app = FastAPI(
        title="s3drop API",
        description="Presigned upload and delete endpoints for direct-to-storage uploads",
        version=__version__,
    )
    app.state.storage = storage
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router, prefix="/api/s3")

    @app.get("/health")
    async def health():
        return {"status": "ok", "bucket": storage.bucket}

    return app


def create_app_from_env() -> FastAPI:
    settings = ServerSettings.from_env()
    return create_app(S3Storage.from_settings(settings), settings)
