"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from wiregraph.web.api_analysis import router as analysis_router


def create_app() -> FastAPI:
    app = FastAPI(title="wiregraph", version="0.1.0")

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    app.include_router(analysis_router)
    return app
