from typing import Any

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from thumbnail_service.api.dependencies import FontHandlerDep, ThumbnailHandlerDep, lifespan
from thumbnail_service.config import settings
from thumbnail_service.dto import (
    FontCacheStatsResponse,
    HealthCheckResponse,
    WarmFontsRequest,
    WarmFontsResponse,
)

app = FastAPI(
    title="Thumbnail Service API",
    description="On-demand PNG thumbnails for assistants and models",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "Thumbnail Service API",
        "version": "0.1.0",
        "description": "On-demand PNG thumbnails for assistants and models",
        "endpoints": {
            "assistant_thumbnail": "/assistant/{assistant_id}/thumbnail.png",
            "model_thumbnail": "/models/{model}/thumbnail.png",
            "fonts": "/fonts/stats",
            "health": "/health",
            "docs": "/docs",
        },
    }


@app.get("/health", response_model=HealthCheckResponse)
async def health(handler: FontHandlerDep) -> HealthCheckResponse:
    """Health check endpoint."""
    return await handler.health_check()


@app.get("/assistant/{assistant_id}/thumbnail.png")
async def assistant_thumbnail(assistant_id: str, handler: ThumbnailHandlerDep) -> Response:
    """Render the thumbnail of an assistant as a PNG."""
    return await handler.assistant_thumbnail(assistant_id)


@app.get("/models/{model_id:path}/thumbnail.png")
async def model_thumbnail(model_id: str, handler: ThumbnailHandlerDep) -> Response:
    """Render the thumbnail of a model as a PNG.

    Model ids contain slashes (e.g. "meta-llama/Llama-3.1-8B-Instruct").
    """
    return await handler.model_thumbnail(model_id)


@app.get("/fonts/stats", response_model=FontCacheStatsResponse)
async def font_stats(handler: FontHandlerDep) -> FontCacheStatsResponse:
    """Get font cache statistics."""
    return await handler.get_stats()


@app.post("/fonts/warm", response_model=WarmFontsResponse)
async def warm_fonts(handler: FontHandlerDep, request: WarmFontsRequest | None = None) -> WarmFontsResponse:
    """Resolve fonts ahead of the first thumbnail request."""
    return await handler.warm(request)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "thumbnail_service.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
