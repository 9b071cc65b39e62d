import time

from fastapi import FastAPI, Request, Response
from contextlib import asynccontextmanager
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from app.core.config import settings
from app.core.db.base import init_models
from app.core.logging import get_logger, setup_logging
from app.core.metrics import HTTP_REQUEST_COUNT, HTTP_REQUEST_LATENCY
from app.apis.generation.main import router as generation_router

import uvicorn
from fastapi.middleware.cors import CORSMiddleware


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if not settings.app.is_production:
        await init_models()
    logger.info(
        "Generation providers: %s", ", ".join(settings.generation.provider_names)
    )
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app.name, version=settings.app.version, lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def prometheus_middleware(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time
        # Route template, not the raw URL, so set ids do not explode the label set
        route = request.scope.get("route")
        path = getattr(route, "path", request.url.path)
        HTTP_REQUEST_COUNT.labels(
            method=request.method, path=path, status=response.status_code
        ).inc()
        HTTP_REQUEST_LATENCY.labels(path=path).observe(duration)
        return response

    app.include_router(generation_router)

    @app.get("/")
    async def root():
        return {
            "status": "ok",
            "app": settings.app.name,
            "version": settings.app.version,
        }

    @app.get("/metrics", tags=["monitoring"])
    def metrics():
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()


if __name__ == "__main__":
    try:
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=settings.app.port,
            reload=not settings.app.is_production,
        )
    except Exception as e:
        logger.error(f"An error occurred when starting the server: {e}.")
