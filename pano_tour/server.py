import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from pano_tour.web.api import api_router
from pano_tour.work.jobs import IngestionPipeline

logger = logging.getLogger(__name__)


def create_app(pipeline: Optional[IngestionPipeline] = None, access_token: Optional[str] = None) -> FastAPI:
    pipeline = pipeline or IngestionPipeline()
    token = access_token if access_token is not None else os.getenv("PANO_ACCESS_TOKEN", "")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        pipeline.shutdown()

    app = FastAPI(title="pano_tour", version="0.1.0", lifespan=lifespan)
    app.state.pipeline = pipeline

    @app.middleware("http")
    async def check_access_token(request: Request, call_next):
        if token and request.url.path.startswith("/api"):
            if request.headers.get("X-Access-Token") != token:
                return PlainTextResponse("Unauthorized: wrong access token", status_code=401)
        return await call_next(request)

    app.include_router(api_router, prefix="/api")

    app.mount("/panoramas", StaticFiles(directory=str(pipeline.root)), name="panoramas")

    return app


def run() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))
    logger.info("serving panoramas on %s:%d", host, port)
    uvicorn.run("pano_tour.server:create_app", factory=True, host=host, port=port, reload=False)
