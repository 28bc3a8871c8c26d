# matatu/main.py
"""
FastAPI app: logging, CORS, lifespan, request tracing, error handlers,
uploads static mount and the v1 API.
"""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.staticfiles import StaticFiles

from matatu.api.v1.router import api_router
from matatu.core.config_env import settings
from matatu.core.errors import install_error_handlers
from matatu.core.logging import setup_logging
from matatu.db.session import Base, engine
from matatu.models import registry  # noqa: F401  (registers every table on Base.metadata)
from matatu.utils.media import ensure_dir

logger = logging.getLogger("matatu")
http_logger = logging.getLogger("matatu.http")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
        logger.info("tables ensured on %s", engine.url.render_as_string(hide_password=True))
    yield


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(title="Matatu API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        try:
            response = await call_next(request)
            dur = round(time.time() - start, 4)
            http_logger.info("%s %s -> %s in %ss", request.method, request.url.path, response.status_code, dur)
            return response
        except Exception:
            dur = round(time.time() - start, 4)
            http_logger.exception("%s %s EXC after %ss", request.method, request.url.path, dur)
            raise

    install_error_handlers(app)

    uploads = ensure_dir(settings.UPLOAD_DIR)
    app.mount("/uploads", StaticFiles(directory=str(uploads)), name="uploads")

    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
