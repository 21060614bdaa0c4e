import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.images import router as images_router
from .api.logs import router as logs_router
from .api.routes_health import router as health_router
from .core.config import settings
from .core.log_buffer import install_log_buffer


@asynccontextmanager
async def lifespan(_: FastAPI):
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    install_log_buffer(settings.LOG_LEVEL)
    yield


app = FastAPI(
    title="shrinkray",
    description="Image proxy that serves the smaller of the original and an AVIF/WebP re-encode",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
    expose_headers=["X-Original-Size", "X-Compressed-Size", "X-Image-Status", "X-Fallback-Reason", "X-Fallback-Stage"],
)

app.include_router(health_router)
app.include_router(images_router)
app.include_router(logs_router)
