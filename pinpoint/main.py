"""
Main FastAPI Application
=======================

Entry point for the Pinpoint location API server.

    python -m pinpoint.main
"""

import logging
import sys
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Settings read the environment at import time, so load .env first
from dotenv import load_dotenv
load_dotenv()

from pinpoint import __version__
from pinpoint.api.router import api_router
from pinpoint.config import settings
from pinpoint.pipelines.location import codec
from pinpoint.services.logging_service import LOG_LEVEL, init_logging

RESET = "\033[0m"


class ColoredFormatter(logging.Formatter):
    """Console formatter: coloured level name with an emoji tag."""

    LEVEL_STYLES = {
        "DEBUG": ("\033[36m", "🔍"),
        "INFO": ("\033[32m", "ℹ️"),
        "WARNING": ("\033[33m", "⚠️"),
        "ERROR": ("\033[31m", "❌"),
        "CRITICAL": ("\033[35m", "🚨"),
    }

    def format(self, record: logging.LogRecord) -> str:
        color, emoji = self.LEVEL_STYLES.get(record.levelname, ("", ""))
        # Copy so file and ring-buffer handlers keep the plain level name
        styled = logging.makeLogRecord(record.__dict__)
        styled.levelname = f"{color}{emoji} {record.levelname}{RESET}"
        return super().format(styled)


def setup_logging() -> None:
    """Console handler on the root logger; file and ring buffer via init_logging()."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(ColoredFormatter("%(levelname)s %(name)s: %(message)s"))
    root.addHandler(console)
    root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    for noisy in ("uvicorn.access", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


setup_logging()
try:
    init_logging()
except OSError as e:
    logging.getLogger(__name__).warning(f"⚠️ File logging unavailable: {e}")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"🚀 Pinpoint API {__version__} starting")
    logger.info(
        f"🗺️ region={settings.DEFAULT_REGION} geocoder={settings.GEOCODER} "
        f"conflict_threshold={settings.CONFLICT_THRESHOLD_KM}km code_length={codec.DEFAULT_CODE_LENGTH}"
    )
    yield
    logger.info("🛑 Pinpoint API shutting down")


app = FastAPI(
    title="Pinpoint API",
    description="Property location resolution, location codes and source comparison",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    response.headers["X-Process-Time"] = f"{time.perf_counter() - started:.4f}"
    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"❌ Unhandled exception on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"status": "error", "error": "An unexpected error occurred"})


@app.get("/")
async def root():
    return {"message": f"Pinpoint API v{__version__}", "status": "running", "docs": "/docs", "health": "/api/system/health"}


if __name__ == "__main__":
    logger.info("🔧 Starting Pinpoint API Server in development mode")
    uvicorn.run("pinpoint.main:app", host="127.0.0.1", port=8000, reload=False, log_level="info")
