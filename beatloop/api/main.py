"""FastAPI application entry point."""

import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from beatloop import __version__
from beatloop.api.routes import renders
from beatloop.api.schemas import ErrorResponse, HealthResponse
from beatloop.common.exceptions import RenderError
from beatloop.config import get_render_config

load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Beatloop API",
    description="Loop an animated GIF to the beat of an audio clip",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_render_config().cors_origins,
    allow_methods=["POST"],
    allow_headers=["Content-Type"],
)

app.include_router(renders.router, tags=["renders"])


@app.exception_handler(RenderError)
async def render_error_handler(request: Request, exc: RenderError) -> JSONResponse:
    """Turn a failed render into an error response."""
    logger.warning(
        "%s on %s %s: %s%s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc.message,
        f" ({exc.log_message})" if exc.log_message else "",
    )
    body = ErrorResponse(detail=exc.message)
    return JSONResponse(status_code=exc.http_status, content=body.model_dump())


@app.get("/health")
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy")
