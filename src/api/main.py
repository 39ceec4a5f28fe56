"""
FastAPI main application for the leveraged trading simulator.
"""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from src.core.exceptions.trading import TradingSimulatorError, ValidationError
from src.core.utils.log_config import configure_logging

from .dependencies import get_settings
from .routers import trading

settings = get_settings()
configure_logging(settings.log_level, settings.log_file)

app = FastAPI(
    title="Leveraged Trading Simulator API",
    version=settings.app_version,
    description="API for simulated leveraged trading on crypto price feeds",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,  # Disable credentials for security
    allow_methods=["GET", "POST"],  # Specific methods only
    allow_headers=[
        "Content-Type",
        "Accept",
        "Origin",
        "X-Requested-With",
    ],  # Specific headers only
)

app.include_router(trading.router, prefix="/api", tags=["trading"])


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Map engine input errors to 422."""
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=422,
        content={"error": type(exc).__name__, "message": str(exc)},
    )


@app.exception_handler(TradingSimulatorError)
async def simulator_error_handler(request: Request, exc: TradingSimulatorError) -> JSONResponse:
    """Map remaining engine errors to 400."""
    logger.warning(f"Failed {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": type(exc).__name__, "message": str(exc)},
    )


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint returning API information."""
    return {"message": settings.app_name, "version": settings.app_version, "status": "running"}


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
