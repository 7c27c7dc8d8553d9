"""
Main application file for the Listing Reader API.

This file initializes the FastAPI application, sets up logging, owns the
rendering engine lifecycle (warm-up at startup, shutdown when uvicorn
receives SIGINT/SIGTERM), registers global exception handlers and includes
the API routers.
"""
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from listing_reader.api.routes import analysis_router
from listing_reader.components.analysis.prompt_builder import ANALYSIS_FAILED
from listing_reader.components.renderer.engine_manager import RenderEngineManager
from listing_reader.core.config import config_manager
from listing_reader.core.exceptions import ListingReaderError
from listing_reader.core.logger import setup_logging, get_logger
from listing_reader.core.manager import AnalysisManager

# --- Logging Setup ---
setup_logging(config_manager)
logger = get_logger(__name__)


# --- Lifespan ---

@asynccontextmanager
async def lifespan(app: FastAPI):
    engine_manager = RenderEngineManager(config=config_manager)
    app.state.engine_manager = engine_manager
    app.state.analysis_manager = AnalysisManager(config=config_manager, engine_manager=engine_manager)

    # A failed launch here is not fatal; extraction retries lazily.
    await engine_manager.warm_up()
    try:
        yield
    finally:
        logger.info("Shutting down: closing rendering engine.")
        await engine_manager.shutdown()


# --- FastAPI Application Initialization ---
app = FastAPI(
    title="Listing Reader API",
    description="Factual consistency reading of vehicle purchase files, including best-effort "
                "text extraction from the seller's online listing.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config_manager.get("api.cors_origins", ["*"]),
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Global Exception Handlers ---

@app.exception_handler(ListingReaderError)
async def listing_reader_exception_handler(request: Request, exc: ListingReaderError):
    """
    Handles all custom exceptions derived from `ListingReaderError` that
    reach the framework, answering with the generic user-facing message.
    """
    logger.error(
        f"ListingReaderError caught: {exc.__class__.__name__} - {exc.message} "
        f"for request: {request.method} {request.url}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"erreur": ANALYSIS_FAILED},
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handles malformed form submissions with an HTTP 422 response."""
    logger.warning(f"RequestValidationError caught for: {request.method} {request.url}. Errors: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": "Request validation failed", "errors": exc.errors()},
    )

@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Catch-all so the client always receives the JSON error payload."""
    logger.critical(
        f"Unhandled exception caught: {exc.__class__.__name__} - {str(exc)} "
        f"for request: {request.method} {request.url}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"erreur": ANALYSIS_FAILED},
    )


# --- API Router Inclusion ---
app.include_router(analysis_router, prefix="/api", tags=["Analysis"])


# --- Root Endpoint ---
@app.get("/", tags=["General"], summary="API Root Endpoint")
async def read_root():
    """Basic information about the API and links to its documentation."""
    return {
        "message": "Welcome to the Listing Reader API",
        "version": app.version,
        "documentation_url": app.docs_url,
        "redoc_url": app.redoc_url,
    }


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", config_manager.get("api.port", 3000)))
    logger.info(f"Starting Uvicorn server on port {port}.")
    uvicorn.run(app, host="0.0.0.0", port=port)
