"""
FastAPI Application Entry Point

Integrates:
  - Generation, transcription and structuring routes
  - Health checks
  - Middleware for logging & error handling

Run: uvicorn main:app --reload --host 0.0.0.0 --port 8000
"""

import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router as scribe_router
from infra import HealthChecker, build_context

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: startup and shutdown handlers.
    """
    # Startup
    context = build_context()
    app.state.context = context
    app.state.start_time = time.time()

    logger.info("=" * 60)
    logger.info("Clinical Scribe starting up...")
    logger.info(f"Environment: {context.config.environment}")
    logger.info(f"Completion: {'demo mode' if context.completion.demo_mode else context.config.openai_model}")
    logger.info(f"Transcription backend: {context.config.stt_backend}")
    logger.info("=" * 60)

    yield

    # Shutdown
    metrics = context.completion_monitor.snapshot()
    logger.info(
        f"Clinical Scribe shutting down after {metrics.request_count} completion requests "
        f"(total cost ${metrics.total_cost:.4f})"
    )


# Create FastAPI app
app = FastAPI(
    title="Clinical Scribe API",
    description="Text generation, transcription and clinical-text structuring",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict this in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Middleware for logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    logger.debug(f"{request.method} {request.url.path}")
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"Request error: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


# Include routers
app.include_router(scribe_router)


# Health check endpoints
@app.get("/health/live")
async def health_live():
    """Live health check (Kubernetes liveness probe)."""
    return {"status": "alive"}


@app.get("/health/ready")
async def health_ready(request: Request):
    """Readiness health check (Kubernetes readiness probe)."""
    checker = HealthChecker(request.app.state.context, start_time=request.app.state.start_time)
    return checker.to_dict(checker.check())


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Clinical Scribe API",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "generate": "POST /api/generate",
            "generate_health": "GET /api/generate/health",
            "transcribe": "POST /api/transcribe",
            "transcribe_status": "GET /api/transcribe",
            "structure_hhsb": "POST /api/structure/hhsb",
            "structure_soep": "POST /api/structure/soep",
            "health_live": "GET /health/live",
            "health_ready": "GET /health/ready",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("ENVIRONMENT", "development") == "development",
    )
