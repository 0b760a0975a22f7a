import logging
import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from .core.config import get_settings
from .core.database import init_db, check_db_connection
from .core.exceptions import PlannerError, status_code_for
from .core.users_client import users_client
from .routers import category

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Todo Service",
    description="Microservice for category management scoped to the Keycloak user",
    version=settings.service_version
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """Log all requests with timing"""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    response.headers["X-Process-Time"] = str(process_time)
    if request.url.path != "/health":
        logger.info(f"{request.method} {request.url.path} - {response.status_code} ({process_time:.3f}s)")

    return response


@app.exception_handler(PlannerError)
async def planner_error_handler(request: Request, exc: PlannerError):
    """Report rejected requests as plain text"""
    status_code = status_code_for(exc)
    logger.warning(f"{request.method} {request.url.path} rejected ({status_code}): {exc.message}")
    return PlainTextResponse(exc.message, status_code=status_code)


app.include_router(category.router, prefix="/category", tags=["category"])


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup"""
    logger.info("Starting Todo Service...")
    if init_db():
        logger.info("Database initialized successfully")
    else:
        logger.error("Database initialization failed")
    logger.info("Todo Service startup completed")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down Todo Service...")
    await users_client.close()
    logger.info("Todo Service shutdown completed")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": settings.service_name,
        "version": settings.service_version,
        "status": "running",
        "message": "Todo Service is operational"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    db_healthy = check_db_connection()
    health = {
        "service": settings.service_name,
        "version": settings.service_version,
        "status": "healthy" if db_healthy else "unhealthy",
        "database": "connected" if db_healthy else "disconnected",
        "timestamp": time.time()
    }

    # users service only matters when category creation depends on it
    if settings.check_user_exists:
        users_healthy = await users_client.health_check()
        health["users_service"] = "connected" if users_healthy else "disconnected"
        if db_healthy and not users_healthy:
            health["status"] = "degraded"

    return health


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("todo_service.app.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
