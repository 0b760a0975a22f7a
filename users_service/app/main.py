import logging
import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from .core.config import get_settings
from .core.exceptions import PlannerError, status_code_for
from .core.keycloak import keycloak_client
from .core.rabbitmq import rabbitmq_publisher
from .routers import admin

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Users Service",
    description="User administration on top of the Keycloak admin API",
    version=settings.service_version
)

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
    """Report rejected requests and identity provider failures as plain text"""
    status_code = status_code_for(exc)
    logger.warning(f"{request.method} {request.url.path} rejected ({status_code}): {exc.message}")
    return PlainTextResponse(exc.message, status_code=status_code)


# Event handlers
@app.on_event("startup")
async def startup_event():
    logger.info("Starting Users Service...")
    if rabbitmq_publisher.connect():
        logger.info("RabbitMQ connection established")
    elif rabbitmq_publisher.enabled:
        logger.warning("RabbitMQ connection failed - events will not be published")
    logger.info("Users Service startup completed")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Users Service...")
    rabbitmq_publisher.close()
    await keycloak_client.close()


# Include routers
app.include_router(admin.router, prefix="/admin/user", tags=["admin"])


@app.get("/")
def read_root():
    return {"message": "Users Service is running!", "service": settings.service_name}


@app.get("/health")
async def health_check():
    keycloak_healthy = await keycloak_client.health_check()
    return {
        "service": settings.service_name,
        "version": settings.service_version,
        "status": "healthy" if keycloak_healthy else "degraded",
        "keycloak": "connected" if keycloak_healthy else "disconnected",
        "timestamp": time.time()
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("users_service.app.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
