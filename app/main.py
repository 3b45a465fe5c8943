import logging
import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.database import init_db
from app.api import routes
from app.api.errors import register_exception_handlers
from app.logging_config import generate_request_id, request_id_var, setup_logging
from app.services.scheduler import start_scheduler, stop_scheduler

setup_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(routes.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Tag each request with an id and log its outcome"""
    request_id = request.headers.get("X-Request-ID") or generate_request_id()
    token = request_id_var.set(request_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            "%s %s", request.method, request.url.path,
            extra={"status_code": response.status_code, "duration_ms": duration_ms},
        )
        response.headers["X-Request-ID"] = request_id
        return response
    finally:
        request_id_var.reset(token)


@app.on_event("startup")
async def startup_event():
    """Create tables and start the background scheduler"""
    init_db()
    if settings.scheduler_enabled:
        start_scheduler()
    logger.info("Solennia API started")


@app.on_event("shutdown")
async def shutdown_event():
    """Stop background scheduler on app shutdown"""
    if settings.scheduler_enabled:
        stop_scheduler()
    logger.info("Solennia API stopped")


@app.get("/")
def read_root():
    return {
        "message": "Welcome to Solennia API",
        "docs": "/docs",
        "health": "/api/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
