from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from sqlalchemy import text
import logging
from api import user, photos
from middleware.security import SecurityHeadersMiddleware, SecurityLoggingMiddleware
from schemas.photo import ErrorResponse
from services.db import engine, SessionLocal
from services.errors import PhotoAppError, photo_app_exception_handler
from services.file_storage import storage
from services.security import security_config, SecurityUtils

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: report configuration, release the engine on shutdown."""
    logger.info("Starting Photo Sharing App")
    logger.info(f"  - Upload directory: {storage.base_path}")
    logger.info(f"  - Max upload size: {security_config.max_upload_size} bytes")
    logger.info(f"  - CORS origins: {security_config.cors_origins}")
    logger.info(f"  - Security headers: {security_config.enable_security_headers}")

    yield

    await engine.dispose()
    logger.info("Photo Sharing App shutdown complete")

app = FastAPI(
    title="Photo Sharing App API",
    description="User galleries, photo uploads and comments",
    version="1.0.0",
    lifespan=lifespan
)

# Last added is executed first
app.add_middleware(SecurityLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=security_config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
error_responses = {
    code: {"model": ErrorResponse} for code in (400, 401, 404, 500)
}
app.include_router(user.router, prefix="/api/user", tags=["users"], responses=error_responses)
app.include_router(photos.router, prefix="/api/photo", tags=["photos"], responses=error_responses)

@app.get("/")
def root():
    return {"message": "Hello from photo-sharing app API!"}

@app.get("/health")
def health_check():
    """Liveness probe."""
    return {"status": "healthy", "version": "1.0.0"}

@app.get("/health/ready")
async def readiness_check():
    """Readiness probe: the database must answer a trivial query."""
    try:
        async with SessionLocal() as db:
            await db.execute(text("SELECT 1"))
        return {"status": "ready", "checks": {"database": "healthy"}}
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "error": "Database connection failed"}
        )

app.add_exception_handler(PhotoAppError, photo_app_exception_handler)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors like any other validation failure."""
    SecurityUtils.log_security_event(
        "request_validation_error",
        {"path": request.url.path, "method": request.method, "errors": exc.errors()},
        client_ip=SecurityUtils.get_client_ip(request)
    )
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request format", "error": str(exc.errors())}
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail if hasattr(exc, 'detail') else "Request failed"},
        headers=getattr(exc, "headers", None)
    )

@app.exception_handler(Exception)
async def internal_server_error_handler(request: Request, exc: Exception):
    """Last resort: log everything, tell the client only the raw error string."""
    logger.error(f"Internal server error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error", "error": str(exc)}
    )
