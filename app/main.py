from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
import time
import logging

from .api.v1.auth import router as auth_router
from .api.v1.availability import router as availability_router
from .api.v1.patients import router as patients_router
from .api.v1.providers import router as providers_router
from .core.config import settings
from .core.database import init_db

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Provider and patient registration with provider availability scheduling",
    openapi_url=f"{API_PREFIX}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# The test client talks to "testserver"; only restrict hosts outside tests
if not settings.TESTING:
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=["localhost", "127.0.0.1", "*.localhost"]
    )

@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started
    response.headers["X-Process-Time"] = f"{elapsed:.4f}"

    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.4f}s)"
    )
    return response

@app.exception_handler(404)
async def not_found_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=404,
        content={
            "error": "Not Found",
            "message": getattr(exc, "detail", None) or "The requested resource was not found",
            "path": request.url.path
        }
    )

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected request to {request.url.path}: {len(exc.errors())} validation error(s)")
    return JSONResponse(
        status_code=422,
        content={"error": "Validation Error", "detail": jsonable_encoder(exc.errors())}
    )

@app.exception_handler(500)
async def internal_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "message": "An unexpected error occurred"
        }
    )

# Auth and the static /provider/availability/* paths go before /provider/{provider_id}
app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(availability_router, prefix=API_PREFIX)
app.include_router(providers_router, prefix=API_PREFIX)
app.include_router(patients_router, prefix=API_PREFIX)

@app.on_event("startup")
async def startup_event():
    db_url = settings.get_database_url
    backend = db_url.split(":", 1)[0]
    logger.info(f"Starting {settings.APP_NAME} {settings.VERSION} on {backend}")

    try:
        init_db()
    except Exception:
        logger.exception("Database initialization failed")
        raise

@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"Shutting down {settings.APP_NAME}")

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.VERSION
    }

@app.get("/")
async def root():
    return {
        "message": f"Welcome to the {settings.APP_NAME} API",
        "version": settings.VERSION,
        "docs": "/docs",
        "health": "/health"
    }

@app.get(f"{API_PREFIX}/info")
async def api_info():
    """List the API areas and where they live."""
    return {
        "name": settings.APP_NAME,
        "version": settings.VERSION,
        "endpoints": {
            "provider_auth": f"{API_PREFIX}/provider/login",
            "providers": f"{API_PREFIX}/provider",
            "availability": f"{API_PREFIX}/provider/availability",
            "patients": f"{API_PREFIX}/patient",
            "openapi": f"{API_PREFIX}/openapi.json"
        }
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info"
    )
