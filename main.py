import logging
import time
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager

from app.core.config import settings
from app.core.database import init_db
from app.core.exceptions import ApiError
from app.core.logging_config import REQUEST_ID_HEADER, new_request_id, request_id_var, setup_logging
from app.api.endpoints import health, jobs, orders

setup_logging(settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info("Starting up Freelance Marketplace API...")
    init_db()
    logger.info("Models registered")

    yield

    logger.info("Shutting down Freelance Marketplace API...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Job board and gig order workflow API for the freelance marketplace",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Tag logs with a request id and log one line per request."""
    request_id = new_request_id(request.headers.get(REQUEST_ID_HEADER))
    token = request_id_var.set(request_id)
    start_time = time.perf_counter()

    try:
        response = await call_next(request)
    except Exception:
        duration_ms = round((time.perf_counter() - start_time) * 1000, 1)
        logger.exception(f"{request.method} {request.url.path} raised after {duration_ms}ms")
        raise
    else:
        duration_ms = round((time.perf_counter() - start_time) * 1000, 1)
        response.headers[REQUEST_ID_HEADER] = request_id

        message = f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms}ms)"
        if response.status_code >= 500:
            logger.error(message)
        elif response.status_code >= 400:
            logger.warning(message)
        else:
            logger.info(message)

        return response
    finally:
        request_id_var.reset(token)


def _error_body(status_code: int, message: str, error: str = None) -> dict:
    body = {"statusCode": status_code, "message": message, "success": False}
    if error:
        body["error"] = error
    return body


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({exc.error})")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.status_code, exc.message, exc.error if exc.status_code >= 500 else None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg')}" if location else str(first.get("msg", "Invalid request"))
    return JSONResponse(status_code=400, content=_error_body(400, message))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.status_code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


# Include routers
app.include_router(jobs.router, prefix=settings.API_V1_STR)
app.include_router(orders.router, prefix=settings.API_V1_STR)
app.include_router(health.router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    """Root endpoint - API health check"""
    return {
        "message": "Freelance Marketplace API",
        "version": "1.0.0",
        "status": "healthy"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,  # Enable auto-reload during development
        log_level="info"
    )
