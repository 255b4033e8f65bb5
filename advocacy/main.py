"""
Advocacy Backend - FastAPI Application
Main entry point with all routes and error handlers configured.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from advocacy.config import settings
from advocacy.core.exceptions import AdvocacyException
from advocacy.database import init_db, close_db
from advocacy.schemas.common import ErrorResponse

# Import all API routers
from advocacy.api import auth, campaigns, email, payments

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    await init_db()
    logger.info("Database initialized")
    yield
    # Shutdown
    await close_db()


app = FastAPI(
    title="Advocacy API",
    description="Grassroots email advocacy campaigns",
    version="1.0.0",
    lifespan=lifespan
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AdvocacyException)
async def advocacy_exception_handler(request: Request, exc: AdvocacyException):
    body = ErrorResponse(error=exc.message)
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        body.message = getattr(exc, "detail", None)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = sorted({".".join(str(p) for p in err["loc"] if p != "body") or "body" for err in exc.errors()})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": f"Invalid or missing fields: {', '.join(fields)}"}
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    # Rendered outside the CORS middleware
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error="Internal server error", message=str(exc)).model_dump(),
        headers={"Access-Control-Allow-Origin": "*"}
    )


# Include all routers
app.include_router(auth.router)
app.include_router(campaigns.router)
app.include_router(email.router)
app.include_router(payments.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "message": "Advocacy API is running",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "version": "1.0.0"
    }


def run():
    """Serve the app with uvicorn. Installed as the advocacy-api command."""
    import uvicorn
    uvicorn.run(
        "advocacy.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    run()
