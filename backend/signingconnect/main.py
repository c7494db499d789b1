import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from signingconnect.config import settings
from signingconnect.database import get_db, init_db, utcnow
from signingconnect.errors import SigningConnectError
from signingconnect.limiter import limiter
from signingconnect.routers import admin, applications, auth, documents, jobs, notifications

logger = logging.getLogger("signingconnect")


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db()
    logger.info("SigningConnect API starting (environment=%s)", settings.environment)
    if settings.jwt_secret == "change-me-in-production":
        logger.warning("JWT secret is the built-in default; set SIGNINGCONNECT_JWT_SECRET")
    yield
    logger.info("SigningConnect API stopped")


app = FastAPI(
    title="SigningConnect API",
    description="Marketplace API connecting notary signing agents with title companies",
    version="0.1.0",
    lifespan=lifespan,
)
app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str, headers: dict | None = None, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
        headers=headers,
    )


@app.exception_handler(SigningConnectError)
async def signingconnect_error_handler(request: Request, exc: SigningConnectError):
    return _error(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return _error(400, "Invalid request")
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"{location}: {first['msg']}" if location else first["msg"]
    return _error(400, message)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("Rate limit exceeded for %s on %s", request.client.host if request.client else "?", request.url.path)
    return _error(429, exc.detail)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    if settings.is_production:
        return _error(500, "Internal server error")
    return _error(500, "Internal server error", error=str(exc))


app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(applications.router, prefix=settings.api_prefix)
app.include_router(admin.router, prefix=settings.api_prefix)
app.include_router(jobs.router, prefix=settings.api_prefix)
app.include_router(notifications.router, prefix=settings.api_prefix)
app.include_router(documents.router, prefix=settings.api_prefix)


@app.get(f"{settings.api_prefix}/health")
async def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError:
        logger.exception("Health check could not reach the database")
        database = "disconnected"
    return JSONResponse(
        status_code=200 if database == "connected" else 503,
        content={
            "status": "OK" if database == "connected" else "ERROR",
            "timestamp": utcnow(),
            "database": database,
            "environment": settings.environment,
        },
    )
