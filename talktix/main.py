import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .config import ALLOWED_ORIGINS, SECURITY_HEADERS_ENABLED
from .database import Base, create_db_engine, create_session_factory
from .domain.bookings.router import router as bookings_router
from .domain.bookings.router import speaker_booking_router, user_booking_router
from .domain.speakers.router import router as speakers_router
from .domain.users.router import router as users_router
from .email_service import EmailService
from .errors import DomainError, UnavailableError, from_db_error
from .redis_client import create_redis_client
from .security_headers import SecurityHeadersMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build whatever collaborators were not injected, tear down what we built"""
    logger.info("Application starting up...")
    engine = None
    owns_redis = False

    if app.state.session_factory is None:
        engine = create_db_engine()
        app.state.session_factory = create_session_factory(engine)

    try:
        Base.metadata.create_all(bind=app.state.session_factory.kw["bind"], checkfirst=True)
        logger.info("Database tables created successfully")
    except SQLAlchemyError as e:
        # Several workers may race to create the same tables
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    if app.state.redis is None:
        app.state.redis = create_redis_client()
        owns_redis = True

    if app.state.email_service is None:
        app.state.email_service = EmailService.from_config()

    yield

    logger.info("Application shutting down...")
    if owns_redis:
        app.state.redis.close()
    if engine is not None:
        engine.dispose()


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        if exc.status_code >= 500:
            logger.error(f"❌ {request.method} {request.url.path} - {exc.code}: {exc.message}")
        else:
            logger.warning(f"⚠️ {request.method} {request.url.path} - {exc.code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Missing or malformed Authorization header -> 401; any other bad
        request shape -> 400 with the pydantic errors
        """
        for error in exc.errors():
            if error.get("loc") and "authorization" in str(error.get("loc")).lower():
                logger.warning(
                    f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
                )
                return JSONResponse(
                    status_code=401,
                    content={
                        "detail": "Not authenticated. Please provide a valid Bearer token in the Authorization header.",
                        "code": "AuthError",
                        "details": {},
                    },
                )

        logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={
                "detail": "Invalid request",
                "code": "ValidationError",
                "details": {"errors": jsonable_encoder(exc.errors())},
            },
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        error = from_db_error(exc, f"handling {request.method} {request.url.path}")
        logger.error(f"❌ Unhandled database error on {request.url.path}: {exc}")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(RedisError)
    async def redis_error_handler(request: Request, exc: RedisError):
        logger.error(f"❌ Redis error on {request.url.path}: {exc}")
        error = UnavailableError("Verification store unavailable", code="RedisUnavailable")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app(
    session_factory: Optional[sessionmaker] = None,
    redis_client=None,
    email_service: Optional[EmailService] = None,
) -> FastAPI:
    """
    Application factory

    Collaborators passed in here are used as-is; anything left as None is
    built from config during startup.
    """
    app = FastAPI(title="TalkTix API", version="1.0.0", lifespan=lifespan)
    app.state.session_factory = session_factory
    app.state.redis = redis_client
    app.state.email_service = email_service

    register_exception_handlers(app)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        client_ip = request.client.host if request.client else "unknown"
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
            raise
        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"{request.method} {request.url.path} | {response.status_code} | "
            f"{duration_ms:.1f}ms | {client_ip}"
        )
        return response

    if SECURITY_HEADERS_ENABLED:
        app.add_middleware(
            SecurityHeadersMiddleware, exclude_paths=["/docs", "/redoc", "/openapi.json"]
        )
        logger.info("Security headers enabled")
    else:
        logger.warning("Security headers DISABLED - only use in development!")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(users_router, prefix=API_PREFIX)
    app.include_router(speakers_router, prefix=API_PREFIX)
    app.include_router(bookings_router, prefix=API_PREFIX)
    app.include_router(speaker_booking_router, prefix=API_PREFIX)
    app.include_router(user_booking_router, prefix=API_PREFIX)

    @app.get("/")
    def root():
        return {"message": "Welcome to TalkTix API"}

    @app.get("/health")
    def health(request: Request):
        """Database and Redis reachability"""
        checks = {"database": "ok", "redis": "ok"}

        db = request.app.state.session_factory()
        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"❌ Health check database failure: {e}")
            checks["database"] = "unavailable"
        finally:
            db.close()

        try:
            request.app.state.redis.ping()
        except RedisError as e:
            logger.error(f"❌ Health check Redis failure: {e}")
            checks["redis"] = "unavailable"

        healthy = all(value == "ok" for value in checks.values())
        return JSONResponse(
            status_code=200 if healthy else 503,
            content={"status": "healthy" if healthy else "unhealthy", "checks": checks},
        )

    return app


app = create_app()
