import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError

from .auth import API_KEY_HEADER, require_api_key
from .config import get_settings
from .db import DatabaseInitializer
from .endpoints import bad_request
from .otel import configure_otel
from .registry import add_endpoint_services, use_endpoints
from .validation import failures_from_request_errors

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

PROTECTED_METHODS = frozenset({"POST", "PUT", "DELETE"})


@asynccontextmanager
async def lifespan(app: FastAPI):
    DatabaseInitializer(app.state.connection_factory).initialize()
    logger.info("%s %s started", settings.app_name, settings.version)
    yield
    app.state.connection_factory.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="A small catalog of books with API-key protected writes.",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)
add_endpoint_services(app, settings)
use_endpoints(app)

if settings.otel_enabled:
    configure_otel(app)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Body parsing runs before route dependencies.
    if request.method in PROTECTED_METHODS:
        try:
            require_api_key(request, request.headers.get(API_KEY_HEADER))
        except HTTPException as auth_error:
            return await http_exception_handler(request, auth_error)
    return bad_request(failures_from_request_errors(exc.errors()))


@app.get("/health", tags=["health"])
def health() -> dict:
    return {"status": "ok"}


request_logger = logging.getLogger("library_api.requests")


@app.middleware("http")
async def request_logging_middleware(request, call_next):
    request_logger.info("request.start", extra={"path": request.url.path, "method": request.method})
    response = await call_next(request)
    request_logger.info(
        "request.end",
        extra={"path": request.url.path, "method": request.method, "status": response.status_code},
    )
    return response


@app.middleware("http")
async def request_id_middleware(request, call_next):
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response
