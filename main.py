from dotenv import load_dotenv
load_dotenv()

import time
import uuid
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from api.v1.layout_builder import router as v1_layout_builder_router

# Setup logging
from core.logging_config import setup_logging, get_logger, LogContext
setup_logging()
logger = get_logger(__name__)

# Setup Sentry error tracking
from core.settings import settings
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        attach_stacktrace=True,
        send_default_pii=False,
        before_send=lambda event, hint: filter_sentry_event(event, hint),
        auto_enabling_integrations=False,
    )
    logger.info_ctx("Sentry error tracking enabled", environment=settings.SENTRY_ENVIRONMENT)

def filter_sentry_event(event, hint):
    """Filter events before sending to Sentry"""
    # Skip health checks
    if "transaction" in event and "/health" in event["transaction"]:
        return None

    if "request" in event:
        request = event["request"]
        if "headers" in request:
            request_id = request["headers"].get("x-request-id")
            if request_id:
                event.setdefault("tags", {})["request_id"] = request_id

    return event

app = FastAPI(title="Layout Builder API", version="1.0.0", debug=settings.DEBUG)

# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response

# Logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    request_id = getattr(request.state, "request_id", "unknown")

    # Skip health checks to reduce noise
    if request.url.path == "/health":
        return await call_next(request)

    with LogContext(request_id=request_id, path=request.url.path, method=request.method):
        logger.info(f"Request started: {request.method} {request.url.path}")

        try:
            response = await call_next(request)
            duration = round(time.time() - start_time, 3)

            with LogContext(
                request_id=request_id,
                path=request.url.path,
                method=request.method,
                status_code=response.status_code,
                duration=duration
            ):
                if response.status_code >= 500:
                    logger.error(f"Request failed: {request.method} {request.url.path} - {response.status_code} in {duration}s")
                elif response.status_code >= 400:
                    logger.warning(f"Request client error: {request.method} {request.url.path} - {response.status_code} in {duration}s")
                else:
                    logger.info(f"Request completed: {request.method} {request.url.path} - {response.status_code} in {duration}s")

            return response

        except Exception as e:
            duration = round(time.time() - start_time, 3)
            with LogContext(
                request_id=request_id,
                path=request.url.path,
                method=request.method,
                duration=duration,
                error_type=type(e).__name__,
                error_message=str(e)
            ):
                logger.exception(f"Request exception: {request.method} {request.url.path}")

            return JSONResponse(
                status_code=500,
                content={
                    "detail": "Internal server error",
                    "request_id": request_id
                }
            )

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    request_id = getattr(request.state, "request_id", "unknown")

    with LogContext(
        request_id=request_id,
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
        error_message=str(exc)
    ):
        logger.exception("Unhandled exception")

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "request_id": request_id
        }
    )

app.include_router(v1_layout_builder_router, prefix="/api/v1")

@app.get("/health")
async def health():
    return {"status": "healthy", "service": "layout-builder-api"}
