import logging
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import RedirectResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError

from api.config import settings
from api.errors import APIError
from api.responses import error_response

from api.db.session import init_db
from api.auth.routing import router as auth_router
from api.videos.routing import router as videos_router
from api.comments.routing import router as comments_router
from api.tweets.routing import router as tweets_router
from api.likes.routing import router as likes_router
from api.subscriptions.routing import router as subscriptions_router
from api.playlists.routing import router as playlists_router
from api.dashboard.routing import router as dashboard_router

# Logging
_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
logging.basicConfig(
    level=_level,
    format='%(asctime)s %(levelname)s %(name)s %(message)s',
)
for _logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(_logger_name).setLevel(_level)

logger = logging.getLogger("vidshare")

# CORS
# Use env-driven origins with safe local defaults from settings
origins = [origin for origin in settings.CORS_ORIGINS if origin]

@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)

# Request logging middleware
class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Request failed: {request.method} {request.url.path} - {str(e)}")
            raise

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} from {client} -> {response.status_code} in {process_time:.3f}s"
        )
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response

app = FastAPI(
    title="Vidshare API",
    description=(
        "Vidshare is a backend for a video-sharing platform: videos, comments, likes, "
        "channel subscriptions, tweets and playlists. It is built with FastAPI and SQLModel, "
        "with media stored in S3-compatible object storage.\n\n"
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)
app.state.limiter = limiter

# Middleware stack
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(LoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    return error_response(exc.status_code, exc.message, exc.errors)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    message = errors[0]["msg"] if errors else "Invalid input"
    logger.warning(f"Validation error on {request.method} {request.url.path}: {message}")
    return error_response(400, message, errors)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return error_response(500, "Database error")


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    response = error_response(429, f"Rate limit exceeded: {exc.detail}")
    response.headers["Retry-After"] = "60"
    return response


# Prometheus metrics
Instrumentator().instrument(app).expose(app, endpoint="/metrics")

app.include_router(auth_router, prefix='/api/auth')
app.include_router(videos_router, prefix='/api/videos')
app.include_router(comments_router, prefix='/api/comments')
app.include_router(tweets_router, prefix='/api/tweets')
app.include_router(likes_router, prefix='/api/likes')
app.include_router(subscriptions_router, prefix='/api/subscriptions')
app.include_router(playlists_router, prefix='/api/playlists')
app.include_router(dashboard_router, prefix='/api/dashboard')

@app.get("/")
def read_root():
    return RedirectResponse(url=settings.LOGIN_URL, status_code=302)

@app.get("/healthChecker")
def read_api_health():
    return {"status": "ok"}
