"""
Name: FastAPI Application Entry Point

Responsibilities:
  - Initialize FastAPI application with metadata (title, version)
  - Configure middleware (request context, body limit, security headers, CORS)
  - Mount document/workspace/user/admin routers under the /v1 prefix
  - Expose health, readiness and metrics endpoints

Collaborators:
  - FastAPI: ASGI web framework
  - CORSMiddleware: Cross-Origin Resource Sharing handler
  - RequestContextMiddleware: Request ID and logging context
  - interfaces.api.http.router: business endpoints
  - api.auth_routes: login/logout/me

Notes:
  - Middleware order matters: RequestContext → SecurityHeaders → BodyLimit → CORS → routes
  - /v1 prefix allows API versioning; /auth and ops endpoints stay unversioned
  - /healthz is liveness only; /readyz checks the database
  - /metrics exposes Prometheus metrics (admin-only when METRICS_REQUIRE_AUTH=true)

Production Readiness:
  - Env validation enforced when Settings are built
  - Request tracing with X-Request-Id header
  - Structured JSON logging with request correlation
"""

import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from ..application.dev_seed_admin import ensure_dev_admin
from ..container import _is_test_env, get_document_repository, get_user_repository
from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import forbidden
from ..crosscutting.logger import logger
from ..crosscutting.metrics import get_metrics_response
from ..crosscutting.middleware import BodyLimitMiddleware, RequestContextMiddleware
from ..crosscutting.security import SecurityHeadersMiddleware
from ..identity.auth_users import hash_password, require_user
from ..identity.users import UserRole
from ..infrastructure.db.pool import close_pool, init_pool
from ..interfaces.api.http.router import router
from .auth_routes import router as auth_router
from .exception_handlers import register_exception_handlers


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle. Initializes pool and dev seed."""
    settings = get_settings()
    use_pool = not _is_test_env()

    # Initialize DB pool (must happen before any Postgres repository usage)
    if use_pool:
        init_pool(
            database_url=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            statement_timeout_ms=settings.db_statement_timeout_ms,
        )

    try:
        # Dev seed admin (only does something if enabled in settings/env)
        try:
            ensure_dev_admin(
                settings,
                user_repo=get_user_repository(),
                password_hasher=hash_password,
                env=os.environ,
            )
        except Exception as e:
            logger.error(f"Startup failed: {e}")
            raise

        logger.info(
            "LisaDocs API starting up",
            extra={
                "app_env": settings.app_env,
                "transition_policy": settings.document_transition_policy,
                "storage_configured": settings.storage_configured(),
                "activity_queue": bool(settings.redis_url.strip()),
                "db_pool_min": settings.db_pool_min_size,
                "db_pool_max": settings.db_pool_max_size,
            },
        )

        yield

    finally:
        if use_pool:
            close_pool()
        logger.info("LisaDocs API shutting down")


# R: Create FastAPI application instance with API metadata
app = FastAPI(
    title="LisaDocs API",
    version="0.1.0",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "documents", "description": "Document lifecycle and files"},
        {"name": "workspaces", "description": "Workspace catalog, access and stats"},
        {"name": "users", "description": "User administration and capabilities"},
        {"name": "activity", "description": "Document activity log"},
        {"name": "admin", "description": "Administrative dashboard"},
        {"name": "auth", "description": "User authentication (JWT)"},
    ],
)


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    from fastapi.openapi.utils import get_openapi

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        routes=app.routes,
        tags=app.openapi_tags,
    )
    openapi_schema["components"] = openapi_schema.get("components", {})
    openapi_schema["components"]["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": (
                "JWT access token via Authorization: Bearer <token> or httpOnly cookie."
            ),
        },
    }
    # R: JWT global; los endpoints públicos lo anulan.
    openapi_schema["security"] = [{"BearerAuth": []}]

    public_paths = {"/healthz", "/readyz", "/auth/login", "/auth/logout"}
    for path, methods in openapi_schema.get("paths", {}).items():
        if path not in public_paths:
            continue
        for operation in methods.values():
            if isinstance(operation, dict):
                operation["security"] = []

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi


# R: Middleware order (bottom = first to execute):
# 1. CORSMiddleware - handles preflight
# 2. BodyLimitMiddleware - rejects oversized bodies early
# 3. SecurityHeadersMiddleware - OWASP headers on every response
# 4. RequestContextMiddleware - sets request_id

app.add_middleware(BodyLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestContextMiddleware)

# R: Configure CORS with secure defaults
_settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.get_allowed_origins_list(),
    allow_credentials=_settings.cors_allow_credentials,  # R: Secure default: False
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "X-Request-Id",
    ],
    expose_headers=["X-Request-Id", "Content-Disposition"],
)

# R: Register API routes under /v1 prefix for versioning
app.include_router(router, prefix="/v1")

# R: Register auth routes (no version prefix)
app.include_router(auth_router)

# R: Register exception handlers for structured error responses
register_exception_handlers(app)


# R: Liveness check for orchestration (Kubernetes, Docker)
@app.get("/healthz", tags=["ops"])
def healthz(request: Request):
    """
    R: Liveness only: the process answers requests.

    Returns:
        ok: always True while the process is serving
        request_id: Correlation ID for this request
    """
    return {
        "ok": True,
        "request_id": getattr(request.state, "request_id", None),
    }


@app.get("/readyz", tags=["ops"])
def readyz(request: Request, response: Response):
    """
    R: Readiness check for core dependencies.

    Returns:
        ok: True if the database answers
        db: "connected" or "disconnected"
        request_id: Correlation ID for this request
    """
    db_status = "disconnected"
    try:
        repo = get_document_repository()
        if repo.ping():
            db_status = "connected"
    except Exception as e:
        logger.warning("Ready check: DB unavailable", extra={"error": str(e)})

    if db_status != "connected":
        response.status_code = 503

    return {
        "ok": db_status == "connected",
        "db": db_status,
        "request_id": getattr(request.state, "request_id", None),
    }


def require_metrics_access(
    request: Request,
    authorization: str | None = Header(None, alias="Authorization"),
) -> None:
    """Dependency: /metrics abierto salvo METRICS_REQUIRE_AUTH=true (solo admin)."""
    if not get_settings().metrics_require_auth:
        return
    user = require_user(request, authorization)
    if user.role != UserRole.ADMINISTRADOR:
        raise forbidden("Metrics require an administrator.")


# R: Prometheus metrics endpoint
@app.get("/metrics", tags=["ops"])
def metrics(_auth: None = Depends(require_metrics_access)):
    """
    R: Expose Prometheus metrics.

    Returns:
        Prometheus text format metrics
    """
    body, content_type = get_metrics_response()
    return Response(content=body, media_type=content_type)
