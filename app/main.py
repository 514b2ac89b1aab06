from typing import Optional

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from timing_asgi import TimingMiddleware, TimingClient  # type: ignore
from timing_asgi.integrations import StarletteScopeToName  # type: ignore

from app.core import config
from app.core.context import AppContext, build_context
from app.core.errors import AccessDenied, ValidationFailure
from app.features.auth.routes import router as auth_router
from app.features.users.routes import router as user_router
from app.features.organizations.routes import router as organization_router
from app.features.orders.routes import router as order_router
from app.features.save_data.routes import router as save_data_router
from app.features.dashboard.routes import router as dashboard_router
from app.features.data_management.routes import router as data_management_router
from app.utils import get_logger


log = get_logger(__name__)


class PrintTimings(TimingClient):
    def timing(self, metric_name, timing, tags):
        log.debug(dict(route=metric_name.removeprefix("main.app.features."), timing=timing, tags=tags))


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """
    Build the console API.

    Args:
        context: Pre-built application context; built from configuration at
            startup when omitted
    """
    log.info("Initializing server")
    app = FastAPI(
        title="Admin Console",
        description="Multi-tenant admin console for users, organizations and orders",
        version="0.1.0",
        docs_url="/docs" if config.ENABLE_DOCS else None,
        redoc_url="/redoc" if config.ENABLE_DOCS else None,
        openapi_url="/openapi.json" if config.ENABLE_DOCS else None
    )
    app.state.limiter = Limiter(key_func=get_remote_address, default_limits=[config.RATE_LIMIT])
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(TimingMiddleware, client=PrintTimings(), metric_namer=StarletteScopeToName("main", app))

    if config.ENABLE_DOCS:
        log.warning("Docs enabled")
    if config.ALLOW_ORIGIN:
        log.warning("Setting allow origin to %s", config.ALLOW_ORIGIN)
        origins = [config.ALLOW_ORIGIN]
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError):
        errors = dict()
        for error in exc.errors():
            if "loc" not in error or "msg" not in error:
                continue
            key = error["loc"][-1]
            if key == "__root__":
                key = "root"
            errors[key] = error["msg"]
        log.info("Request validation error %s", errors)
        return JSONResponse(status_code=400, content=jsonable_encoder(errors))

    @app.exception_handler(ValidationFailure)
    async def validation_failure_handler(_request: Request, exc: ValidationFailure):
        log.info("Record validation failure %s", exc.errors)
        return JSONResponse(status_code=400, content=jsonable_encoder(exc.errors))

    @app.exception_handler(AccessDenied)
    async def access_denied_handler(_request: Request, exc: AccessDenied):
        return JSONResponse(status_code=403, content={"detail": str(exc)})

    @app.exception_handler(RateLimitExceeded)
    def rate_limit_exceeded_handler(_request: Request, _exc: RateLimitExceeded) -> Response:
        return JSONResponse({"error": "You are going too fast"}, status_code=429)

    @app.on_event("startup")
    async def startup():
        """Resolve the dataset and restore the session on application startup."""
        log.info("Initializing data...")
        app.state.context = context if context is not None else build_context()
        await app.state.context.start()
        log.info("Data initialized successfully")

    @app.on_event("shutdown")
    async def shutdown():
        await app.state.context.close()

    @app.get("/")
    async def root():
        """Root endpoint - API health check."""
        return {
            "message": "Admin Console API",
            "version": "0.1.0",
            "status": "online",
            "docs": "/docs" if config.ENABLE_DOCS else None,
            "authentication": {
                "info": "Log in with POST /auth/login; the session is held by this process",
                "protected_endpoints": [
                    "/users/*", "/organizations/*", "/orders/*",
                    "/dashboard/*", "/data-management/*",
                ],
                "public_endpoints": ["/auth/login", "/api/save-data", "/health"],
            },
            "features": {
                "users": "Users with super_admin / org_admin / org_user roles",
                "organizations": "Tenants grouping users and orders",
                "orders": "Orders owned by a user inside an organization",
                "persistence": "Blob store, local mirror and default dataset fallback",
            }
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    # Include routers
    app.include_router(auth_router, prefix="/auth", tags=["auth"])
    app.include_router(user_router, prefix="/users", tags=["users"])
    app.include_router(organization_router, prefix="/organizations", tags=["organizations"])
    app.include_router(order_router, prefix="/orders", tags=["orders"])
    app.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
    app.include_router(data_management_router, prefix="/data-management", tags=["data-management"])

    # Blob store endpoint used by HttpBlobStore
    app.include_router(save_data_router, prefix="/api/save-data", tags=["save-data"])

    return app


app = create_app()
