import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from toolhub.config import settings
from toolhub.core.dependencies import API_PREFIX
from toolhub.core.error_boundary import error_detail
from toolhub.modules.auth import routes as auth_routes
from toolhub.modules.profile import routes as profile_routes
from toolhub.modules.mfa import routes as mfa_routes
from toolhub.modules.users import routes as users_routes
from toolhub.modules.tools import routes as tools_routes
from toolhub.modules.requests import routes as requests_routes
from toolhub.modules.notifications import routes as notifications_routes
from toolhub.modules.audit import routes as audit_routes
from toolhub.modules.dashboard import routes as dashboard_routes
from toolhub.modules.business_clarity import routes as business_clarity_routes
from toolhub.modules.journal import routes as journal_routes
from toolhub.modules.usage import routes as usage_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    detail = error_detail(exc)
    return JSONResponse(status_code=500, content={"detail": detail or "Internal server error"})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(auth_routes.router, prefix=API_PREFIX)
app.include_router(profile_routes.router, prefix=API_PREFIX)
app.include_router(mfa_routes.router, prefix=API_PREFIX)
app.include_router(users_routes.router, prefix=API_PREFIX)
app.include_router(tools_routes.router, prefix=API_PREFIX)
app.include_router(requests_routes.router, prefix=API_PREFIX)
app.include_router(notifications_routes.router, prefix=API_PREFIX)
app.include_router(audit_routes.router, prefix=API_PREFIX)
app.include_router(dashboard_routes.router, prefix=API_PREFIX)
app.include_router(business_clarity_routes.router, prefix=API_PREFIX)
app.include_router(journal_routes.router, prefix=API_PREFIX)
app.include_router(usage_routes.router, prefix=API_PREFIX)


@app.on_event("startup")
async def startup_event():
    logger.info(f"Application startup ({settings.environment})")
    if not settings.supabase_service_role_key:
        logger.warning("SUPABASE_SERVICE_ROLE_KEY not set; password changes and user administration are disabled")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe: configuration must name a Supabase project."""
    if not settings.supabase_url or not settings.supabase_key:
        return JSONResponse(status_code=503, content={"status": "not ready", "detail": "Supabase not configured"})
    return {"status": "ready"}
