"""
JobTracker - FastAPI application entry point.

Build the app with create_app(settings). Run it with:

    uvicorn jobtracker.main:create_app --factory
"""
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.sessions import SessionMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from . import __version__
from .auth import router as auth_router
from .auth.oauth import build_oauth
from .auth.service import AuthService
from .auth.verifiers import SessionVerifier, build_verifier
from .config import Settings
from .database import create_app_engine, create_session_factory, init_db
from .errors import register_error_handlers
from .rate_limit import limiter
from .routers import jobs, linkedin
from .services.linkedin import LinkedInClient

# --- Logging Configuration ---
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("jobtracker")

PACKAGE_DIR = Path(__file__).parent
templates = Jinja2Templates(directory=str(PACKAGE_DIR / "templates"))


# --- Security Headers Middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and prune stale sessions on startup."""
    logger.info("Starting JobTracker application...")
    init_db(app.state.engine)

    verifier = app.state.verifier
    if isinstance(verifier, SessionVerifier):
        db = app.state.session_factory()
        try:
            verifier.cleanup_expired_sessions(db)
        finally:
            db.close()

    logger.info("JobTracker ready!")
    yield
    logger.info("Shutting down JobTracker...")
    app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application from an explicit settings object.

    Everything request handlers need (settings, database, verifier, OAuth
    registry, LinkedIn client) hangs off app.state.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="JobTracker",
        description="Track job applications - companies, positions, statuses and notes",
        version=__version__,
        lifespan=lifespan
    )

    engine = create_app_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.verifier = build_verifier(settings.auth)
    app.state.auth_service = AuthService(settings.auth)
    app.state.oauth = build_oauth(settings)
    app.state.linkedin_client = LinkedInClient(settings.linkedin)

    # --- Error handling ---
    register_error_handlers(app, settings)

    # --- Rate Limiting ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # --- Middleware ---
    allowed_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.auth.secret_key,  # Required for OAuth redirect state
    )

    # Static files
    app.mount("/static", StaticFiles(directory=str(PACKAGE_DIR / "static")), name="static")

    # Routers
    app.include_router(jobs.router, prefix="/api/jobs", tags=["jobs"])
    app.include_router(linkedin.router, prefix="/api", tags=["linkedin"])
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])

    @app.get("/api/health", tags=["system"])
    async def health_check():
        """Health check endpoint for monitoring."""
        return {
            "status": "healthy",
            "version": __version__,
            "timestamp": datetime.utcnow().isoformat()
        }

    # --- Page Routes ---

    @app.get("/", include_in_schema=False)
    async def jobs_page(request: Request):
        """Job list and form."""
        return templates.TemplateResponse(request, "jobs.html", {"strategy": settings.auth.auth_strategy})

    @app.get("/login", include_in_schema=False)
    async def login_page(request: Request):
        return templates.TemplateResponse(
            request, "login.html",
            {
                "strategy": settings.auth.auth_strategy,
                "linkedin_enabled": settings.linkedin.oauth_configured,
            }
        )

    return app
