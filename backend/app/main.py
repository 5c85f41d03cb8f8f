import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from app.config import get_settings
from app.database import engine, Base, async_session
from app.exception_handlers import setup_exception_handlers
from app.exceptions import DuplicateError, ValidationError
from app.routers import admin, medicines
from app.routers import auth as auth_router

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def seed_admin_user():
    """Create the bootstrap admin from settings if configured and missing. Idempotent."""
    from app.models.user import Role
    from app.services.user_store import UserStore

    settings = get_settings()
    if not (settings.admin_username and settings.admin_email and settings.admin_password):
        return

    async with async_session() as session:
        store = UserStore(session)
        if await store.find_by_email(settings.admin_email) or await store.find_by_username(settings.admin_username):
            return
        try:
            await store.create(settings.admin_username, settings.admin_email, settings.admin_password, Role.ADMIN)
            await session.commit()
        except (ValidationError, DuplicateError) as e:
            logger.error("Bootstrap admin not created: %s %s", e.message, e.errors or "")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables then seed the admin account
    configure_logging(get_settings().log_level)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await seed_admin_user()
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="Medicine Inventory API",
    description="JWT-authenticated, role-gated medicine inventory backend",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds hardening and no-cache headers to every response."""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Strict-Transport-Security"] = "max-age=15552000; includeSubDomains"
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, proxy-revalidate, max-age=0"
        response.headers["Pragma"] = "no-cache"
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed_ms)
        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)
setup_exception_handlers(app)

app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
app.include_router(medicines.router, prefix="/api/medicines", tags=["Medicines"])


@app.get("/api/health")
async def health_check():
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
