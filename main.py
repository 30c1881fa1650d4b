"""
Gym Booking Backend
Classes, schedules, bookings, personal training, Stripe payments and admin stats
"""

from pathlib import Path
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from auth import auth_router
from routers.admin_router import admin_router
from routers.booking_router import booking_router
from routers.catalog_router import catalog_router
from routers.payment_router import payment_router
from services.payment_gateway import build_payment_gateway
from utils.rate_limit import RateLimiterMiddleware
from database import init_db
from config.settings import settings
from backend.utils.errors import GymError
from backend.utils.responses import error_response, gym_error_response

# Logging setup - write ALL events to ./logs/app.log
LOGS_DIR = Path("./logs")
LOGS_DIR.mkdir(exist_ok=True)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(LOGS_DIR / "app.log"),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

# ============================================================================
# FASTAPI APP SETUP
# ============================================================================

app = FastAPI(title="Gym Booking API")


def _is_render_env() -> bool:
    """Check if running in Render.com environment"""
    return bool(settings.render or settings.render_external_url or settings.render_service_name)


# Uncaught exception middleware - logs all unhandled exceptions and returns 500
class UncaughtExceptionMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Uncaught exception: {e}\n{traceback.format_exc()}")
            return JSONResponse(
                status_code=500,
                content={"ok": False, "data": {}, "error": "internal_error", "message": "Internal Server Error"}
            )


# Security headers middleware
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses: CSP, HSTS, X-Frame-Options, X-Content-Type-Options"""
    async def dispatch(self, request, call_next):
        response = await call_next(request)

        # Stripe.js and its frames are the only third-party origins the client needs
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "script-src 'self' 'unsafe-inline' https://js.stripe.com; "
            "style-src 'self' 'unsafe-inline'; "
            "connect-src 'self' https://api.stripe.com; "
            "frame-src https://js.stripe.com https://hooks.stripe.com; "
            "img-src 'self' data: blob:; "
            "font-src 'self' data:; "
            "object-src 'none'; "
            "base-uri 'self'; "
            "form-action 'self';"
        )

        # HSTS only where HTTPS is guaranteed
        if _is_render_env():
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"

        return response


app.add_middleware(UncaughtExceptionMiddleware)
app.add_middleware(RateLimiterMiddleware, requests_per_minute=settings.rate_limit_per_minute)
app.add_middleware(SecurityHeadersMiddleware)

# CORS MUST be near the bottom
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================


@app.exception_handler(GymError)
async def handle_gym_error(request: Request, exc: GymError):
    if exc.status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code} ({exc.message})")
    return gym_error_response(exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg")}
        for err in exc.errors()
    ]
    return error_response(
        "validation_error",
        status=400,
        message="Invalid request body",
        data={"errors": errors}
    )

# ============================================================================
# STARTUP
# ============================================================================


@app.on_event("startup")
async def check_env_keys_on_startup():
    """Check for missing environment variables on startup (non-fatal warning)"""
    key_checks = {
        "JWT_SECRET_KEY": settings.jwt_secret_key,
        "STRIPE_SECRET_KEY": settings.stripe_secret_key,
    }
    missing = [key for key, value in key_checks.items() if not value]
    if missing:
        logger.warning(f"Startup check: Missing environment variables: {', '.join(missing)}")
    else:
        logger.info("Startup check: All critical environment variables are set")


@app.on_event("startup")
async def initialize_payment_gateway():
    """Build the Stripe gateway once; request handlers receive it through a dependency."""
    app.state.payment_gateway = build_payment_gateway(settings)


@app.on_event("startup")
async def initialize_database():
    """Create all tables."""
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

# ============================================================================
# INCLUDE ROUTERS
# ============================================================================
app.include_router(auth_router)
app.include_router(catalog_router)
app.include_router(booking_router)
app.include_router(payment_router)
app.include_router(admin_router)

# ============================================================================
# FRONTEND SERVING (MUST BE LAST - AFTER ALL API ROUTES)
# ============================================================================

FRONTEND_DIST = Path(__file__).resolve().parent / "frontend" / "dist"

if FRONTEND_DIST.exists():
    app.mount("/", StaticFiles(directory=FRONTEND_DIST, html=True), name="spa-root")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
