"""Microblog - user accounts and microposts."""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.config import get_settings
from app.errors import EmailTakenError, MailDeliveryError
from app.rate_limit import limiter
from app.routers import account_activations_router, password_resets_router, sessions_router, users_router

settings = get_settings()

# Logging
logger = logging.getLogger("microblog")
logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

for warning in settings.validate():
    logger.warning("Config: %s", warning)

MAIL_FAILURE_DETAIL = (
    "Could not send email. Your request was saved; ask for a new link via "
    "POST /api/v1/account-activations or POST /api/v1/password-resets."
)

app = FastAPI(title="Microblog", version="0.1.0")
app.state.limiter = limiter


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


# --- Audit logging middleware ---
class AuditLogMiddleware(BaseHTTPMiddleware):
    AUDIT_PATHS = {
        "/api/v1/users",
        "/api/v1/sessions",
        "/api/v1/account-activations",
        "/api/v1/password-resets",
    }

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000

        # Log account changing operations, never the token-bearing path itself
        path = request.url.path
        method = request.method
        audited = next((p for p in self.AUDIT_PATHS if path.startswith(p)), None)
        if audited and (method in ("POST", "PATCH", "DELETE") or audited == "/api/v1/account-activations"):
            logger.info(
                "AUDIT %s %s -> %d (%.0fms) from %s",
                method,
                audited,
                response.status_code,
                duration_ms,
                request.client.host if request.client else "unknown",
            )

        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(AuditLogMiddleware)

# API routers
app.include_router(users_router)
app.include_router(account_activations_router)
app.include_router(sessions_router)
app.include_router(password_resets_router)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded."""
    return JSONResponse(status_code=429, content={"detail": "Rate limit exceeded. Try again later."})


@app.exception_handler(MailDeliveryError)
async def mail_delivery_handler(request: Request, exc: MailDeliveryError) -> JSONResponse:
    """Mail failures surface as a bad gateway; the account change itself has already been stored."""
    logger.error("Mail delivery failed during %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": MAIL_FAILURE_DETAIL})


@app.exception_handler(EmailTakenError)
async def email_taken_handler(request: Request, exc: EmailTakenError) -> JSONResponse:
    """Duplicate email that slipped past validation."""
    detail = {"message": f"Email {exc.email} has already been taken", "errors": {"email": ["has already been taken"]}}
    return JSONResponse(status_code=409, content={"detail": detail})


# --- Health check ---
@app.get("/api/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "app": "microblog", "version": "0.1.0"}
