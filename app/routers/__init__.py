"""API routers."""

from app.routers.account_activations import router as account_activations_router
from app.routers.password_resets import router as password_resets_router
from app.routers.sessions import router as sessions_router
from app.routers.users import router as users_router

__all__ = ["users_router", "account_activations_router", "sessions_router", "password_resets_router"]
