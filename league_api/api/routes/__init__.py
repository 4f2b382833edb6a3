"""
API routes - combined router from all domain modules.

Shared infrastructure (limiter, constants) lives here; every sub-router
imports what it needs from this package.
"""

from fastapi import APIRouter, HTTPException
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.exc import InterfaceError, OperationalError

from league_api.config import IS_TEST_ENV
from league_api.api.auth_dependencies import unauthorized  # noqa: F401
from league_api.utils.errors import handle_error

# ---------------------------------------------------------------------------
# Shared rate limiter
# ---------------------------------------------------------------------------
limiter = Limiter(key_func=get_remote_address)
if IS_TEST_ENV:

    def no_op_limit(*args, **kwargs):
        """No-op decorator for test mode - doesn't apply any rate limiting."""
        def decorator(func):
            return func
        return decorator

    limiter.limit = lambda *args, **kwargs: no_op_limit()

CREDENTIALS_RATE_LIMIT = "10/minute"

# ---------------------------------------------------------------------------
# Shared constants
# ---------------------------------------------------------------------------
SUCCESSFUL = {"status": "successful"}

# Store connectivity failures are left for the app-level 502 handler
STORE_UNAVAILABLE = (OperationalError, InterfaceError)


def bad_request(error: Exception) -> HTTPException:
    """400 carrying the classified detail for an error."""
    return HTTPException(status_code=400, detail=handle_error(error))


# ---------------------------------------------------------------------------
# Import sub-routers and combine
# ---------------------------------------------------------------------------
from league_api.api.routes.accounts import router as accounts_router  # noqa: E402
from league_api.api.routes.leagues import router as leagues_router  # noqa: E402
from league_api.api.routes.positions import router as positions_router  # noqa: E402
from league_api.api.routes.players import router as players_router  # noqa: E402
from league_api.api.routes.sports import router as sports_router  # noqa: E402
from league_api.api.routes.seasons import router as seasons_router  # noqa: E402
from league_api.api.routes.email import router as email_router  # noqa: E402

router = APIRouter()
router.include_router(accounts_router)
router.include_router(leagues_router)
router.include_router(positions_router)
router.include_router(players_router)
router.include_router(sports_router)
router.include_router(seasons_router)
router.include_router(email_router)
