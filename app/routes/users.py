"""
User routes proxied to the backend
"""

from fastapi import APIRouter, Depends
import structlog

from app.routes.helpers import failure_message, get_backend_client, outcome_to_response
from app.utils.backend_client import BackendClient

logger = structlog.get_logger(__name__)

router = APIRouter()

USERS_TIMEOUT_MS = 5000


@router.get("")
async def list_users(client: BackendClient = Depends(get_backend_client)):
    """List users from the backend"""
    logger.info("Fetching users from backend")
    outcome = await client.call("GET", "/api/users", timeout_ms=USERS_TIMEOUT_MS)

    if not outcome.ok:
        logger.error(
            "Error fetching users",
            error=failure_message(outcome),
            backend=client.base_url
        )
    return outcome_to_response(outcome, error="Failed to fetch users")


@router.get("/{user_id}")
async def get_user(user_id: str, client: BackendClient = Depends(get_backend_client)):
    """Get a single user from the backend"""
    logger.info("Fetching user from backend", user_id=user_id)
    outcome = await client.call("GET", f"/api/users/{user_id}", timeout_ms=USERS_TIMEOUT_MS)

    if not outcome.ok:
        logger.error(
            "Error fetching user",
            user_id=user_id,
            error=failure_message(outcome),
            backend=client.base_url
        )
    return outcome_to_response(outcome, error="Failed to fetch user", not_found="User not found")
