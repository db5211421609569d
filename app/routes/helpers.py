"""
Shared helpers for proxy routes: outcome to response mapping
"""

from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from app.models.outcomes import BackendCallOutcome, BackendError
from app.utils.backend_client import BackendClient


def get_backend_client(request: Request) -> BackendClient:
    """Dependency to get the backend client"""
    return request.app.state.backend_client


def failure_message(outcome: BackendCallOutcome) -> Optional[str]:
    """Human readable reason for a failed outcome, None on success"""
    if outcome.ok:
        return None
    return outcome.message


def outcome_to_response(
    outcome: BackendCallOutcome,
    error: str,
    not_found: Optional[str] = None,
) -> Response:
    """
    Map a backend outcome to the edge response.

    Args:
        outcome: Result of the backend call
        error: Error label used for failures, e.g. "Failed to fetch users"
        not_found: Error label for a backend 404; only single-resource lookups pass one

    Returns:
        Success passes status and body through verbatim; failures become JSON errors
    """
    if outcome.ok:
        return Response(
            content=outcome.body,
            status_code=outcome.status_code,
            media_type="application/json",
        )

    if not_found and isinstance(outcome, BackendError) and outcome.status_code == 404:
        return JSONResponse(status_code=404, content={"error": not_found})

    return JSONResponse(
        status_code=500,
        content={"error": error, "message": outcome.message},
    )
