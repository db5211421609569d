"""
Load test orchestration
Repeated sequential calls against the backend's user listing
"""

from typing import Optional

import structlog

from app.models.load_test import LoadTestSummary
from app.utils.backend_client import BackendClient

logger = structlog.get_logger(__name__)

DEFAULT_REQUEST_COUNT = 10
LOAD_TEST_PATH = "/api/users"


def parse_request_count(raw: Optional[str]) -> int:
    """Parse the requests query parameter; missing or non-positive values fall back to the default"""
    if raw is None:
        return DEFAULT_REQUEST_COUNT
    try:
        count = int(raw.strip())
    except ValueError:
        return DEFAULT_REQUEST_COUNT
    return count if count > 0 else DEFAULT_REQUEST_COUNT


async def run_load_test(client: BackendClient, count: int) -> LoadTestSummary:
    """
    Call the backend `count` times, one after another.

    Each call completes (success, timeout or error) before the next one
    starts, and failures never stop the run early. Calls use the client's
    default timeout.

    Args:
        client: Backend client
        count: Number of calls; non-positive values fall back to the default

    Returns:
        Aggregated summary of the run
    """
    if count < 1:
        count = DEFAULT_REQUEST_COUNT

    successful = 0
    for attempt in range(1, count + 1):
        outcome = await client.call("GET", LOAD_TEST_PATH)
        if outcome.ok:
            successful += 1
        else:
            logger.warning(
                "Load test call failed",
                attempt=attempt,
                outcome=outcome.kind,
                error=outcome.message
            )

    return LoadTestSummary.from_counts(total=count, successful=successful)
