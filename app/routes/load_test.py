"""
Load test route
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
import structlog

from app.routes.helpers import get_backend_client
from app.services.load_test_service import parse_request_count, run_load_test
from app.utils.backend_client import BackendClient

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/load-test")
async def load_test(
    requests: Optional[str] = Query(None, description="Number of sequential backend calls"),
    client: BackendClient = Depends(get_backend_client)
):
    """Run a sequential load test against the backend"""
    count = parse_request_count(requests)
    logger.info("Starting load test", requests=count)

    summary = await run_load_test(client, count)

    logger.info(
        "Load test completed",
        total=summary.total,
        successful=summary.successful,
        failed=summary.failed
    )
    return summary.model_dump(by_alias=True)
