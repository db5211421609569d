"""
Processing route proxied to the backend
"""

import json
from urllib.parse import parse_qs

from fastapi import APIRouter, Depends, Request
import structlog

from app.routes.helpers import failure_message, get_backend_client, outcome_to_response
from app.utils.backend_client import BackendClient

logger = structlog.get_logger(__name__)

router = APIRouter()

PROCESS_TIMEOUT_MS = 10000
EMPTY_OBJECT = b"{}"


def _is_json(content_type: str) -> bool:
    return content_type == "application/json" or content_type.endswith("+json")


def forward_body(content_type: str, raw: bytes) -> bytes:
    """
    Build the JSON payload sent to the backend.

    JSON bodies go through byte-for-byte; urlencoded forms become a JSON
    object; anything else is sent as an empty object.

    Raises:
        ValueError: JSON content type with a body that does not parse
    """
    media_type = content_type.split(";", 1)[0].strip().lower()

    if _is_json(media_type):
        if not raw.strip():
            return EMPTY_OBJECT
        json.loads(raw)
        return raw

    if media_type == "application/x-www-form-urlencoded":
        fields = parse_qs(raw.decode("utf-8", errors="replace"), keep_blank_values=True)
        form = {key: values[0] if len(values) == 1 else values for key, values in fields.items()}
        return json.dumps(form).encode("utf-8")

    return EMPTY_OBJECT


@router.post("/process")
async def process_request(request: Request, client: BackendClient = Depends(get_backend_client)):
    """Forward a processing request to the backend"""
    body = forward_body(request.headers.get("content-type", ""), await request.body())

    logger.info("Processing request")
    outcome = await client.call("POST", "/api/process", body=body, timeout_ms=PROCESS_TIMEOUT_MS)

    if not outcome.ok:
        logger.error(
            "Error processing request",
            error=failure_message(outcome),
            backend=client.base_url
        )
    return outcome_to_response(outcome, error="Processing failed")
