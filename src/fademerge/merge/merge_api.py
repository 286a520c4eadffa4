"""HTTP routes for merge operations."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from .merge_models import FailureReason, MergeOutcome
from .merge_schemas import MergeErrorSchema, MergeResultSchema
from .merge_service import MergeService

router = APIRouter(tags=["merge"])
logger = logging.getLogger(__name__)

DEFAULT_MAX_BODY_BYTES = 20 * 1024 * 1024

STATUS_BY_REASON = {
    FailureReason.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    FailureReason.FETCH_ERROR: status.HTTP_502_BAD_GATEWAY,
    FailureReason.MERGE_ENGINE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    FailureReason.PUBLISH_ERROR: status.HTTP_502_BAD_GATEWAY,
    FailureReason.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_merge_service(request: Request) -> MergeService:
    """Fetch merge service from application state."""
    try:
        return request.app.state.merge_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("MergeService is not configured") from exc


def _invalid_request(message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={
            "status": "error",
            "failure_reason": FailureReason.INVALID_REQUEST.value,
            "message": message,
        },
    )


async def _read_payload(request: Request) -> dict:
    limit = getattr(request.app.state, "max_body_bytes", DEFAULT_MAX_BODY_BYTES)
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise _invalid_request("request body too large", status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)
    body = await request.body()
    if len(body) > limit:
        raise _invalid_request("request body too large", status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)
    try:
        payload = json.loads(body or b"{}")
    except ValueError as exc:
        raise _invalid_request("request body must be JSON") from exc
    if not isinstance(payload, dict):
        raise _invalid_request("request body must be a JSON object")
    return payload


@router.get("/", response_class=PlainTextResponse)
async def liveness() -> str:
    return "Fade merge server live"


@router.post(
    "/merge-faded",
    response_model=MergeResultSchema,
    responses={
        400: {"model": MergeErrorSchema},
        500: {"model": MergeErrorSchema},
        502: {"model": MergeErrorSchema},
    },
)
async def merge_faded(
    request: Request,
    service: MergeService = Depends(get_merge_service),
) -> MergeResultSchema:
    """Fetch intro/main/outro, merge with fades and return the published URL."""
    payload = await _read_payload(request)
    outcome = await service.run(
        payload.get("files"),
        payload.get("output"),
        payload.get("bucket"),
    )
    if outcome.success and outcome.url:
        return MergeResultSchema(success=True, url=outcome.url)
    raise _failure(outcome)


def _failure(outcome: MergeOutcome) -> HTTPException:
    reason = outcome.failure_reason or FailureReason.INTERNAL_ERROR
    logger.info("merge.request.failed", extra={"failure_reason": reason.value})
    return HTTPException(
        status_code=STATUS_BY_REASON.get(reason, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail={
            "status": "error",
            "failure_reason": reason.value,
            "message": outcome.message,
        },
    )
