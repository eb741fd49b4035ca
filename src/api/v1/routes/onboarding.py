"""Workflow API routes: invite, setup, cleanup and reset."""

from fastapi import APIRouter, Depends, Request

from api.v1.dependencies import get_runner
from api.v1.schemas.onboarding import BatchResultResponse, CleanupRequest, RunRequest
from core.rate_limit import RUN_LIMIT, limiter
from domain.entities.result import BatchResult
from infrastructure.runner import OnboardingRunner

router = APIRouter(tags=["onboarding"])

_RUN_RESPONSES: dict[int | str, dict[str, str]] = {
    200: {"description": "Run finished; see failed/skipped for per-user outcomes"},
    404: {"description": "No configured user matches group_ids"},
    500: {"description": "Missing configuration or state store failure"},
}


def _to_response(result: BatchResult) -> BatchResultResponse:
    return BatchResultResponse(**result.to_dict())


@router.post(
    "/invite",
    response_model=BatchResultResponse,
    summary="Invite users",
    responses={**_RUN_RESPONSES, 502: {"description": "Invitation API call failed"}},
)
@limiter.limit(RUN_LIMIT)  # type: ignore[untyped-decorator]
async def invite(
    request: Request,
    body: RunRequest,
    runner: OnboardingRunner = Depends(get_runner),
) -> BatchResultResponse:
    """Send one batch invitation for every selected user not yet invited."""
    result = await runner.invite(body.environment, body.group_ids)
    return _to_response(result)


@router.post(
    "/setup",
    response_model=BatchResultResponse,
    summary="Create groups and sources",
    responses=_RUN_RESPONSES,
)
@limiter.limit(RUN_LIMIT)  # type: ignore[untyped-decorator]
async def setup(
    request: Request,
    body: RunRequest,
    runner: OnboardingRunner = Depends(get_runner),
) -> BatchResultResponse:
    """Create the group, then the source, for every ready user."""
    result = await runner.setup(body.environment, body.group_ids)
    return _to_response(result)


@router.post(
    "/cleanup",
    response_model=BatchResultResponse,
    summary="Delete groups and sources upstream",
    responses=_RUN_RESPONSES,
)
@limiter.limit(RUN_LIMIT)  # type: ignore[untyped-decorator]
async def cleanup(
    request: Request,
    body: CleanupRequest,
    runner: OnboardingRunner = Depends(get_runner),
) -> BatchResultResponse:
    """Delete recorded sources and groups, then forget them locally."""
    result = await runner.cleanup(
        body.environment,
        body.group_ids,
        sources_only=body.sources_only,
        groups_only=body.groups_only,
    )
    return _to_response(result)


@router.post(
    "/reset",
    response_model=BatchResultResponse,
    summary="Reset local state",
    responses=_RUN_RESPONSES,
)
@limiter.limit(RUN_LIMIT)  # type: ignore[untyped-decorator]
async def reset(
    request: Request,
    body: RunRequest,
    runner: OnboardingRunner = Depends(get_runner),
) -> BatchResultResponse:
    """Forget recorded progress. Upstream resources are left untouched."""
    result = await runner.reset(body.environment, body.group_ids)
    return _to_response(result)
