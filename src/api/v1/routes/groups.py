"""Group definition routes."""

from fastapi import APIRouter, Depends, Request

from api.v1.dependencies import get_runner
from api.v1.schemas.group import GroupDefinitionResponse, GroupListResponse
from core.rate_limit import READ_LIMIT, limiter
from infrastructure.runner import OnboardingRunner

router = APIRouter(prefix="/groups", tags=["groups"])


@router.get(
    "",
    response_model=GroupListResponse,
    summary="List configured groups",
    responses={
        200: {"description": "Group definitions from groups.json"},
        500: {"description": "groups.json missing or invalid"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_groups(
    request: Request,
    runner: OnboardingRunner = Depends(get_runner),
) -> GroupListResponse:
    groups = runner.list_groups()
    data = [GroupDefinitionResponse.model_validate(group) for group in groups]
    return GroupListResponse(data=data, meta={"total": len(data)})
