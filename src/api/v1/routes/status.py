"""Status and operation history routes."""

from fastapi import APIRouter, Depends, Query, Request

from api.v1.dependencies import get_runner, get_state_store
from api.v1.schemas.onboarding import (
    OperationLogListResponse,
    OperationLogResponse,
    StatusListResponse,
    UserStatusResponse,
)
from core.rate_limit import READ_LIMIT, limiter
from domain.entities.environment import Environment
from domain.services.state_store import StateStore
from infrastructure.runner import OnboardingRunner

router = APIRouter(tags=["status"])


@router.get(
    "/status/{environment}",
    response_model=StatusListResponse,
    summary="Onboarding status of every user",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_status(
    request: Request,
    environment: Environment,
    runner: OnboardingRunner = Depends(get_runner),
) -> StatusListResponse:
    views = await runner.statuses(environment)
    data = [
        UserStatusResponse(
            user_id=view.status.user_id,
            email=view.status.email,
            invited=view.status.invited,
            group_created=view.status.group_created,
            source_created=view.status.source_created,
            group_api_id=view.status.group_api_id,
            source_api_id=view.status.source_api_id,
            has_credential=view.has_credential,
        )
        for view in views
    ]
    meta = {
        "environment": environment.value,
        "total": len(data),
        "complete": sum(1 for row in data if row.group_created and row.source_created),
    }
    return StatusListResponse(data=data, meta=meta)


@router.get(
    "/operations/{environment}",
    response_model=OperationLogListResponse,
    summary="Recent operation log entries",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_operations(
    request: Request,
    environment: Environment,
    user_id: str | None = Query(None, description="Only entries for this user"),
    limit: int = Query(50, ge=1, le=500),
    store: StateStore = Depends(get_state_store),
) -> OperationLogListResponse:
    """Get the audit trail for an environment, newest first."""
    entries = await store.list_operations(environment, user_id=user_id, limit=limit)
    data = [OperationLogResponse.model_validate(entry) for entry in entries]
    return OperationLogListResponse(data=data, meta={"total": len(data)})
