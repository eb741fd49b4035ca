"""Pydantic schemas for the onboarding workflow API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.environment import Environment


class RunRequest(BaseModel):
    """Target environment and optional id subset for a workflow run."""

    environment: Environment = Environment.DEV
    group_ids: list[str] | None = Field(
        None,
        description="User/group ids to restrict the run to; omit or ['all'] for every user",
    )


class CleanupRequest(RunRequest):
    """Cleanup run; at most one of the scope flags may be set."""

    sources_only: bool = False
    groups_only: bool = False


class BatchResultResponse(BaseModel):
    """Classified outcome of a workflow run."""

    environment: Environment
    succeeded: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)
    skipped: dict[str, str] = Field(default_factory=dict)
    already_done: list[str] = Field(default_factory=list)


class UserStatusResponse(BaseModel):
    """Onboarding progress of one user."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    email: str | None
    invited: bool
    group_created: bool
    source_created: bool
    group_api_id: str | None
    source_api_id: str | None
    has_credential: bool


class StatusListResponse(BaseModel):
    data: list[UserStatusResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class OperationLogResponse(BaseModel):
    """Schema for an operation log entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int | None
    operation_type: str
    user_id: str
    environment: Environment
    status: str
    error_message: str | None
    details: dict[str, Any] | None
    created_at: datetime


class OperationLogListResponse(BaseModel):
    data: list[OperationLogResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
