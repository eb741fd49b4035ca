"""Pydantic schemas for Group API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GroupDefinitionResponse(BaseModel):
    """A configured partner group and its source template."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    group: dict[str, Any]
    source: dict[str, Any]


class GroupListResponse(BaseModel):
    """Schema for list of configured groups."""

    data: list[GroupDefinitionResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
