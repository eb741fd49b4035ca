"""Load and validate ``users.json`` and ``groups.json``."""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from core.exceptions import ConfigurationError
from domain.entities.group import GroupDefinition
from domain.entities.user import ADMIN_USER_ID, User


class AdminEntry(BaseModel):
    email: str = Field(..., min_length=3)
    password: str | None = None


class UserEntry(BaseModel):
    id: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3)
    password: str | None = None

    @field_validator("id")
    @classmethod
    def normalize_id(cls, v: str) -> str:
        return v.strip().lower()


class UsersFile(BaseModel):
    admin: AdminEntry | None = None
    users: list[UserEntry] = Field(default_factory=list)


class GroupEntry(BaseModel):
    id: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1)
    description: str = ""
    group: dict[str, Any]
    source: dict[str, Any]

    @field_validator("id")
    @classmethod
    def normalize_id(cls, v: str) -> str:
        return v.strip().lower()


class GroupsFile(BaseModel):
    groups: list[GroupEntry] = Field(default_factory=list)


class ConfigCatalog:
    """Partner users and group definitions read from a config directory."""

    def __init__(self, config_dir: str | Path) -> None:
        self._config_dir = Path(config_dir)

    def _read(self, filename: str) -> Any:
        path = self._config_dir / filename
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ConfigurationError(
                f"Failed to load {filename}: file not found",
                details={"path": str(path)},
            ) from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError(
                f"Failed to load {filename}: {exc}",
                details={"path": str(path)},
            ) from exc

    def _users_file(self) -> UsersFile:
        try:
            return UsersFile.model_validate(self._read("users.json"))
        except ValidationError as exc:
            raise ConfigurationError(
                "Invalid users.json", details=exc.errors(include_url=False)
            ) from exc

    def load_users(self) -> list[User]:
        """Partner users, in file order."""
        return [
            User(id=entry.id, email=entry.email, password=entry.password)
            for entry in self._users_file().users
        ]

    def load_admin(self) -> User | None:
        admin = self._users_file().admin
        if admin is None:
            return None
        return User(id=ADMIN_USER_ID, email=admin.email, is_admin=True, password=admin.password)

    def load_groups(self) -> list[GroupDefinition]:
        try:
            groups_file = GroupsFile.model_validate(self._read("groups.json"))
        except ValidationError as exc:
            raise ConfigurationError(
                "Invalid groups.json", details=exc.errors(include_url=False)
            ) from exc
        return [
            GroupDefinition(
                id=entry.id,
                name=entry.name,
                description=entry.description,
                group=entry.group,
                source=entry.source,
            )
            for entry in groups_file.groups
        ]
