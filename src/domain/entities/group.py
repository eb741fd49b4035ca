"""Group domain entities."""

from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from domain.entities.environment import Environment

# Token in a source template that stands for the upstream group id
GROUP_ID_PLACEHOLDER = "<group_id>"


@dataclass
class GroupRecord:
    """A group created upstream for a user in one environment."""

    user_id: str
    environment: Environment
    api_id: str
    name: str
    created: bool = True
    created_at: datetime = field(default_factory=datetime.utcnow)
    id: int | None = None


@dataclass
class GroupDefinition:
    """Configured payloads for a partner's group and its content source.

    ``group`` is sent verbatim to the group API. ``source`` is a template in
    which every occurrence of ``<group_id>`` is replaced before the call.
    """

    id: str
    name: str
    group: dict[str, Any]
    source: dict[str, Any]
    description: str = ""

    @property
    def source_name(self) -> str:
        return str(self.source.get("name", self.name))

    def render_source(self, group_api_id: str) -> dict[str, Any]:
        """Return the source payload bound to a concrete group id."""
        if not group_api_id:
            raise ValueError("group_api_id is required to render a source payload")
        return _substitute(deepcopy(self.source), group_api_id)


def _substitute(value: Any, group_api_id: str) -> Any:
    if isinstance(value, str):
        return value.replace(GROUP_ID_PLACEHOLDER, group_api_id)
    if isinstance(value, dict):
        return {key: _substitute(item, group_api_id) for key, item in value.items()}
    if isinstance(value, list):
        return [_substitute(item, group_api_id) for item in value]
    return value
