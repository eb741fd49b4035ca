"""Structured outcome of a batch workflow run."""

from dataclasses import dataclass, field
from typing import Any

from domain.entities.environment import Environment


class SkipReasons:
    """Reason strings attached to skipped targets."""

    ALREADY_EXISTED = "already existed"
    NO_CREDENTIAL = "no credential"
    NO_GROUP_DEFINITION = "no group definition"
    DUPLICATE_GROUP_NAME = "duplicate group name"
    NOTHING_TO_DELETE = "nothing to delete"


@dataclass
class BatchResult:
    """Classified targets of one workflow invocation.

    ``failed`` and ``skipped`` map target ids to the error message or reason.
    ``already_done`` holds targets the state store reported complete before
    any external call was made.
    """

    environment: Environment
    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    skipped: dict[str, str] = field(default_factory=dict)
    already_done: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, Any]:
        return {
            "environment": self.environment.value,
            "succeeded": list(self.succeeded),
            "failed": dict(self.failed),
            "skipped": dict(self.skipped),
            "already_done": list(self.already_done),
        }
