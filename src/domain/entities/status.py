"""Aggregated onboarding status."""

from dataclasses import dataclass

from domain.entities.environment import Environment


@dataclass
class OnboardingStatus:
    """Progress of one user through invite, group and source in an environment.

    Missing records read as ``False``/``None``; absence is not an error.
    """

    user_id: str
    environment: Environment
    email: str | None = None
    invited: bool = False
    group_created: bool = False
    source_created: bool = False
    group_api_id: str | None = None
    source_api_id: str | None = None

    @property
    def is_complete(self) -> bool:
        """Both upstream resources exist."""
        return self.group_created and self.source_created
