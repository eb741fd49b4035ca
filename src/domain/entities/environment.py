"""Deployment environment enumeration."""

from enum import StrEnum


class Environment(StrEnum):
    """Isolated deployment target with its own state and API endpoints."""

    DEV = "dev"
    QA = "qa"
    PROD = "prod"
