"""Client for the integrations management service: content sources."""

from typing import Any

from core.exceptions import ExternalAPIError, NotFoundError
from infrastructure.platform.http import PlatformClient


class IntegrationsClient(PlatformClient):
    """Implements ISourceGateway."""

    async def create_source(self, token: str, definition: dict[str, Any]) -> str:
        response = await self._request(
            "POST", "/api/v1/sources/generic", token, action="create source", json=definition
        )
        body = self._json(response, "create source")
        source_id = body.get("id") or body.get("source_id")
        if not source_id:
            raise ExternalAPIError(
                "Failed to create source: response has no id",
                status_code=response.status_code,
                response_body=body,
            )
        return str(source_id)

    async def delete_source(self, token: str, source_id: str) -> None:
        try:
            await self._request(
                "DELETE", f"/api/v1/sources/{source_id}", token, action="delete source"
            )
        except NotFoundError:
            return
