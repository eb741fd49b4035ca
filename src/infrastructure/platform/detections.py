"""Client for the detections backend: invitations and groups."""

from typing import Any

from core.exceptions import ExternalAPIError, NotFoundError
from infrastructure.platform.http import PlatformClient


class DetectionsClient(PlatformClient):
    """Implements IInvitationGateway and IGroupGateway."""

    async def send_invitations(self, token: str, emails: list[str]) -> list[str]:
        """Invite all emails in one call.

        Emails missing from the response were already registered upstream.
        """
        response = await self._request(
            "POST",
            "/api/v1/users/invitations",
            token,
            action="send invitations",
            json={"emails": emails},
        )
        body = self._json(response, "send invitations")
        invited = body.get("invitations")
        if invited is None:
            invited = (body.get("data") or {}).get("invitations")
        if invited is None:
            invited = body.get("invitedEmails", [])
        return [str(email) for email in invited]

    async def create_group(self, token: str, definition: dict[str, Any]) -> str:
        response = await self._request(
            "POST", "/api/v1/groups", token, action="create group", json=definition
        )
        body = self._json(response, "create group")
        group_id = body.get("id") or body.get("group_id")
        if not group_id:
            raise ExternalAPIError(
                "Failed to create group: response has no id",
                status_code=response.status_code,
                response_body=body,
            )
        return str(group_id)

    async def delete_group(self, token: str, group_id: str) -> None:
        try:
            await self._request(
                "DELETE", f"/api/v1/groups/{group_id}", token, action="delete group"
            )
        except NotFoundError:
            return
