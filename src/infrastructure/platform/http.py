"""Shared httpx plumbing for the platform API clients."""

from typing import Any

import httpx
import structlog

from core.exceptions import ConflictError, ExternalAPIError, ExternalTimeoutError, NotFoundError

logger = structlog.get_logger()

# Body fragments some endpoints use to report duplicates on a 400/422
_DUPLICATE_MARKERS = ("already exists", "duplicate")


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class PlatformClient:
    """Bearer-authenticated JSON client for one platform service.

    Every failure is raised as an ``ExternalAPIError`` subclass carrying
    the upstream status and body, so workflows never see httpx types.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "PlatformClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        token: str,
        action: str,
        json: Any | None = None,
    ) -> httpx.Response:
        """Issue a request and map transport and status failures.

        Args:
            action: Human-readable verb phrase used in error messages,
                e.g. ``"create group"``.
        """
        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.TimeoutException as exc:
            logger.warning("platform_request_timeout", method=method, path=path)
            raise ExternalTimeoutError(f"Failed to {action}: request timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("platform_request_error", method=method, path=path, error=str(exc))
            raise ExternalAPIError(f"Failed to {action}: {exc}") from exc

        if response.is_success:
            return response

        body = _response_body(response)
        message = f"Failed to {action}: {response.status_code} - {body}"
        logger.warning(
            "platform_request_failed",
            method=method,
            path=path,
            status_code=response.status_code,
        )

        if response.status_code == 404:
            raise NotFoundError(message, response_body=body)
        if response.status_code == 409 or (
            response.status_code in (400, 422)
            and any(marker in str(body).lower() for marker in _DUPLICATE_MARKERS)
        ):
            raise ConflictError(message, status_code=response.status_code, response_body=body)
        raise ExternalAPIError(message, status_code=response.status_code, response_body=body)

    @staticmethod
    def _json(response: httpx.Response, action: str) -> dict[str, Any]:
        body = _response_body(response)
        if not isinstance(body, dict):
            raise ExternalAPIError(
                f"Failed to {action}: unexpected response body",
                status_code=response.status_code,
                response_body=body,
            )
        return body
