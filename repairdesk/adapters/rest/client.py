"""
Shop API Client - REST persistence for parts and repair orders.

Endpoints:
- GET/POST /parts, PUT/DELETE /parts/{id}
- GET/POST /repairs, PATCH /repairs/{id}/status, DELETE /repairs/{id}

Bodies are camelCase JSON of the domain entities. Create and update
responses echo the persisted entity; server-assigned ids win.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, RootModel, ValidationError

from repairdesk.config import ErrorCode, StorageError
from repairdesk.domains.inventory.models import Part
from repairdesk.domains.repairs.models import RepairOrder, RepairStatus

logger = logging.getLogger(__name__)

__all__ = ["ShopAPIClient"]

M = TypeVar("M", bound=BaseModel)


class _PartList(RootModel[list[Part]]):
    pass


class _RepairList(RootModel[list[RepairOrder]]):
    pass


class ShopAPIClient:
    """
    Async client for the shop REST backend.

    Example:
        >>> api = ShopAPIClient("http://localhost:8000/api")
        >>> parts = await api.list_parts()
        >>> created = await api.create_part(Part(name="Дисплей iPhone 11"))
        >>> await api.close()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize client.

        Args:
            base_url: Backend API root, e.g. "http://host/api"
            timeout: Per-request timeout in seconds
            transport: Optional transport override (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ShopAPIClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        action: str,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send a request, mapping transport and HTTP errors to StorageError."""
        write = method != "GET"
        try:
            response = await self._get_client().request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise StorageError(
                f"Failed to {action}: backend unreachable",
                {"method": method, "path": path},
            ) from e

        if response.is_error:
            logger.error(
                "%s %s returned %d: %s",
                method,
                path,
                response.status_code,
                response.text[:200],
            )
            raise StorageError(
                f"Failed to {action}",
                {"method": method, "path": path, "status": response.status_code},
                code=(
                    ErrorCode.STORAGE_WRITE_FAILED
                    if write
                    else ErrorCode.STORAGE_READ_FAILED
                ),
            )

        logger.debug("%s %s -> %d", method, path, response.status_code)
        return response

    def _decode(self, response: httpx.Response, action: str, model: type[M]) -> M:
        """Validate a response body, mapping malformed payloads to StorageError."""
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(
                "%s %s returned a malformed body: %s",
                response.request.method,
                response.request.url.path,
                response.text[:200],
            )
            raise StorageError(
                f"Failed to {action}: malformed response",
                {"status": response.status_code},
                code=ErrorCode.STORAGE_READ_FAILED,
            ) from e

    # --- Parts ---

    async def list_parts(self) -> list[Part]:
        response = await self._request("GET", "/parts", "fetch parts")
        return self._decode(response, "fetch parts", _PartList).root

    async def create_part(self, part: Part) -> Part:
        response = await self._request(
            "POST", "/parts", "create part", json=part.to_wire()
        )
        return self._decode(response, "create part", Part)

    async def update_part(self, part: Part) -> Part:
        response = await self._request(
            "PUT", f"/parts/{part.id}", "update part", json=part.to_wire()
        )
        return self._decode(response, "update part", Part)

    async def delete_part(self, part_id: str) -> None:
        await self._request("DELETE", f"/parts/{part_id}", "delete part")

    # --- Repairs ---

    async def list_repairs(self) -> list[RepairOrder]:
        response = await self._request("GET", "/repairs", "fetch repairs")
        return self._decode(response, "fetch repairs", _RepairList).root

    async def create_repair(self, order: RepairOrder) -> RepairOrder:
        response = await self._request(
            "POST", "/repairs", "create repair", json=order.to_wire()
        )
        return self._decode(response, "create repair", RepairOrder)

    async def update_repair_status(
        self, repair_id: str, status: RepairStatus
    ) -> RepairOrder | None:
        """Change a repair's status; returns the echoed order when the server sends one."""
        response = await self._request(
            "PATCH",
            f"/repairs/{repair_id}/status",
            "update repair status",
            json={"status": status.value},
        )
        if not response.content:
            return None
        return self._decode(response, "update repair status", RepairOrder)

    async def delete_repair(self, repair_id: str) -> None:
        await self._request("DELETE", f"/repairs/{repair_id}", "delete repair")
