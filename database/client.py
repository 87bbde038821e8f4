"""Async HTTP client for the document database."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from database.errors import (
    DatabaseRequestError,
    IndexStaleTimeoutError,
    OperationFailedError,
    OperationTimeoutError,
)
from models.indexes import IndexDefinition

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

_PENDING_STATUSES = {"InProgress", "Queued"}


class DocumentDatabaseClient:
    """Minimal client for the database endpoints the scenario touches."""

    def __init__(
        self,
        base_url: str,
        database: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.database = database
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    async def __aenter__(self) -> DocumentDatabaseClient:
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    @property
    def _prefix(self) -> str:
        return f"/databases/{self.database}"

    async def put_index(self, definition: IndexDefinition) -> None:
        payload = {"Indexes": [definition.model_dump(by_alias=True, exclude_none=True)]}
        response = await self._client.put(f"{self._prefix}/admin/indexes", json=payload)
        self._raise_for_status(response)
        logger.debug("Index stored", extra={"index_name": definition.name})

    async def next_operation_id(self) -> int:
        response = await self._client.get(f"{self._prefix}/operations/next-operation-id")
        self._raise_for_status(response)
        operation_id = response.json().get("Id")
        if not isinstance(operation_id, int):
            raise DatabaseRequestError(
                response.status_code, "Unexpected payload when requesting an operation id."
            )
        return operation_id

    async def import_csv(self, collection: str, payload: bytes, operation_id: int) -> None:
        response = await self._client.post(
            f"{self._prefix}/smuggler/import/csv",
            params={"operationId": operation_id, "collection": collection},
            files={"file": (f"{collection}.csv", payload, "text/csv")},
        )
        self._raise_for_status(response)

    async def get_operation_state(self, operation_id: int) -> Dict[str, Any]:
        response = await self._client.get(
            f"{self._prefix}/operations/state", params={"id": operation_id}
        )
        self._raise_for_status(response)
        return response.json()

    async def wait_for_operation(
        self,
        operation_id: int,
        interval: float = 0.5,
        timeout: float = 60.0,
        sleep: Sleep = asyncio.sleep,
    ) -> Dict[str, Any]:
        """Poll an operation until it completes.

        ``timeout`` is measured in accumulated polling intervals so that an
        injected ``sleep`` keeps the wait deterministic.
        """
        waited = 0.0
        while True:
            state = await self.get_operation_state(operation_id)
            status = state.get("Status")
            if status == "Completed":
                return state
            if status not in _PENDING_STATUSES:
                result = state.get("Result")
                detail = None
                if isinstance(result, dict):
                    detail = result.get("Message") or result.get("Error")
                raise OperationFailedError(operation_id, str(status), detail)
            if waited >= timeout:
                raise OperationTimeoutError(operation_id, timeout)
            await sleep(interval)
            waited += interval

    async def is_index_stale(self, name: str) -> bool:
        response = await self._client.get(
            f"{self._prefix}/indexes/staleness", params={"name": name}
        )
        self._raise_for_status(response)
        return bool(response.json().get("IsStale", True))

    async def wait_for_non_stale_index(
        self,
        name: str,
        interval: float = 0.5,
        timeout: float = 60.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        waited = 0.0
        while await self.is_index_stale(name):
            if waited >= timeout:
                raise IndexStaleTimeoutError(name, timeout)
            await sleep(interval)
            waited += interval

    async def stream_query_csv(self, query: str) -> str:
        """Run ``query`` through the streaming endpoint and return the CSV body."""
        async with self._client.stream(
            "GET",
            f"{self._prefix}/streams/queries",
            params={"format": "csv", "query": query},
        ) as response:
            if response.is_error:
                await response.aread()
            self._raise_for_status(response)
            chunks = [chunk async for chunk in response.aiter_text()]
        return "".join(chunks)

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if not response.is_error:
            return
        detail: str | None = None
        try:
            data = response.json()
        except ValueError:
            detail = response.text.strip() or None
        else:
            if isinstance(data, dict):
                detail = data.get("Message") or data.get("detail") or data.get("Error")
        raise DatabaseRequestError(response.status_code, detail)
