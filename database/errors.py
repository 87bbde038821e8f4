from __future__ import annotations

from typing import Optional


class DatabaseError(Exception):
    """Base class for failures reported by the document database."""


class DatabaseRequestError(DatabaseError):
    """The database answered with a non-success HTTP status."""

    def __init__(self, status_code: int, detail: Optional[str] = None) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(
            f"Request failed with status {status_code}: {detail or 'no detail provided.'}"
        )


class OperationFailedError(DatabaseError):
    def __init__(self, operation_id: int, status: str, detail: Optional[str] = None) -> None:
        self.operation_id = operation_id
        self.status = status
        message = f"Operation {operation_id} finished with status {status}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class OperationTimeoutError(DatabaseError):
    def __init__(self, operation_id: int, timeout: float) -> None:
        self.operation_id = operation_id
        super().__init__(f"Operation {operation_id} did not complete within {timeout}s.")


class IndexStaleTimeoutError(DatabaseError):
    def __init__(self, index_name: str, timeout: float) -> None:
        self.index_name = index_name
        super().__init__(f"Index {index_name!r} was still stale after {timeout}s.")
