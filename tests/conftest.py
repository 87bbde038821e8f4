from __future__ import annotations

import csv
import io
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List

import httpx
import pytest
from fastapi import FastAPI, File, HTTPException, Query, UploadFile, status
from fastapi.responses import PlainTextResponse

from settings import get_settings

_COLLECTION_PATTERN = re.compile(r"docs\.(\w+)")
_QUERY_PATTERN = re.compile(r"from\s+(\w+)\s+as")


@dataclass
class FakeDatabase:
    """In-memory stand-in for the document database HTTP API."""

    name: str = "MarineResearch"
    indexes: Dict[str, dict] = field(default_factory=dict)
    documents: Dict[str, List[dict]] = field(default_factory=dict)
    operations: Dict[int, str] = field(default_factory=dict)
    failures: Dict[str, int] = field(default_factory=dict)
    calls: Dict[str, int] = field(default_factory=dict)
    stale_polls: int = 0
    operation_status: str = "Completed"
    next_id: int = 1

    def fail(self, endpoint: str, times: int) -> None:
        self.failures[endpoint] = times

    def hit(self, endpoint: str) -> None:
        self.calls[endpoint] = self.calls.get(endpoint, 0) + 1
        remaining = self.failures.get(endpoint, 0)
        if remaining > 0:
            self.failures[endpoint] = remaining - 1
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"{endpoint} temporarily unavailable",
            )

    def daily_report(self, output_collection: str) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(["@id", "Day", "Temperature", "Salinity"])
        for definition in self.indexes.values():
            if definition.get("OutputReduceToCollection") != output_collection:
                continue
            collection = _COLLECTION_PATTERN.search(definition["Maps"][0]).group(1)
            groups: Dict[str, List[dict]] = {}
            for document in self.documents.get(collection, []):
                groups.setdefault(document["Time"], []).append(document)
            for number, (day, group) in enumerate(groups.items(), start=1):
                temperature = 0.0
                salinity = 0.0
                for document in group:
                    temperature += float(document["Temperature"])
                    salinity += float(document["Salinity"])
                writer.writerow(
                    [
                        f"{output_collection}/{number}",
                        day,
                        repr(temperature / len(group)),
                        repr(salinity / len(group)),
                    ]
                )
        return buffer.getvalue()


def build_fake_app(db: FakeDatabase) -> FastAPI:
    app = FastAPI()
    prefix = f"/databases/{db.name}"

    @app.put(f"{prefix}/admin/indexes")
    async def put_indexes(payload: dict) -> dict:
        db.hit("indexes")
        for definition in payload["Indexes"]:
            db.indexes[definition["Name"]] = definition
        return {"Results": [{"Index": name} for name in db.indexes]}

    @app.get(f"{prefix}/operations/next-operation-id")
    async def next_operation_id() -> dict:
        db.hit("next-operation-id")
        operation_id = db.next_id
        db.next_id += 1
        return {"Id": operation_id, "NodeTag": "A"}

    @app.post(f"{prefix}/smuggler/import/csv")
    async def import_csv(
        operation_id: int = Query(..., alias="operationId"),
        collection: str = Query(...),
        file: UploadFile = File(...),
    ) -> dict:
        db.hit("import")
        text = (await file.read()).decode("utf-8")
        rows = list(csv.DictReader(io.StringIO(text)))
        db.documents.setdefault(collection, []).extend(rows)
        db.operations[operation_id] = "InProgress"
        return {}

    @app.get(f"{prefix}/operations/state")
    async def operation_state(operation_id: int = Query(..., alias="id")) -> dict:
        db.hit("operation-state")
        if operation_id not in db.operations:
            raise HTTPException(status_code=404, detail=f"Operation {operation_id} not found")
        current = db.operations[operation_id]
        db.operations[operation_id] = db.operation_status
        if current == "Faulted":
            return {"Status": current, "Result": {"Message": "import failed"}}
        return {"Status": current}

    @app.get(f"{prefix}/indexes/staleness")
    async def staleness(name: str = Query(...)) -> dict:
        db.hit("staleness")
        if name not in db.indexes:
            raise HTTPException(status_code=404, detail=f"Index {name} not found")
        if db.stale_polls > 0:
            db.stale_polls -= 1
            return {"IsStale": True}
        return {"IsStale": False}

    @app.get(f"{prefix}/streams/queries", response_class=PlainTextResponse)
    async def stream_query(
        query: str = Query(...), format: str = Query("json")
    ) -> PlainTextResponse:
        db.hit("stream")
        if format != "csv":
            raise HTTPException(status_code=400, detail="Only csv is supported")
        match = _QUERY_PATTERN.search(query)
        if match is None:
            raise HTTPException(status_code=400, detail="Unparseable query")
        return PlainTextResponse(db.daily_report(match.group(1)), media_type="text/csv")

    return app


class RecordingSleep:
    """Async sleep double that records the requested delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture()
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture()
def transport(fake_db: FakeDatabase) -> httpx.ASGITransport:
    return httpx.ASGITransport(app=build_fake_app(fake_db))


@pytest.fixture()
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
