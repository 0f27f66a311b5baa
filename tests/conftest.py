from __future__ import annotations

import asyncio

import pytest

from core.models import CacheRecord, LocationScope
from core.services.interfaces import SourceError


class FakeSource:
    """In-memory record source with controllable failures and delays."""

    def __init__(self, records: list[CacheRecord] | None = None) -> None:
        self.records: list[CacheRecord] = list(records or [])
        self.list_calls = 0
        self.list_error: str | None = None
        self.delete_errors: dict[str, str] = {}
        self.delete_delays: dict[str, float] = {}
        self.delete_started: list[str] = []
        self.delete_finished: list[str] = []
        self.opened: list[LocationScope] = []
        self.open_error: str | None = None
        self.list_gate: asyncio.Event | None = None

    async def list_records(self) -> list[CacheRecord]:
        self.list_calls += 1
        if self.list_gate is not None:
            await self.list_gate.wait()
        if self.list_error is not None:
            raise SourceError(self.list_error)
        return list(self.records)

    async def delete_record(self, record_id: str) -> None:
        self.delete_started.append(record_id)
        await asyncio.sleep(self.delete_delays.get(record_id, 0))
        self.delete_finished.append(record_id)
        if record_id in self.delete_errors:
            raise SourceError(self.delete_errors[record_id])
        self.records = [r for r in self.records if r.id != record_id]

    async def open_location(self, scope: LocationScope) -> None:
        if self.open_error is not None:
            raise SourceError(self.open_error)
        self.opened.append(scope)


@pytest.fixture
def sample_records() -> list[CacheRecord]:
    return [
        CacheRecord(id="a", name="Alpha", group_key=2021, age_days=295, size_bytes=250000),
        CacheRecord(id="b", name="Bravo", group_key=2025, age_days=14, size_bytes=500000),
        CacheRecord(id="c", name="Charlie", group_key=2023, age_days=150, size_bytes=0),
    ]


@pytest.fixture
def fake_source(sample_records) -> FakeSource:
    return FakeSource(sample_records)
