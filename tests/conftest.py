"""
Pytest configuration for the person worker.

Provides in-memory stand-ins for the Redis queue and the persons table so the
consumer loop can be exercised without external services.
"""

from typing import Optional

import pytest

from utils.schemas import PersonRecord

ADA_PAYLOAD = (
    b'{"FirstName":"Ada","LastName":"Lovelace","Address":"London",'
    b'"CreatedAt":"2024-01-01T00:00:00Z"}'
)


class FakeQueue:
    """List-backed queue that pops from the tail like RPOP."""

    def __init__(self, items: Optional[list[bytes]] = None, error: Optional[Exception] = None) -> None:
        self.items = list(items or [])
        self.error = error
        self.pop_calls = 0

    async def pop(self) -> Optional[bytes]:
        self.pop_calls += 1
        if self.error is not None:
            raise self.error
        if not self.items:
            return None
        return self.items.pop()


class FakeGateway:
    """Records inserted persons; can be told to fail."""

    def __init__(
        self,
        schema_error: Optional[Exception] = None,
        insert_error: Optional[Exception] = None,
    ) -> None:
        self.schema_error = schema_error
        self.insert_error = insert_error
        self.schema_calls = 0
        self.rows: list[PersonRecord] = []

    async def ensure_schema(self) -> None:
        self.schema_calls += 1
        if self.schema_error is not None:
            raise self.schema_error

    async def insert_person(self, person: PersonRecord) -> None:
        if self.insert_error is not None:
            raise self.insert_error
        self.rows.append(person)


@pytest.fixture
def fake_queue() -> FakeQueue:
    return FakeQueue()


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()
