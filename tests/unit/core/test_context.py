"""Unit tests for request context storage."""

import asyncio
import uuid

import pytest

from exams_service.core.context import RequestContext, generate_correlation_id


@pytest.mark.unit
class TestRequestContext:
    """Test correlation ID storage."""

    def test_set_get_clear(self) -> None:
        """The ID is readable until cleared."""
        assert RequestContext.get_correlation_id() is None

        RequestContext.set_correlation_id("abc")
        assert RequestContext.get_correlation_id() == "abc"

        RequestContext.clear()
        assert RequestContext.get_correlation_id() is None

    @pytest.mark.timeout(5)
    async def test_isolated_between_tasks(self) -> None:
        """Concurrent tasks each see their own ID."""

        async def handle(correlation_id: str) -> str | None:
            RequestContext.set_correlation_id(correlation_id)
            await asyncio.sleep(0)
            return RequestContext.get_correlation_id()

        results = await asyncio.gather(*(handle(f"req-{i}") for i in range(5)))

        assert results == [f"req-{i}" for i in range(5)]


@pytest.mark.unit
def test_generate_correlation_id_is_uuid4() -> None:
    """Generated IDs are distinct UUID4 strings."""
    first, second = generate_correlation_id(), generate_correlation_id()

    assert first != second
    assert uuid.UUID(first).version == 4
