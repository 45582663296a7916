"""Failure handling and recovery tests"""

import asyncio

import pytest

from discovery.core.errors import SourceUnavailableError
from discovery.schemas.query import SourceQuery
from discovery.sources.runner import SourceRunner
from discovery.tests.factories import FakeSource, cf_items, mr_items


class TestFailureHandling:
    """Test all-settled fan-out over registry adapters"""

    @pytest.mark.asyncio
    async def test_source_fetch_failure(self):
        """Test a failing adapter raises on its own"""
        source = FakeSource("curseforge", error=SourceUnavailableError("curseforge", "HTTP 500"))
        with pytest.raises(SourceUnavailableError):
            await source.search(SourceQuery())

    @pytest.mark.asyncio
    async def test_runner_with_failing_source(self):
        """Test runner continues with other sources after failure"""
        failing = FakeSource("curseforge", error=SourceUnavailableError("curseforge", "HTTP 500"))
        valid = FakeSource("modrinth", items=mr_items(3))

        runner = SourceRunner([failing, valid])
        fan_out = await runner.search({"curseforge": SourceQuery(), "modrinth": SourceQuery()})

        assert fan_out.failed_sources == ["curseforge"]
        assert fan_out.value_or("curseforge", None) is None
        assert len(fan_out.value_or("modrinth", None).items) == 3
        assert isinstance(fan_out.outcomes["curseforge"].error, SourceUnavailableError)

    @pytest.mark.asyncio
    async def test_slow_source_does_not_block_fast_failure(self):
        """Test a failure does not cancel a slower sibling"""
        failing = FakeSource("curseforge", error=SourceUnavailableError("curseforge", "timeout"))
        slow = FakeSource("modrinth", items=mr_items(2), delay=0.02)

        fan_out = await SourceRunner([failing, slow]).search(
            {"curseforge": SourceQuery(), "modrinth": SourceQuery()}
        )

        assert fan_out.outcomes["modrinth"].ok
        assert fan_out.value_or("modrinth", None).total == 2

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_contained(self):
        """Test non-taxonomy errors are recorded rather than raised"""
        broken = FakeSource("modrinth", error=RuntimeError("bug in adapter"))
        valid = FakeSource("curseforge", items=cf_items(1))

        fan_out = await SourceRunner([valid, broken]).search(
            {"curseforge": SourceQuery(), "modrinth": SourceQuery()}
        )

        assert fan_out.failed_sources == ["modrinth"]
        assert fan_out.value_or("curseforge", None).total == 1

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        """Test a cancelled adapter call cancels the fan-out instead of being recorded"""
        cancelled = FakeSource("modrinth", error=asyncio.CancelledError())

        with pytest.raises(asyncio.CancelledError):
            await SourceRunner([cancelled]).gather(lambda source: source.search(SourceQuery()))

    @pytest.mark.asyncio
    async def test_partial_failure_recovery(self):
        """Test system recovers once the failing source comes back"""
        flaky = FakeSource("curseforge", items=cf_items(2), error=SourceUnavailableError("curseforge", "HTTP 503"))
        runner = SourceRunner([flaky])

        # First run fails
        first = await runner.gather(lambda source: source.search(SourceQuery()))
        assert first.failed_sources == ["curseforge"]

        # Second run should succeed
        flaky.error = None
        second = await runner.gather(lambda source: source.search(SourceQuery()))
        assert second.failed_sources == []
        assert second.value_or("curseforge", None).total == 2
