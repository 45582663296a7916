"""Concurrent fan-out/fan-in over registry adapters."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from discovery.core.logging import get_logger
from .base import BaseSource, SearchPage

log = get_logger("sources.runner")


@dataclass
class SourceOutcome:
    """Settled result of one branch: either a value or the error that replaced it."""

    source: str
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class FanOutResult:
    outcomes: Dict[str, SourceOutcome] = field(default_factory=dict)

    @property
    def failed_sources(self) -> List[str]:
        return [name for name, o in self.outcomes.items() if not o.ok]

    def value_or(self, source: str, default: Any) -> Any:
        outcome = self.outcomes.get(source)
        if outcome is None or not outcome.ok:
            return default
        return outcome.value


class SourceRunner:
    """Runs one call per adapter concurrently with all-settled semantics.

    A failing branch never cancels or rejects the others; its error is logged
    and recorded on its outcome.
    """

    def __init__(self, sources: List[BaseSource]):
        self.sources = sources

    async def gather(self, call: Callable[[BaseSource], Awaitable[Any]]) -> FanOutResult:
        results = await asyncio.gather(
            *(call(source) for source in self.sources),
            return_exceptions=True,
        )

        fan_out = FanOutResult()
        for source, result in zip(self.sources, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, Exception):
                log.error(f"Source={source.name} failed: {result}")
                fan_out.outcomes[source.name] = SourceOutcome(source=source.name, error=result)
            else:
                fan_out.outcomes[source.name] = SourceOutcome(source=source.name, value=result)
        return fan_out

    async def search(self, queries: Dict[str, Any]) -> FanOutResult:
        """Search every adapter with its own sub-query (keyed by adapter name)."""

        async def _one(source: BaseSource) -> SearchPage:
            page = await source.search(queries[source.name])
            log.info(f"Source={source.name} items={len(page.items)} total={page.total}")
            return page

        return await self.gather(_one)
