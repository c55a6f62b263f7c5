"""Stale run sweeper.

A run whose process died mid-pipeline stays in ``processing`` (analyses) or
``searching``/``analyzing`` (research) forever. The sweeper marks such records
``failed`` once they have gone without an update for the grace period.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from productflow.core.config import settings
from productflow.db.session import async_session_maker
from productflow.repositories.analysis_repository import AnalysisRepository
from productflow.repositories.company_research_repository import CompanyResearchRepository
from productflow.utils.time import utc_now

logger = logging.getLogger(__name__)

STALE_ERROR_MESSAGE = "Run did not finish before the stale-run grace period expired"
ANALYSIS_ACTIVE = ("pending", "processing")
RESEARCH_ACTIVE = ("pending", "searching", "analyzing")


@dataclass
class SweepResult:
    analyses: int = 0
    research: int = 0

    @property
    def total(self) -> int:
        return self.analyses + self.research


class StaleRunSweeper:
    """Periodically fail runs that stopped making progress."""

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker] = None,
        grace_minutes: Optional[int] = None,
        interval_seconds: Optional[float] = None,
    ) -> None:
        self.session_factory = session_factory or async_session_maker
        self.grace = timedelta(minutes=grace_minutes if grace_minutes is not None else settings.STALE_RUN_GRACE_MINUTES)
        self.interval_seconds = interval_seconds if interval_seconds is not None else settings.STALE_RUN_SWEEP_INTERVAL_SECONDS
        self._stop_event = asyncio.Event()
        self._failure = {"status": "failed", "error_message": STALE_ERROR_MESSAGE}

    def request_stop(self) -> None:
        self._stop_event.set()

    async def run_once(self, now: Optional[datetime] = None) -> SweepResult:
        cutoff = (now or utc_now()) - self.grace
        result = SweepResult()

        async with self.session_factory() as session:
            analysis_repo = AnalysisRepository(session)
            for analysis in await analysis_repo.list_stale(list(ANALYSIS_ACTIVE), cutoff):
                if await analysis_repo.transition(analysis.id, ANALYSIS_ACTIVE, self._failure):
                    result.analyses += 1

            research_repo = CompanyResearchRepository(session)
            for research in await research_repo.list_stale(list(RESEARCH_ACTIVE), cutoff):
                if await research_repo.transition_research(research.id, RESEARCH_ACTIVE, self._failure):
                    result.research += 1

            await session.commit()

        if result.total:
            logger.warning(
                "Marked %d stale analysis run(s) and %d stale research run(s) as failed",
                result.analyses,
                result.research,
            )
        return result

    async def run_forever(self) -> None:
        """Sweep until stopped, waiting ``interval_seconds`` between sweeps."""
        while not self._stop_event.is_set():
            try:
                await self.run_once()
            except Exception:  # noqa: BLE001
                logger.exception("Stale run sweep failed")

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                continue


def main() -> int:
    parser = argparse.ArgumentParser(description="Fail analysis and research runs that stopped making progress")
    parser.add_argument("--once", action="store_true", help="Sweep once and exit")
    parser.add_argument("--loop", action="store_true", help="Sweep continuously")
    parser.add_argument("--grace-minutes", type=int, default=None, help="Override STALE_RUN_GRACE_MINUTES")
    args = parser.parse_args()

    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    sweeper = StaleRunSweeper(grace_minutes=args.grace_minutes)

    if args.loop and not args.once:
        asyncio.run(sweeper.run_forever())
        return 0

    result = asyncio.run(sweeper.run_once())
    print(f"Swept analyses={result.analyses} research={result.research}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
