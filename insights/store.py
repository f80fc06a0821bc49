"""Working set of insights shown to the user.

The store owns identity and read state. Generating insights is the engine's
job; every read-only view here works on the current list only.
"""

import uuid
from dataclasses import fields, replace
from datetime import datetime
from typing import Awaitable, Callable, Iterable, List, Optional

import structlog

from insights.domain import Insight, InsightCandidate, InsightInputs, InsightType, Priority
from insights.events import (
    INSIGHT_DISMISSED,
    INSIGHT_READ,
    INSIGHTS_REFRESH_FAILED,
    INSIGHTS_REFRESHED,
    EventBus,
)
from insights.services import InsightService

logger = structlog.get_logger(__name__)

SnapshotFetcher = Callable[[], Awaitable[InsightInputs]]


def wrap_candidate(candidate: InsightCandidate, now: datetime) -> Insight:
    values = {f.name: getattr(candidate, f.name) for f in fields(candidate)}
    return Insight(id=str(uuid.uuid4()), is_read=False, created_at=now, **values)


class InsightStore:
    def __init__(
        self,
        service: Optional[InsightService] = None,
        bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.service = service or InsightService()
        self.bus = bus or EventBus(clock=clock)
        self.clock = clock
        self.insights: List[Insight] = []
        self.is_loading = False
        self.error: Optional[str] = None
        self.last_refresh: Optional[datetime] = None

    def load(self, candidates: Iterable[InsightCandidate], now: Optional[datetime] = None) -> List[Insight]:
        """Replace the working set with freshly wrapped candidates."""
        now = now or self.clock()
        self.insights = [wrap_candidate(c, now) for c in candidates]
        self.last_refresh = now
        self.bus.publish(INSIGHTS_REFRESHED, {"count": len(self.insights)}, ts=now)
        return self.insights

    async def refresh(self, fetch_snapshot: SnapshotFetcher, now: Optional[datetime] = None) -> List[Insight]:
        """Fetch inputs from the collaborator, run the engine and load the result.

        Fetch failures are kept in ``error``; the previous insights stay.
        """
        now = now or self.clock()
        self.is_loading = True
        self.error = None
        try:
            inputs = await fetch_snapshot()
        except Exception as e:
            logger.warning("insights_refresh_failed", error=str(e))
            self.error = str(e) or "Failed to generate insights"
            self.bus.publish(INSIGHTS_REFRESH_FAILED, {"error": self.error}, ts=now)
            return self.insights
        finally:
            self.is_loading = False

        return self.load(self.service.generate(inputs, now), now)

    def mark_as_read(self, insight_id: str) -> None:
        found = False
        updated = []
        for insight in self.insights:
            if insight.id == insight_id:
                insight = replace(insight, is_read=True)
                found = True
            updated.append(insight)
        self.insights = updated
        if found:
            self.bus.publish(INSIGHT_READ, {"insight_id": insight_id}, ts=self.clock())

    def dismiss(self, insight_id: str) -> None:
        before = len(self.insights)
        self.insights = [i for i in self.insights if i.id != insight_id]
        if len(self.insights) != before:
            self.bus.publish(INSIGHT_DISMISSED, {"insight_id": insight_id}, ts=self.clock())

    def unread_count(self) -> int:
        return sum(1 for i in self.insights if not i.is_read)

    def high_priority(self) -> List[Insight]:
        return [i for i in self.insights if i.priority == Priority.HIGH]

    def by_type(self, insight_type: InsightType) -> List[Insight]:
        return [i for i in self.insights if i.type == insight_type]
