from typing import Iterable, List

from insights.domain import InsightCandidate, Priority

PRIORITY_ORDER = {
    Priority.HIGH: 0,
    Priority.MEDIUM: 1,
    Priority.LOW: 2,
}


def rank_insights(candidates: Iterable[InsightCandidate]) -> List[InsightCandidate]:
    # sorted() is stable: equal priorities keep their emission order
    return sorted(candidates, key=lambda c: PRIORITY_ORDER[Priority(c.priority)])
