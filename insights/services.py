from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Union

import structlog

from insights.aggregates import as_reference_time, build_aggregates
from insights.config import Settings, get_settings
from insights.domain import (
    Category,
    Goal,
    InsightCandidate,
    InsightInputs,
    RecurringItem,
    SharedExpenseParticipant,
    Transaction,
)
from insights.evaluators import DEFAULT_EVALUATORS, Evaluator
from insights.ranking import rank_insights

logger = structlog.get_logger(__name__)


class InsightService:
    """Facade running injected insight rules over one snapshot of user data.

    evaluators: sequence of functions taking (aggregates, inputs, now, settings)
    and returning a list of InsightCandidate.
    """

    def __init__(self, evaluators: Sequence[Evaluator] = DEFAULT_EVALUATORS, settings: Optional[Settings] = None):
        self.evaluators = evaluators
        self.settings = settings or get_settings()

    def report(self, inputs: InsightInputs, reference_time: Union[date, datetime]) -> Dict[str, Any]:
        """Run every rule and return their outputs step by step plus the ranked result."""
        now = as_reference_time(reference_time)
        aggregates = build_aggregates(inputs.transactions, inputs.categories, now, self.settings)
        report = {
            "reference_time": now,
            "aggregates": aggregates,
            "steps": [],
            "result": [],
        }

        candidates: List[InsightCandidate] = []
        for evaluator in self.evaluators:
            name = getattr(evaluator, "__name__", str(evaluator))
            try:
                out = list(evaluator(aggregates, inputs, now, self.settings))
            except Exception:
                # a failing rule contributes nothing
                logger.exception("evaluator_failed", evaluator=name)
                out = []
            report["steps"].append({"evaluator": name, "output": out})
            candidates.extend(out)

        report["result"] = rank_insights(candidates)
        logger.debug("insights_generated", count=len(report["result"]), reference_time=now.isoformat())
        return report

    def generate(self, inputs: InsightInputs, reference_time: Union[date, datetime]) -> List[InsightCandidate]:
        return self.report(inputs, reference_time)["result"]


def generate_insights(
    transactions: Sequence[Transaction],
    categories: Sequence[Category],
    goals: Sequence[Goal],
    monthly_budget: float,
    reference_time: Union[date, datetime],
    recurring_items: Sequence[RecurringItem] = (),
    shared_participants: Sequence[SharedExpenseParticipant] = (),
    settings: Optional[Settings] = None,
) -> List[InsightCandidate]:
    """Turn one snapshot of user data into insights, most urgent first."""
    inputs = InsightInputs(
        transactions=tuple(transactions),
        categories=tuple(categories),
        goals=tuple(goals),
        monthly_budget=monthly_budget or 0.0,
        recurring_items=tuple(recurring_items),
        shared_participants=tuple(shared_participants),
    )
    return InsightService(settings=settings).generate(inputs, reference_time)
