from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import FrozenSet, Optional, Union

DateLike = Union[date, datetime, str, None]


class TransactionType(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"


class Frequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class InsightType(str, Enum):
    BUDGET_ALERT = "budget_alert"
    BUDGET_FORECAST = "budget_forecast"
    PATTERN_TEMPORAL = "pattern_temporal"
    GOAL_PROGRESS = "goal_progress"
    RECURRING_OPTIMIZATION = "recurring_optimization"
    CREDIT_REMINDER = "credit_reminder"
    FINANCIAL_HEALTH = "financial_health"
    WASTE_DETECTION = "waste_detection"
    MOTIVATIONAL = "motivational"
    CONTEXTUAL = "contextual"


class ActionKind(str, Enum):
    NAVIGATE = "navigate"


class Screen(str, Enum):
    STATS = "stats"
    SHARED = "shared"
    RECURRING = "recurring"


@dataclass(frozen=True)
class Transaction:
    id: str
    type: TransactionType
    amount: float               # always >= 0, sign comes from type
    category_id: Optional[str]
    date: DateLike              # unparseable values count as missing
    tags: Optional[FrozenSet[str]] = None


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    budget: Optional[float] = None  # monthly cap, None = unset


@dataclass(frozen=True)
class Goal:
    id: str
    name: str
    target_amount: float
    current_amount: float = 0.0
    target_date: DateLike = None
    is_completed: bool = False
    completed_at: DateLike = None


@dataclass(frozen=True)
class RecurringItem:
    id: str
    amount: float
    frequency: Frequency
    next_date: DateLike
    name: str = ""
    category_id: Optional[str] = None
    is_active: bool = True


# Money owed to the user by someone who shared an expense
@dataclass(frozen=True)
class SharedExpenseParticipant:
    amount_owed: float
    is_paid: bool
    created_at: DateLike
    name: Optional[str] = None


@dataclass(frozen=True)
class InsightAction:
    label: str
    target_screen: Screen
    kind: ActionKind = ActionKind.NAVIGATE


@dataclass(frozen=True)
class InsightCandidate:
    type: InsightType
    message: str
    priority: Priority
    action: Optional[InsightAction] = None
    category_id: Optional[str] = None


@dataclass(frozen=True)
class Insight:
    id: str
    type: InsightType
    message: str
    priority: Priority
    created_at: datetime
    is_read: bool = False
    action: Optional[InsightAction] = None
    category_id: Optional[str] = None


@dataclass(frozen=True)
class InsightInputs:
    """Everything the engine reads for one run, as fetched by the caller."""
    transactions: tuple = ()
    categories: tuple = ()
    goals: tuple = ()
    monthly_budget: float = 0.0
    recurring_items: tuple = ()
    shared_participants: tuple = ()
