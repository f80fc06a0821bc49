"""Tunable thresholds for the insight rules.

Every number a rule compares against lives here so that product tweaks do not
touch the evaluators. Values can be overridden through ``INSIGHTS_*``
environment variables or a ``.env`` file.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Rule thresholds and logging options."""

    # Budget usage, in percent of the cap
    BUDGET_SAFE_PCT: float = Field(default=70, description="Below this a budget is 'safe'")
    BUDGET_WARNING_PCT: float = Field(default=85, description="Global budget 'slow down' threshold")
    BUDGET_DANGER_PCT: float = Field(default=95, description="Global budget 'near limit' threshold")
    BUDGET_EXCEEDED_PCT: float = Field(default=100, description="Budget is exceeded at or above this")
    CATEGORY_DANGER_PCT: float = Field(default=95, description="Category budget 'almost exhausted'")

    # Spending patterns
    MONTH_CHANGE_PCT: float = Field(default=20, description="Month-over-month change worth reporting")
    WEEKEND_RATIO: float = Field(default=1.5, description="Weekend/weekday average ratio that triggers")

    # Goals
    GOAL_RISK_DAYS: int = Field(default=30, description="Days before target date a goal can be at risk")
    GOAL_RISK_PCT: float = Field(default=80, description="Progress below which a near goal is at risk")
    GOAL_ALMOST_PCT: float = Field(default=90, description="Progress from which a goal is almost done")
    CELEBRATION_DAYS: int = Field(default=7, description="How long a completed goal is celebrated")

    # Savings rate
    LOW_SAVINGS_PCT: float = Field(default=10, description="Savings rate below this is low")
    IDEAL_SAVINGS_PCT: float = Field(default=20, description="Savings rate worth congratulating")

    # Waste detection
    MICRO_EXPENSE_AMOUNT: float = Field(default=10, description="Expenses under this are micro")
    MICRO_EXPENSE_COUNT: int = Field(default=20, description="Micro-expense count that triggers")

    # Credits and recurring costs
    SIGNIFICANT_AMOUNT: float = Field(default=100, description="Totals above this get medium priority")
    STALE_CREDIT_DAYS: int = Field(default=30, description="Unpaid credits older than this are overdue")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Python log level")
    LOG_JSON: bool = Field(default=False, description="Render logs as JSON instead of console")

    model_config = SettingsConfigDict(env_prefix="INSIGHTS_", env_file=".env", extra="ignore")


def get_settings() -> Settings:
    """Factory for Settings, allows test override."""
    return Settings()
