from monthsim_core.domain.models import (  # noqa: F401
    AllocationPlan,
    DebtAccount,
    DebtSummary,
    ExpenseSpendSummary,
    FixedExpenseItem,
    FixedExpenseSummary,
    InvestmentAccount,
    InvestmentSummary,
    MinimumRule,
    MonthNotices,
    MonthResult,
    ScenarioChoice,
    ScenarioConfig,
    ScenarioFinishedError,
    ScenarioState,
    VariableCategory,
)

__all__ = [
    "AllocationPlan",
    "DebtAccount",
    "DebtSummary",
    "ExpenseSpendSummary",
    "FixedExpenseItem",
    "FixedExpenseSummary",
    "InvestmentAccount",
    "InvestmentSummary",
    "MinimumRule",
    "MonthNotices",
    "MonthResult",
    "ScenarioChoice",
    "ScenarioConfig",
    "ScenarioFinishedError",
    "ScenarioState",
    "VariableCategory",
]
