from __future__ import annotations

import dataclasses
from typing import Dict, List, Optional


@dataclasses.dataclass(frozen=True)
class VariableCategory:
    id: str
    name: str
    planned: float  # planned spend per month


@dataclasses.dataclass(frozen=True)
class FixedExpenseItem:
    id: str
    name: str
    base_monthly: float
    arrears: float = 0.0  # carried unpaid balance, no interest


@dataclasses.dataclass(frozen=True)
class MinimumRule:
    base: float = 25.0


@dataclasses.dataclass(frozen=True)
class DebtAccount:
    id: str
    name: str
    balance: float
    apr: float  # annual rate, decimal
    minimum_rule: Optional[MinimumRule] = None


@dataclasses.dataclass(frozen=True)
class InvestmentAccount:
    id: str
    name: str
    balance: float
    apr: float  # expected annual return, decimal


@dataclasses.dataclass(frozen=True)
class ScenarioState:
    month: int
    cash: float
    income: float
    variable_wants: List[VariableCategory] = dataclasses.field(default_factory=list)
    variable_needs: List[VariableCategory] = dataclasses.field(default_factory=list)
    fixed_expenses: List[FixedExpenseItem] = dataclasses.field(default_factory=list)  # payment priority order
    debts: List[DebtAccount] = dataclasses.field(default_factory=list)
    investments: List[InvestmentAccount] = dataclasses.field(default_factory=list)

    @property
    def total_debt(self) -> float:
        return sum(d.balance for d in self.debts)

    @property
    def total_investments(self) -> float:
        return sum(i.balance for i in self.investments)

    @property
    def net_worth(self) -> float:
        return self.cash + self.total_investments - self.total_debt


@dataclasses.dataclass
class AllocationPlan:
    priority: List[str] = dataclasses.field(default_factory=list)  # ids funded first to last
    amounts: Dict[str, float] = dataclasses.field(default_factory=dict)

    @property
    def total_planned(self) -> float:
        return sum(v or 0.0 for v in self.amounts.values())


@dataclasses.dataclass
class ScenarioChoice:
    variable_wants_adjust: Optional[Dict[str, float]] = None  # delta to planned, by id
    variable_needs_adjust: Optional[Dict[str, float]] = None
    debt_plan: Optional[AllocationPlan] = None
    invest_plan: Optional[AllocationPlan] = None


@dataclasses.dataclass
class ExpenseSpendSummary:
    planned: float
    actual: float


@dataclasses.dataclass
class FixedExpenseSummary:
    id: str
    name: str
    due: float
    paid: float
    new_arrears: float


@dataclasses.dataclass
class DebtSummary:
    id: str
    name: str
    start_balance: float
    interest: float
    owed_this_cycle: float
    planned_payment: float
    actual_payment: float
    suggested_minimum: float  # informational only
    met_minimum: bool
    end_balance: float


@dataclasses.dataclass
class InvestmentSummary:
    id: str
    name: str
    start_balance: float
    planned_contribution: float
    actual_contribution: float
    growth: float  # from starting balance only
    end_balance: float


@dataclasses.dataclass
class MonthResult:
    new_state: ScenarioState
    cash_change: float
    wants_summary: ExpenseSpendSummary
    needs_summary: ExpenseSpendSummary
    fixed_summaries: List[FixedExpenseSummary]
    debt_summaries: List[DebtSummary]
    investment_summaries: List[InvestmentSummary]
    net_worth_start: float
    net_worth_end: float
    net_worth_change: float


@dataclasses.dataclass(frozen=True)
class ScenarioConfig:
    id: str
    title: str
    description: str
    total_months: int
    initial_state: ScenarioState


@dataclasses.dataclass
class MonthNotices:
    month: int
    missed_minimums: List[DebtSummary]
    unpaid_fixed: List[FixedExpenseSummary]

    @property
    def has_any(self) -> bool:
        return bool(self.missed_minimums or self.unpaid_fixed)


class ScenarioFinishedError(RuntimeError):
    """Raised when a session is stepped past its configured horizon."""
