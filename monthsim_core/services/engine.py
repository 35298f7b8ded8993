from __future__ import annotations

import dataclasses
import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from monthsim_core.domain.models import (
    AllocationPlan,
    DebtSummary,
    ExpenseSpendSummary,
    FixedExpenseSummary,
    InvestmentSummary,
    MonthResult,
    ScenarioChoice,
    ScenarioState,
    VariableCategory,
)

logger = logging.getLogger(__name__)

# Float tolerance when comparing an actual debt payment to its suggested minimum.
MINIMUM_PAYMENT_EPSILON = 0.0001
DEFAULT_MINIMUM_BASE = 25.0


def _clamp(value: Optional[float]) -> float:
    # None, NaN and negatives all collapse to zero
    if value is None or not value > 0:
        return 0.0
    return float(value)


def _resolve_plan(plan: Optional[AllocationPlan]) -> Tuple[List[str], Mapping[str, float]]:
    # a missing plan resolves to no activity
    if plan is None:
        return [], {}
    return list(plan.priority or []), plan.amounts or {}


def _spend_variable(
    categories: Sequence[VariableCategory],
    adjust: Mapping[str, float],
    cash: float,
) -> Tuple[ExpenseSpendSummary, float]:
    planned_total = 0.0
    actual_total = 0.0
    for category in categories:
        delta = adjust.get(category.id) or 0.0
        planned = _clamp(_clamp(category.planned) + delta)
        pay = min(planned, cash)
        planned_total += planned
        actual_total += pay
        cash = max(0.0, cash - pay)
    return ExpenseSpendSummary(planned=planned_total, actual=actual_total), cash


def run_month(state: ScenarioState, choice: Optional[ScenarioChoice] = None) -> MonthResult:
    """
    Advances the household by one month.

    Cash flows through a fixed waterfall: income, variable wants, variable
    needs, fixed expenses (list order), debts and investments (plan priority
    order). Every spend is capped at the cash left, so cash never drops below
    zero. Interest and growth are computed from start-of-month balances.
    The input state is never mutated.
    """
    choice = choice or ScenarioChoice()
    wants_adjust = choice.variable_wants_adjust or {}
    needs_adjust = choice.variable_needs_adjust or {}
    debt_priority, debt_amounts = _resolve_plan(choice.debt_plan)
    invest_priority, invest_amounts = _resolve_plan(choice.invest_plan)

    net_worth_start = state.net_worth
    cash = _clamp(state.cash)

    # 1) Income
    cash += _clamp(state.income)

    # 2-3) Variable spend, nothing carries over
    wants_summary, cash = _spend_variable(state.variable_wants, wants_adjust, cash)
    needs_summary, cash = _spend_variable(state.variable_needs, needs_adjust, cash)

    # 4) Fixed expenses: unpaid remainder replaces arrears
    fixed_summaries: List[FixedExpenseSummary] = []
    fixed_updated = []
    for item in state.fixed_expenses:
        due = _clamp(item.base_monthly) + _clamp(item.arrears)
        paid = min(due, cash)
        cash = max(0.0, cash - paid)
        new_arrears = due - paid
        fixed_updated.append(dataclasses.replace(item, arrears=new_arrears))
        fixed_summaries.append(
            FixedExpenseSummary(id=item.id, name=item.name, due=due, paid=paid, new_arrears=new_arrears)
        )

    # 5) Debts: interest on start balances, then priority-capped payments
    debt_start: Dict[str, float] = {}
    interest_by_id: Dict[str, float] = {}
    owed_by_id: Dict[str, float] = {}
    for debt in state.debts:
        balance = _clamp(debt.balance)
        interest = balance * (debt.apr / 12)
        debt_start[debt.id] = balance
        interest_by_id[debt.id] = interest
        owed_by_id[debt.id] = balance + interest

    paid_by_id: Dict[str, float] = {}
    for debt_id in debt_priority:
        # an id listed again pays again, but only up to what is still owed
        already_paid = paid_by_id.get(debt_id, 0.0)
        planned = _clamp(debt_amounts.get(debt_id))
        owed = _clamp(_clamp(owed_by_id.get(debt_id)) - already_paid)
        pay = min(planned, cash, owed)
        paid_by_id[debt_id] = already_paid + pay
        cash = max(0.0, cash - pay)

    debt_summaries: List[DebtSummary] = []
    debts_updated = []
    for debt in state.debts:
        interest = interest_by_id[debt.id]
        owed = owed_by_id[debt.id]
        actual = paid_by_id.get(debt.id, 0.0)
        end_balance = max(0.0, owed - actual)
        base = debt.minimum_rule.base if debt.minimum_rule is not None else DEFAULT_MINIMUM_BASE
        suggested_minimum = base + interest if end_balance > 0 else 0.0
        met_minimum = suggested_minimum == 0 or actual + MINIMUM_PAYMENT_EPSILON >= suggested_minimum
        debts_updated.append(dataclasses.replace(debt, balance=end_balance))
        debt_summaries.append(
            DebtSummary(
                id=debt.id,
                name=debt.name,
                start_balance=debt_start[debt.id],
                interest=interest,
                owed_this_cycle=owed,
                planned_payment=_clamp(debt_amounts.get(debt.id)),
                actual_payment=actual,
                suggested_minimum=suggested_minimum,
                met_minimum=met_minimum,
                end_balance=end_balance,
            )
        )

    # 6) Investments: priority-capped contributions, growth on start balance only
    contrib_by_id: Dict[str, float] = {}
    for invest_id in invest_priority:
        planned = _clamp(invest_amounts.get(invest_id))
        pay = min(planned, cash)
        contrib_by_id[invest_id] = contrib_by_id.get(invest_id, 0.0) + pay
        cash = max(0.0, cash - pay)

    investment_summaries: List[InvestmentSummary] = []
    investments_updated = []
    for account in state.investments:
        start_balance = _clamp(account.balance)
        contribution = contrib_by_id.get(account.id, 0.0)
        growth = start_balance * (account.apr / 12)
        end_balance = start_balance + contribution + growth
        investments_updated.append(dataclasses.replace(account, balance=end_balance))
        investment_summaries.append(
            InvestmentSummary(
                id=account.id,
                name=account.name,
                start_balance=start_balance,
                planned_contribution=_clamp(invest_amounts.get(account.id)),
                actual_contribution=contribution,
                growth=growth,
                end_balance=end_balance,
            )
        )

    # 7) Finalize; adjusted variable plans are one-month only and not persisted
    new_state = ScenarioState(
        month=state.month + 1,
        cash=cash,
        income=state.income,
        variable_wants=list(state.variable_wants),
        variable_needs=list(state.variable_needs),
        fixed_expenses=fixed_updated,
        debts=debts_updated,
        investments=investments_updated,
    )
    net_worth_end = new_state.net_worth

    logger.debug(
        "Month %d -> %d: cash %.2f -> %.2f, net worth %.2f -> %.2f",
        state.month,
        new_state.month,
        state.cash,
        new_state.cash,
        net_worth_start,
        net_worth_end,
    )

    return MonthResult(
        new_state=new_state,
        cash_change=new_state.cash - state.cash,
        wants_summary=wants_summary,
        needs_summary=needs_summary,
        fixed_summaries=fixed_summaries,
        debt_summaries=debt_summaries,
        investment_summaries=investment_summaries,
        net_worth_start=net_worth_start,
        net_worth_end=net_worth_end,
        net_worth_change=net_worth_end - net_worth_start,
    )
