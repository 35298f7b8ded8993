from __future__ import annotations

import time
from typing import Iterable, List, Optional, Tuple

from monthsim_core.domain.models import (
    DebtAccount,
    FixedExpenseItem,
    InvestmentAccount,
    MinimumRule,
    ScenarioConfig,
    ScenarioState,
    VariableCategory,
)


CREDIT_CARD_SCENARIO = ScenarioConfig(
    id="credit_card_poc",
    title="First Job, First Credit Card",
    description="You're 24, earning a steady income, with a single credit card balance and a simple goal.",
    total_months=12,
    initial_state=ScenarioState(
        month=0,
        cash=600.0,
        income=3000.0,
        variable_wants=[VariableCategory(id="fun", name="Fun", planned=200.0)],
        variable_needs=[VariableCategory(id="groceries", name="Groceries", planned=350.0)],
        fixed_expenses=[FixedExpenseItem(id="rent", name="Rent", base_monthly=1400.0, arrears=0.0)],
        debts=[
            DebtAccount(
                id="cc1",
                name="Credit Card",
                balance=3500.0,
                apr=0.1999,
                minimum_rule=MinimumRule(base=25.0),
            )
        ],
        investments=[InvestmentAccount(id="starter", name="Starter Index Fund", balance=0.0, apr=0.07)],
    ),
)

SCENARIOS: List[ScenarioConfig] = [
    CREDIT_CARD_SCENARIO,
]


def get_scenario_by_id(scenario_id: str) -> Optional[ScenarioConfig]:
    for scenario in SCENARIOS:
        if scenario.id == scenario_id:
            return scenario
    return None


def build_custom_scenario(
    *,
    title: str = "Custom Scenario",
    description: str = "Your personalized setup.",
    cash: float = 1000.0,
    income: float = 3000.0,
    wants: Iterable[Tuple[str, float]] = (),
    needs: Iterable[Tuple[str, float]] = (),
    fixed: Iterable[Tuple[str, float]] = (),
    debts: Iterable[Tuple[str, float, float, Optional[float]]] = (),
    investments: Iterable[Tuple[str, float, float]] = (),
    total_months: int = 12,
    scenario_id: Optional[str] = None,
) -> ScenarioConfig:
    """
    Assemble a scenario from plain (name, amount, ...) tuples.

    Ids are positional per collection (vw0, vn0, fx0, db0, iv0). Debts take
    (name, balance, apr, minimum_base); a falsy minimum_base leaves the
    default rule in place.
    """
    state = ScenarioState(
        month=0,
        cash=cash,
        income=income,
        variable_wants=[VariableCategory(id=f"vw{i}", name=n, planned=p) for i, (n, p) in enumerate(wants)],
        variable_needs=[VariableCategory(id=f"vn{i}", name=n, planned=p) for i, (n, p) in enumerate(needs)],
        fixed_expenses=[
            FixedExpenseItem(id=f"fx{i}", name=n, base_monthly=b, arrears=0.0) for i, (n, b) in enumerate(fixed)
        ],
        debts=[
            DebtAccount(
                id=f"db{i}",
                name=n,
                balance=bal,
                apr=apr,
                minimum_rule=MinimumRule(base=base) if base else None,
            )
            for i, (n, bal, apr, base) in enumerate(debts)
        ],
        investments=[
            InvestmentAccount(id=f"iv{i}", name=n, balance=bal, apr=apr) for i, (n, bal, apr) in enumerate(investments)
        ],
    )
    return ScenarioConfig(
        id=scenario_id or f"custom-{int(time.time() * 1000)}",
        title=title,
        description=description,
        total_months=total_months,
        initial_state=state,
    )
