import copy

import pytest

from monthsim_core.domain.models import (
    AllocationPlan,
    DebtAccount,
    FixedExpenseItem,
    InvestmentAccount,
    MinimumRule,
    ScenarioChoice,
    ScenarioState,
    VariableCategory,
)
from monthsim_core.services.catalog import CREDIT_CARD_SCENARIO
from monthsim_core.services.engine import run_month


def _debt_choice(amounts, priority=None):
    return ScenarioChoice(debt_plan=AllocationPlan(priority=priority or list(amounts), amounts=amounts))


def _state(**kwargs) -> ScenarioState:
    base = dict(month=0, cash=0.0, income=0.0)
    base.update(kwargs)
    return ScenarioState(**base)


def test_credit_card_first_month_waterfall():
    state = CREDIT_CARD_SCENARIO.initial_state
    result = run_month(state, _debt_choice({"cc1": 100.0}))

    assert result.wants_summary.actual == 200.0
    assert result.needs_summary.actual == 350.0
    assert result.fixed_summaries[0].paid == 1400.0
    assert result.fixed_summaries[0].new_arrears == 0.0

    debt = result.debt_summaries[0]
    assert debt.interest == pytest.approx(58.3041667, abs=1e-6)
    assert debt.owed_this_cycle == pytest.approx(3558.3041667, abs=1e-6)
    assert debt.actual_payment == 100.0
    assert debt.end_balance == pytest.approx(3458.3041667, abs=1e-6)
    assert debt.met_minimum  # 100 >= 25 + 58.30

    inv = result.investment_summaries[0]
    assert inv.actual_contribution == 0.0
    assert inv.growth == 0.0
    assert inv.end_balance == 0.0

    assert result.new_state.cash == 1550.0
    assert result.new_state.month == 1
    assert result.cash_change == 950.0


def test_input_state_is_not_mutated():
    state = CREDIT_CARD_SCENARIO.initial_state
    before = copy.deepcopy(state)
    result = run_month(state, _debt_choice({"cc1": 400.0}))

    assert state == before
    assert result.new_state.debts is not state.debts
    assert result.new_state.fixed_expenses is not state.fixed_expenses
    assert result.new_state.variable_wants is not state.variable_wants


def test_underfunded_wants_do_not_carry_over():
    state = _state(
        cash=50.0,
        variable_wants=[
            VariableCategory(id="a", name="A", planned=40.0),
            VariableCategory(id="b", name="B", planned=40.0),
        ],
    )
    result = run_month(state, ScenarioChoice())

    assert result.wants_summary.planned == 80.0
    assert result.wants_summary.actual == 50.0
    assert result.new_state.cash == 0.0
    assert [c.planned for c in result.new_state.variable_wants] == [40.0, 40.0]


def test_adjustments_are_clamped_and_not_persisted():
    state = _state(
        cash=1000.0,
        variable_wants=[VariableCategory(id="fun", name="Fun", planned=100.0)],
        variable_needs=[VariableCategory(id="food", name="Food", planned=200.0)],
    )
    choice = ScenarioChoice(variable_wants_adjust={"fun": -500.0}, variable_needs_adjust={"food": 25.0})
    result = run_month(state, choice)

    assert result.wants_summary.planned == 0.0
    assert result.wants_summary.actual == 0.0
    assert result.needs_summary.planned == 225.0
    assert result.needs_summary.actual == 225.0
    assert result.new_state.variable_wants[0].planned == 100.0
    assert result.new_state.variable_needs[0].planned == 200.0


def test_fixed_expenses_paid_in_list_order_and_arrears_replaced():
    state = _state(
        cash=500.0,
        fixed_expenses=[
            FixedExpenseItem(id="rent", name="Rent", base_monthly=400.0, arrears=50.0),
            FixedExpenseItem(id="phone", name="Phone", base_monthly=80.0),
        ],
    )
    result = run_month(state, ScenarioChoice())

    rent, phone = result.fixed_summaries
    assert (rent.due, rent.paid, rent.new_arrears) == (450.0, 450.0, 0.0)
    assert (phone.due, phone.paid, phone.new_arrears) == (80.0, 50.0, 30.0)
    assert [f.arrears for f in result.new_state.fixed_expenses] == [0.0, 30.0]


def test_arrears_accumulate_without_interest():
    state = _state(fixed_expenses=[FixedExpenseItem(id="rent", name="Rent", base_monthly=100.0)])
    first = run_month(state, ScenarioChoice())
    second = run_month(first.new_state, ScenarioChoice())

    assert first.new_state.fixed_expenses[0].arrears == 100.0
    assert second.fixed_summaries[0].due == 200.0
    assert second.new_state.fixed_expenses[0].arrears == 200.0


def test_debt_priority_caps_against_remaining_cash():
    state = _state(
        cash=300.0,
        debts=[
            DebtAccount(id="a", name="A", balance=1000.0, apr=0.0),
            DebtAccount(id="b", name="B", balance=1000.0, apr=0.0),
        ],
    )
    result = run_month(state, _debt_choice({"a": 200.0, "b": 200.0}, priority=["b", "a"]))
    by_id = {d.id: d for d in result.debt_summaries}

    assert by_id["b"].actual_payment == 200.0
    assert by_id["a"].actual_payment == 100.0
    assert by_id["a"].planned_payment == 200.0
    assert result.new_state.cash == 0.0


def test_unlisted_and_unknown_ids_receive_nothing():
    state = _state(
        cash=1000.0,
        debts=[DebtAccount(id="a", name="A", balance=500.0, apr=0.0)],
        investments=[InvestmentAccount(id="ira", name="IRA", balance=0.0, apr=0.0)],
    )
    choice = ScenarioChoice(
        debt_plan=AllocationPlan(priority=["ghost"], amounts={"a": 100.0, "ghost": 100.0}),
        invest_plan=AllocationPlan(priority=[], amounts={"ira": 100.0}),
    )
    result = run_month(state, choice)

    assert result.debt_summaries[0].actual_payment == 0.0
    assert result.debt_summaries[0].planned_payment == 100.0
    assert result.investment_summaries[0].actual_contribution == 0.0
    assert result.new_state.cash == 1000.0


def test_repeated_priority_entry_contributes_each_time():
    state = _state(cash=1000.0, investments=[InvestmentAccount(id="ira", name="IRA", balance=0.0, apr=0.0)])
    choice = ScenarioChoice(invest_plan=AllocationPlan(priority=["ira", "ira"], amounts={"ira": 100.0}))
    result = run_month(state, choice)

    assert result.investment_summaries[0].actual_contribution == 200.0
    assert result.new_state.cash == 800.0


def test_repeated_debt_entry_stops_at_amount_owed():
    state = _state(cash=1000.0, debts=[DebtAccount(id="a", name="A", balance=150.0, apr=0.0)])
    result = run_month(state, _debt_choice({"a": 100.0}, priority=["a", "a", "a"]))
    debt = result.debt_summaries[0]

    assert debt.actual_payment == 150.0
    assert debt.end_balance == 0.0
    assert result.new_state.cash == 850.0


def test_payment_capped_at_amount_owed():
    state = _state(cash=1000.0, debts=[DebtAccount(id="a", name="A", balance=100.0, apr=0.12)])
    result = run_month(state, _debt_choice({"a": 500.0}))
    debt = result.debt_summaries[0]

    assert debt.actual_payment == pytest.approx(101.0)
    assert debt.end_balance == 0.0
    assert debt.suggested_minimum == 0.0
    assert debt.met_minimum
    assert result.new_state.cash == pytest.approx(899.0)


def test_suggested_minimum_uses_rule_base_and_tolerance():
    debt = DebtAccount(id="a", name="A", balance=1000.0, apr=0.12, minimum_rule=MinimumRule(base=40.0))
    state = _state(cash=1000.0, debts=[debt])

    just_under = run_month(state, _debt_choice({"a": 49.99995})).debt_summaries[0]
    assert just_under.suggested_minimum == pytest.approx(50.0)
    assert just_under.met_minimum

    short = run_month(state, _debt_choice({"a": 49.99})).debt_summaries[0]
    assert not short.met_minimum


def test_default_minimum_base_when_no_rule():
    state = _state(debts=[DebtAccount(id="a", name="A", balance=1000.0, apr=0.12)])
    debt = run_month(state, None).debt_summaries[0]

    assert debt.suggested_minimum == pytest.approx(35.0)
    assert not debt.met_minimum


def test_investment_growth_uses_start_balance_only():
    state = _state(cash=500.0, investments=[InvestmentAccount(id="ira", name="IRA", balance=1000.0, apr=0.12)])
    choice = ScenarioChoice(invest_plan=AllocationPlan(priority=["ira"], amounts={"ira": 200.0}))
    inv = run_month(state, choice).investment_summaries[0]

    assert inv.start_balance == 1000.0
    assert inv.actual_contribution == 200.0
    assert inv.growth == pytest.approx(10.0)
    assert inv.end_balance == pytest.approx(1210.0)


def test_investments_funded_after_debts():
    state = _state(
        cash=150.0,
        debts=[DebtAccount(id="a", name="A", balance=1000.0, apr=0.0)],
        investments=[InvestmentAccount(id="ira", name="IRA", balance=0.0, apr=0.0)],
    )
    choice = ScenarioChoice(
        debt_plan=AllocationPlan(priority=["a"], amounts={"a": 100.0}),
        invest_plan=AllocationPlan(priority=["ira"], amounts={"ira": 100.0}),
    )
    result = run_month(state, choice)

    assert result.debt_summaries[0].actual_payment == 100.0
    assert result.investment_summaries[0].actual_contribution == 50.0
    assert result.new_state.cash == 0.0


def test_empty_choice_with_no_cash_only_accrues():
    state = _state(
        month=4,
        debts=[DebtAccount(id="a", name="A", balance=1000.0, apr=0.12)],
        investments=[InvestmentAccount(id="ira", name="IRA", balance=500.0, apr=0.06)],
    )
    result = run_month(state, ScenarioChoice())

    assert result.new_state.month == 5
    assert result.new_state.cash == 0.0
    assert result.new_state.debts[0].balance == pytest.approx(1010.0)
    assert result.new_state.investments[0].balance == pytest.approx(502.5)
    assert result.wants_summary.actual == 0.0
    assert result.debt_summaries[0].actual_payment == 0.0
    assert result.investment_summaries[0].actual_contribution == 0.0


def test_negative_inputs_clamped_to_zero():
    state = _state(
        cash=-100.0,
        income=-50.0,
        variable_needs=[VariableCategory(id="food", name="Food", planned=-20.0)],
        fixed_expenses=[FixedExpenseItem(id="rent", name="Rent", base_monthly=-10.0, arrears=-5.0)],
        debts=[DebtAccount(id="a", name="A", balance=-100.0, apr=0.2)],
    )
    result = run_month(state, _debt_choice({"a": -30.0}))

    assert result.new_state.cash == 0.0
    assert result.needs_summary.planned == 0.0
    assert result.fixed_summaries[0].due == 0.0
    assert result.debt_summaries[0].start_balance == 0.0
    assert result.debt_summaries[0].planned_payment == 0.0
    assert result.new_state.debts[0].balance == 0.0


def test_net_worth_is_conserved():
    state = ScenarioState(
        month=0,
        cash=250.0,
        income=2800.0,
        variable_wants=[VariableCategory(id="fun", name="Fun", planned=300.0)],
        variable_needs=[VariableCategory(id="food", name="Food", planned=450.0)],
        fixed_expenses=[FixedExpenseItem(id="rent", name="Rent", base_monthly=1500.0, arrears=120.0)],
        debts=[
            DebtAccount(id="cc", name="Card", balance=2200.0, apr=0.24),
            DebtAccount(id="car", name="Car", balance=9000.0, apr=0.069),
        ],
        investments=[InvestmentAccount(id="ira", name="IRA", balance=4000.0, apr=0.07)],
    )
    choice = ScenarioChoice(
        variable_wants_adjust={"fun": -100.0},
        debt_plan=AllocationPlan(priority=["cc", "car"], amounts={"cc": 300.0, "car": 250.0}),
        invest_plan=AllocationPlan(priority=["ira"], amounts={"ira": 400.0}),
    )
    result = run_month(state, choice)

    interest = sum(d.interest for d in result.debt_summaries)
    growth = sum(i.growth for i in result.investment_summaries)
    spent = (
        result.wants_summary.actual
        + result.needs_summary.actual
        + sum(f.paid for f in result.fixed_summaries)
    )
    expected = state.income - spent - interest + growth

    assert result.net_worth_change == pytest.approx(expected)
    assert result.net_worth_start == pytest.approx(250.0 + 4000.0 - 11200.0)
    assert result.new_state.cash >= 0.0
    assert all(d.balance >= 0 for d in result.new_state.debts)
    assert all(f.arrears >= 0 for f in result.new_state.fixed_expenses)


def test_same_input_gives_identical_result():
    state = CREDIT_CARD_SCENARIO.initial_state
    choice = _debt_choice({"cc1": 250.0})
    assert run_month(state, choice) == run_month(state, choice)
