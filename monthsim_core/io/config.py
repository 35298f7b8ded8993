from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from monthsim_core.domain.models import (
    AllocationPlan,
    DebtAccount,
    FixedExpenseItem,
    InvestmentAccount,
    MinimumRule,
    MonthResult,
    ScenarioChoice,
    ScenarioConfig,
    ScenarioState,
    VariableCategory,
)

logger = logging.getLogger(__name__)

_MISSING = object()


def _pick(data: Dict[str, Any], *keys: str, default: Any = _MISSING, where: str = "") -> Any:
    # snake_case first, then the camelCase spelling used by scenario authoring tools
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    if default is _MISSING:
        raise ValueError(f"Missing key '{keys[0]}' in {where or 'object'}")
    return default


def _category_from_dict(data: Dict[str, Any]) -> VariableCategory:
    return VariableCategory(
        id=str(_pick(data, "id", where="variable category")),
        name=str(data.get("name", "")),
        planned=float(data.get("planned", 0.0)),
    )


def _fixed_from_dict(data: Dict[str, Any]) -> FixedExpenseItem:
    return FixedExpenseItem(
        id=str(_pick(data, "id", where="fixed expense")),
        name=str(data.get("name", "")),
        base_monthly=float(_pick(data, "base_monthly", "baseMonthly", default=0.0)),
        arrears=float(data.get("arrears") or 0.0),
    )


def _debt_from_dict(data: Dict[str, Any]) -> DebtAccount:
    rule = _pick(data, "minimum_rule", "minimumRule", default=None)
    return DebtAccount(
        id=str(_pick(data, "id", where="debt")),
        name=str(data.get("name", "")),
        balance=float(data.get("balance", 0.0)),
        apr=float(data.get("apr", 0.0)),
        minimum_rule=MinimumRule(base=float(rule.get("base", 25.0))) if rule else None,
    )


def _investment_from_dict(data: Dict[str, Any]) -> InvestmentAccount:
    return InvestmentAccount(
        id=str(_pick(data, "id", where="investment")),
        name=str(data.get("name", "")),
        balance=float(data.get("balance", 0.0)),
        apr=float(data.get("apr", 0.0)),
    )


def state_from_dict(data: Dict[str, Any]) -> ScenarioState:
    return ScenarioState(
        month=int(data.get("month", 0)),
        cash=float(_pick(data, "cash", where="state")),
        income=float(_pick(data, "income", where="state")),
        variable_wants=[_category_from_dict(c) for c in _pick(data, "variable_wants", "variableWants", default=[])],
        variable_needs=[_category_from_dict(c) for c in _pick(data, "variable_needs", "variableNeeds", default=[])],
        fixed_expenses=[_fixed_from_dict(f) for f in _pick(data, "fixed_expenses", "fixedExpenses", default=[])],
        debts=[_debt_from_dict(d) for d in data.get("debts") or []],
        investments=[_investment_from_dict(i) for i in data.get("investments") or []],
    )


def _plan_from_dict(data: Optional[Dict[str, Any]]) -> Optional[AllocationPlan]:
    if data is None:
        return None
    return AllocationPlan(
        priority=[str(i) for i in data.get("priority") or []],
        amounts={str(k): float(v) for k, v in (data.get("amounts") or {}).items() if v is not None},
    )


def choice_from_dict(data: Optional[Dict[str, Any]]) -> ScenarioChoice:
    data = data or {}
    wants = _pick(data, "variable_wants_adjust", "variableWantsAdjust", default=None)
    needs = _pick(data, "variable_needs_adjust", "variableNeedsAdjust", default=None)
    return ScenarioChoice(
        variable_wants_adjust={str(k): float(v) for k, v in wants.items() if v is not None} if wants else None,
        variable_needs_adjust={str(k): float(v) for k, v in needs.items() if v is not None} if needs else None,
        debt_plan=_plan_from_dict(_pick(data, "debt_plan", "debtPlan", default=None)),
        invest_plan=_plan_from_dict(_pick(data, "invest_plan", "investPlan", default=None)),
    )


def scenario_config_from_dict(data: Dict[str, Any]) -> ScenarioConfig:
    return ScenarioConfig(
        id=str(_pick(data, "id", where="scenario")),
        title=str(data.get("title", "")),
        description=str(data.get("description", "")),
        total_months=int(_pick(data, "total_months", "totalMonths", default=12)),
        initial_state=state_from_dict(_pick(data, "initial_state", "initialState", where="scenario")),
    )


def load_scenario_config(path: str | Path) -> ScenarioConfig:
    config = scenario_config_from_dict(_read_json(path))
    logger.info("Loaded scenario %s (%d months) from %s", config.id, config.total_months, path)
    return config


def load_state(path: str | Path) -> ScenarioState:
    return state_from_dict(_read_json(path))


def load_choice(path: str | Path) -> ScenarioChoice:
    return choice_from_dict(_read_json(path))


def load_choice_schedule(path: str | Path) -> List[ScenarioChoice]:
    """
    A JSON list of choices (one per month), or an object with a "months" list.
    """
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("months")
    if not isinstance(data, list):
        raise ValueError(f"Choice schedule in {path} must be a list of monthly choices")
    schedule = [choice_from_dict(item) for item in data]
    logger.info("Loaded %d monthly choice(s) from %s", len(schedule), path)
    return schedule


def state_to_dict(state: ScenarioState) -> Dict[str, Any]:
    return dataclasses.asdict(state)


def result_to_dict(result: MonthResult) -> Dict[str, Any]:
    return dataclasses.asdict(result)


def scenario_config_to_dict(config: ScenarioConfig) -> Dict[str, Any]:
    return dataclasses.asdict(config)


def save_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def _read_json(path: str | Path) -> Any:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
