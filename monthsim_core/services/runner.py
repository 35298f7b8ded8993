from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

from monthsim_core.domain.models import (
    AllocationPlan,
    MonthNotices,
    MonthResult,
    ScenarioChoice,
    ScenarioConfig,
    ScenarioFinishedError,
    ScenarioState,
)
from monthsim_core.services.engine import run_month

logger = logging.getLogger(__name__)

ChoiceSource = Union[None, ScenarioChoice, Sequence[Optional[ScenarioChoice]]]


def _zero_plan(ids: Sequence[str]) -> AllocationPlan:
    return AllocationPlan(priority=list(ids), amounts={i: 0.0 for i in ids})


def default_choice(state: ScenarioState) -> ScenarioChoice:
    """Every debt and investment listed in data order, nothing planned yet."""
    return ScenarioChoice(
        variable_wants_adjust={},
        variable_needs_adjust={},
        debt_plan=_zero_plan([d.id for d in state.debts]),
        invest_plan=_zero_plan([i.id for i in state.investments]),
    )


def collect_notices(result: MonthResult) -> MonthNotices:
    return MonthNotices(
        month=result.new_state.month,
        missed_minimums=[d for d in result.debt_summaries if not d.met_minimum],
        unpaid_fixed=[f for f in result.fixed_summaries if f.new_arrears > 0],
    )


class ScenarioSession:
    """
    Threads state through consecutive months of one scenario.

    The horizon (``total_months``) is enforced here, not by the engine.
    """

    def __init__(self, config: ScenarioConfig):
        self.config = config
        self.state: ScenarioState = config.initial_state
        self.history: List[MonthResult] = []

    @property
    def month(self) -> int:
        return self.state.month

    @property
    def months_remaining(self) -> int:
        return max(0, self.config.total_months - self.state.month)

    @property
    def is_finished(self) -> bool:
        return self.state.month >= self.config.total_months

    def step(self, choice: Optional[ScenarioChoice] = None) -> MonthResult:
        if self.is_finished:
            raise ScenarioFinishedError(
                f"Scenario {self.config.id} finished after {self.config.total_months} months"
            )
        result = run_month(self.state, choice)
        self.state = result.new_state
        self.history.append(result)

        notices = collect_notices(result)
        if notices.has_any:
            logger.info(
                "Month %d: %d missed minimum(s), %d unpaid fixed expense(s)",
                notices.month,
                len(notices.missed_minimums),
                len(notices.unpaid_fixed),
            )
        return result

    def fast_forward(self, choices: ChoiceSource = None, months: Optional[int] = None) -> List[MonthResult]:
        """
        Run several months in a row.

        ``choices`` may be one choice reused every month, a sequence with one
        choice per month (the run ends when it is exhausted) or None. The run
        also ends at ``months`` steps or at the scenario horizon.
        """
        limit = self.months_remaining if months is None else min(months, self.months_remaining)
        if isinstance(choices, Sequence):
            limit = min(limit, len(choices))

        results: List[MonthResult] = []
        for idx in range(limit):
            choice = choices[idx] if isinstance(choices, Sequence) else choices
            results.append(self.step(choice))
        logger.info("Ran %d month(s) of %s; now at month %d", len(results), self.config.id, self.month)
        return results

    def reset(self) -> None:
        self.state = self.config.initial_state
        self.history = []

    def last_notices(self) -> Optional[MonthNotices]:
        if not self.history:
            return None
        return collect_notices(self.history[-1])


def run_scenario(
    config: ScenarioConfig,
    choices: ChoiceSource = None,
    months: Optional[int] = None,
) -> List[MonthResult]:
    session = ScenarioSession(config)
    return session.fast_forward(choices, months=months)
