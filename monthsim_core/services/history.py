from __future__ import annotations

from typing import Dict, Iterable

import pandas as pd

from monthsim_core.domain.models import MonthResult


HISTORY_COLUMNS = [
    "month",
    "cash",
    "cash_change",
    "wants_planned",
    "wants_actual",
    "needs_planned",
    "needs_actual",
    "fixed_due",
    "fixed_paid",
    "arrears",
    "debt_interest",
    "debt_payment",
    "debt_balance",
    "missed_minimums",
    "invest_contribution",
    "invest_growth",
    "invest_balance",
    "net_worth_start",
    "net_worth_end",
    "net_worth_change",
]


def _row(result: MonthResult) -> Dict[str, float]:
    state = result.new_state
    return {
        "month": state.month,
        "cash": state.cash,
        "cash_change": result.cash_change,
        "wants_planned": result.wants_summary.planned,
        "wants_actual": result.wants_summary.actual,
        "needs_planned": result.needs_summary.planned,
        "needs_actual": result.needs_summary.actual,
        "fixed_due": sum(f.due for f in result.fixed_summaries),
        "fixed_paid": sum(f.paid for f in result.fixed_summaries),
        "arrears": sum(f.new_arrears for f in result.fixed_summaries),
        "debt_interest": sum(d.interest for d in result.debt_summaries),
        "debt_payment": sum(d.actual_payment for d in result.debt_summaries),
        "debt_balance": state.total_debt,
        "missed_minimums": sum(1 for d in result.debt_summaries if not d.met_minimum),
        "invest_contribution": sum(i.actual_contribution for i in result.investment_summaries),
        "invest_growth": sum(i.growth for i in result.investment_summaries),
        "invest_balance": state.total_investments,
        "net_worth_start": result.net_worth_start,
        "net_worth_end": result.net_worth_end,
        "net_worth_change": result.net_worth_change,
    }


def history_frame(results: Iterable[MonthResult]) -> pd.DataFrame:
    """
    One row per simulated month with per-category totals.
    """
    rows = [_row(r) for r in results]
    if not rows:
        return pd.DataFrame(columns=HISTORY_COLUMNS)
    return pd.DataFrame(rows, columns=HISTORY_COLUMNS)


def summarize_history(results: Iterable[MonthResult]) -> Dict[str, float]:
    df = history_frame(results)
    if df.empty:
        return {
            "months": 0,
            "total_interest": 0.0,
            "total_debt_paid": 0.0,
            "total_contributed": 0.0,
            "total_growth": 0.0,
            "months_with_missed_minimum": 0,
            "months_with_arrears": 0,
            "final_cash": 0.0,
            "net_worth_change": 0.0,
        }
    return {
        "months": int(len(df)),
        "total_interest": float(df["debt_interest"].sum()),
        "total_debt_paid": float(df["debt_payment"].sum()),
        "total_contributed": float(df["invest_contribution"].sum()),
        "total_growth": float(df["invest_growth"].sum()),
        "months_with_missed_minimum": int((df["missed_minimums"] > 0).sum()),
        "months_with_arrears": int((df["arrears"] > 0).sum()),
        "final_cash": float(df["cash"].iloc[-1]),
        "net_worth_change": float(df["net_worth_end"].iloc[-1] - df["net_worth_start"].iloc[0]),
    }
