from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from monthsim_core.domain.models import (
    AllocationPlan,
    MonthNotices,
    MonthResult,
    ScenarioChoice,
    ScenarioConfig,
    ScenarioState,
    VariableCategory,
)
from monthsim_core.io import config as config_io
from monthsim_core.io import history as history_io
from monthsim_core.services import catalog, engine, history, runner

app = typer.Typer(help="Household month-by-month finance simulator.")

T = TypeVar("T")


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", help="Logging level: DEBUG|INFO|WARNING|ERROR"),
):
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load(loader: Callable[[Path], T], path: Path) -> T:
    try:
        return loader(path)
    except (FileNotFoundError, ValueError) as exc:  # JSONDecodeError is a ValueError
        raise typer.BadParameter(f"{path}: {exc}") from exc


def _resolve_scenario(scenario_id: Optional[str], config_path: Optional[Path]) -> ScenarioConfig:
    if config_path:
        return _load(config_io.load_scenario_config, config_path)
    found = catalog.get_scenario_by_id(scenario_id or catalog.CREDIT_CARD_SCENARIO.id)
    if found is None:
        raise typer.BadParameter(f"Unknown scenario id: {scenario_id}")
    return found


def _print_state(console: Console, state: ScenarioState) -> None:
    console.print(
        f"Month [bold]{state.month}[/bold] | Income {state.income:,.2f} | Cash {state.cash:,.2f} | "
        f"Debts {state.total_debt:,.2f} | Investments {state.total_investments:,.2f} | "
        f"Net worth [bold]{state.net_worth:,.2f}[/bold]"
    )


def _print_notices(console: Console, notices: Optional[MonthNotices]) -> None:
    if notices is None or not notices.has_any:
        return
    console.print("[bold yellow]Notices[/bold yellow]")
    for d in notices.missed_minimums:
        console.print(
            f"- [yellow]{d.name}[/yellow]: paid {d.actual_payment:,.2f}, "
            f"suggested minimum {d.suggested_minimum:,.2f}"
        )
    for f in notices.unpaid_fixed:
        console.print(f"- [red]{f.name}[/red]: {f.new_arrears:,.2f} carried into next month")


def _history_table(results: List[MonthResult]) -> Table:
    table = Table(title="Monthly results")
    for col in ("Month", "Cash", "Wants", "Needs", "Fixed paid", "Arrears", "Debt paid", "Debt bal", "Invested", "Net worth"):
        table.add_column(col, justify="right")
    df = history.history_frame(results)
    for row in df.itertuples(index=False):
        table.add_row(
            str(row.month),
            f"{row.cash:,.2f}",
            f"{row.wants_actual:,.2f}",
            f"{row.needs_actual:,.2f}",
            f"{row.fixed_paid:,.2f}",
            f"{row.arrears:,.2f}",
            f"{row.debt_payment:,.2f}",
            f"{row.debt_balance:,.2f}",
            f"{row.invest_balance:,.2f}",
            f"{row.net_worth_end:,.2f}",
        )
    return table


@app.command()
def scenarios():
    """List built-in scenarios."""
    console = Console()
    table = Table(title="Scenarios")
    table.add_column("Id", no_wrap=True)
    table.add_column("Title")
    table.add_column("Months", justify="right")
    table.add_column("Description")
    for s in catalog.SCENARIOS:
        table.add_row(s.id, s.title, str(s.total_months), s.description)
    console.print(table)


@app.command()
def step(
    state: Path = typer.Option(..., help="Scenario state JSON"),
    choice: Optional[Path] = typer.Option(None, help="Choice JSON for this month (omit for no activity)"),
    out: Optional[Path] = typer.Option(None, help="Output path for month result JSON"),
):
    """Run a single month from a state file."""
    current = _load(config_io.load_state, state)
    month_choice = _load(config_io.load_choice, choice) if choice else ScenarioChoice()
    result = engine.run_month(current, month_choice)
    payload = config_io.result_to_dict(result)
    if out:
        config_io.save_json(out, payload)
        typer.echo(f"Month result written to {out}")
    else:
        typer.echo(json.dumps(payload, indent=2))


@app.command()
def run(
    scenario: Optional[str] = typer.Option(None, help="Built-in scenario id (default: credit_card_poc)"),
    config: Optional[Path] = typer.Option(None, help="Scenario config JSON (overrides --scenario)"),
    choices: Optional[Path] = typer.Option(None, help="JSON list of monthly choices"),
    months: Optional[int] = typer.Option(None, help="Months to run (default: until the scenario horizon)"),
    out: Optional[Path] = typer.Option(None, help="Output path for results JSON"),
    csv: Optional[Path] = typer.Option(None, help="Output path for per-month history CSV"),
):
    """Fast-forward a scenario using a schedule of monthly choices."""
    scenario_config = _resolve_scenario(scenario, config)
    schedule = _load(config_io.load_choice_schedule, choices) if choices else None
    session = runner.ScenarioSession(scenario_config)
    results = session.fast_forward(schedule, months=months)

    console = Console()
    console.print(f"[bold cyan]{scenario_config.title}[/bold cyan]")
    console.print(_history_table(results))
    _print_state(console, session.state)
    summary = history.summarize_history(results)
    console.print(
        f"Interest paid {summary['total_interest']:,.2f} | Debt paid {summary['total_debt_paid']:,.2f} | "
        f"Contributed {summary['total_contributed']:,.2f} | Growth {summary['total_growth']:,.2f}"
    )
    if summary["months_with_missed_minimum"] or summary["months_with_arrears"]:
        console.print(
            f"[yellow]{summary['months_with_missed_minimum']} month(s) below suggested minimum, "
            f"{summary['months_with_arrears']} month(s) with arrears[/yellow]"
        )

    if out:
        config_io.save_json(
            out,
            {
                "scenario": scenario_config.id,
                "summary": summary,
                "months": [config_io.result_to_dict(r) for r in results],
            },
        )
        typer.echo(f"Results written to {out}")
    if csv:
        history_io.write_history_csv(results, csv)
        typer.echo(f"History written to {csv}")


def _prompt_plan(label: str, plan: AllocationPlan, names: Dict[str, str]) -> AllocationPlan:
    amounts = dict(plan.amounts)
    for account_id in plan.priority:
        amounts[account_id] = typer.prompt(
            f"  {label} {names.get(account_id, account_id)}",
            default=amounts.get(account_id, 0.0),
            type=float,
        )
    return AllocationPlan(priority=list(plan.priority), amounts=amounts)


def _prompt_adjust(console: Console, label: str, categories: Sequence[VariableCategory]) -> Dict[str, float]:
    adjust: Dict[str, float] = {}
    for c in categories:
        while True:
            raw = typer.prompt(
                f"  {label} {c.name} (planned {c.planned:,.2f}, enter a delta)",
                default="",
                show_default=False,
            )
            if not raw.strip():
                break
            try:
                adjust[c.id] = float(raw)
                break
            except ValueError:
                console.print(f"[yellow]'{raw}' is not a number; enter a delta like -50 or 25.[/yellow]")
    return adjust


@app.command()
def play(
    scenario: Optional[str] = typer.Option(None, help="Built-in scenario id (default: credit_card_poc)"),
    config: Optional[Path] = typer.Option(None, help="Scenario config JSON (overrides --scenario)"),
):
    """
    Interactive mode: choose payments month by month until the scenario ends.
    """
    console = Console()
    scenario_config = _resolve_scenario(scenario, config)
    session = runner.ScenarioSession(scenario_config)
    console.print(f"[bold cyan]{scenario_config.title}[/bold cyan]")
    console.print(scenario_config.description + "\n")

    plans = runner.default_choice(session.state)
    debt_names = {d.id: d.name for d in session.state.debts}
    invest_names = {i.id: i.name for i in session.state.investments}

    while not session.is_finished:
        _print_state(console, session.state)
        wants_adjust = _prompt_adjust(console, "Wants", session.state.variable_wants)
        needs_adjust = _prompt_adjust(console, "Needs", session.state.variable_needs)
        if plans.debt_plan.priority:
            plans.debt_plan = _prompt_plan("Pay", plans.debt_plan, debt_names)
        if plans.invest_plan.priority:
            plans.invest_plan = _prompt_plan("Invest in", plans.invest_plan, invest_names)

        # adjustments apply to this month only; plans carry forward
        session.step(
            ScenarioChoice(
                variable_wants_adjust=wants_adjust,
                variable_needs_adjust=needs_adjust,
                debt_plan=plans.debt_plan,
                invest_plan=plans.invest_plan,
            )
        )
        _print_notices(console, session.last_notices())

        if not session.is_finished and not typer.confirm("Run next month?", default=True):
            break

    console.print(_history_table(session.history))
    _print_state(console, session.state)
    console.print("\n[bold cyan]Done.[/bold cyan]\n")


if __name__ == "__main__":
    app()
