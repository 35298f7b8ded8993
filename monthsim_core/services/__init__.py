from monthsim_core.services.catalog import build_custom_scenario, get_scenario_by_id  # noqa: F401
from monthsim_core.services.engine import run_month  # noqa: F401
from monthsim_core.services.history import history_frame, summarize_history  # noqa: F401
from monthsim_core.services.runner import ScenarioSession, collect_notices, run_scenario  # noqa: F401

__all__ = [
    "run_month",
    "run_scenario",
    "ScenarioSession",
    "collect_notices",
    "get_scenario_by_id",
    "build_custom_scenario",
    "history_frame",
    "summarize_history",
]
