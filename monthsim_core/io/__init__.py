from monthsim_core.io.history import write_history_csv  # noqa: F401
from monthsim_core.io.config import (  # noqa: F401
    load_choice,
    load_choice_schedule,
    load_scenario_config,
    load_state,
)

__all__ = ["write_history_csv", "load_choice", "load_choice_schedule", "load_scenario_config", "load_state"]
