from __future__ import annotations

from pathlib import Path
from typing import Iterable

from monthsim_core.domain.models import MonthResult
from monthsim_core.services.history import history_frame


def write_history_csv(results: Iterable[MonthResult], csv_path: str | Path) -> Path:
    path = Path(csv_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    history_frame(results).to_csv(path, index=False)
    return path
