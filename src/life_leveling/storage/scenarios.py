"""Simulation scenario persistence."""

import fcntl
import json
import os
import tempfile
from collections.abc import Callable
from pathlib import Path

from life_leveling.models.simulation import SimulationScenario

SCENARIOS_FILENAME = "scenarios.json"


def _read_all(scenarios_dir: Path) -> dict:
    path = scenarios_dir / SCENARIOS_FILENAME
    if not path.exists():
        return {"scenarios": []}
    return json.loads(path.read_text(encoding="utf-8"))


def _write_all(scenarios_dir: Path, data: dict) -> None:
    with tempfile.NamedTemporaryFile(
        "w", dir=scenarios_dir, delete=False, suffix=".tmp", encoding="utf-8"
    ) as tmp:
        json.dump(data, tmp, indent=2)
    os.replace(tmp.name, scenarios_dir / SCENARIOS_FILENAME)


def _locked_update(scenarios_dir: Path, mutate: Callable[[dict], None]) -> None:
    scenarios_dir.mkdir(parents=True, exist_ok=True)
    lock_path = scenarios_dir / (SCENARIOS_FILENAME + ".lock")
    with open(lock_path, "w") as lock_file:
        fcntl.flock(lock_file, fcntl.LOCK_EX)
        data = _read_all(scenarios_dir)
        mutate(data)
        _write_all(scenarios_dir, data)


def append_scenario(scenarios_dir: Path, scenario: SimulationScenario) -> None:
    """Append a scenario to scenarios.json."""
    entry = scenario.model_dump(mode="json", by_alias=True)
    _locked_update(scenarios_dir, lambda data: data["scenarios"].append(entry))


def read_scenarios(scenarios_dir: Path, user_id: str) -> list[SimulationScenario]:
    """A user's scenarios, newest first. Empty if none are stored."""
    scenarios = [
        SimulationScenario.model_validate(entry)
        for entry in _read_all(scenarios_dir)["scenarios"]
        if entry.get("userId") == user_id
    ]
    return sorted(scenarios, key=lambda s: s.created_at, reverse=True)


def _matches(entry: dict, scenario_id: str, user_id: str | None) -> bool:
    return entry.get("id") == scenario_id and (user_id is None or entry.get("userId") == user_id)


def get_scenario(
    scenarios_dir: Path, scenario_id: str, user_id: str | None = None
) -> SimulationScenario | None:
    """Look up a scenario, optionally only among one user's scenarios."""
    for entry in _read_all(scenarios_dir)["scenarios"]:
        if _matches(entry, scenario_id, user_id):
            return SimulationScenario.model_validate(entry)
    return None


def mark_converted_to_goals(
    scenarios_dir: Path, scenario_id: str, user_id: str | None = None
) -> None:
    """Set the one-way converted flag.

    Raises:
        KeyError: If no scenario has this id (for this user, when given).
        ValueError: If the scenario was already converted.
    """
    def mutate(data: dict) -> None:
        for entry in data["scenarios"]:
            if _matches(entry, scenario_id, user_id):
                if entry.get("isConvertedToGoals"):
                    raise ValueError(f"Scenario {scenario_id} already converted to goals")
                entry["isConvertedToGoals"] = True
                return
        raise KeyError(scenario_id)

    _locked_update(scenarios_dir, mutate)


def remove_scenario(scenarios_dir: Path, scenario_id: str, user_id: str | None = None) -> None:
    """Delete a scenario.

    Raises:
        KeyError: If no scenario has this id (for this user, when given).
    """
    def mutate(data: dict) -> None:
        kept = [e for e in data["scenarios"] if not _matches(e, scenario_id, user_id)]
        if len(kept) == len(data["scenarios"]):
            raise KeyError(scenario_id)
        data["scenarios"] = kept

    _locked_update(scenarios_dir, mutate)
