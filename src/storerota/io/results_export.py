"""
Results Export for Analysis
===========================
Exports a schedule to JSON for scripts and downstream tooling.
"""
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from storerota.models.constraints import EngineConfig, RequirementModel
from storerota.models.overrides import OverrideMap, overrides_to_dict
from storerota.models.person import Person
from storerota.models.schedule import ScheduleResult
from storerota.solver.stats import calculate_hours, stats_to_dict_list
from storerota.utils.logging_setup import get_logger

logger = get_logger("storerota.io.results_export")

RESULTS_DIR = Path("results")


def schedule_to_dict(
    result: ScheduleResult,
    people: List[Person],
    requirements: Optional[RequirementModel] = None,
    config: Optional[EngineConfig] = None,
    overrides: Optional[OverrideMap] = None,
) -> Dict[str, Any]:
    """
    JSON-ready representation of a schedule with per-person totals.
    """
    config = config or EngineConfig()
    hours = calculate_hours(result.days, people, overrides, config=config)
    data: Dict[str, Any] = {
        "summary": result.summary(),
        "config": config.to_dict(),
        "days": [d.to_dict() for d in result.days],
        "person_stats": stats_to_dict_list(result.shift_stats, hours),
    }
    if requirements is not None:
        data["requirements"] = requirements.to_dict()
    if overrides:
        data["overrides"] = overrides_to_dict(overrides)
    return data


def export_results(
    result: ScheduleResult,
    people: List[Person],
    requirements: Optional[RequirementModel] = None,
    config: Optional[EngineConfig] = None,
    overrides: Optional[OverrideMap] = None,
    run_name: Optional[str] = None,
    output_path: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Write the schedule to a JSON file.

    Args:
        result: Generated or recomputed schedule
        people: Full roster
        requirements: Requirement model used for the run
        config: Engine configuration used for the run
        overrides: Override map applied, if any
        run_name: Optional label stored in the metadata
        output_path: Target file; defaults to results/<timestamp>.json

    Returns:
        Path to the written file
    """
    if output_path is None:
        RESULTS_DIR.mkdir(exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = RESULTS_DIR / f"{run_name or 'rota'}_{stamp}.json"
    output_path = Path(output_path)

    data = schedule_to_dict(result, people, requirements, config, overrides)
    data["meta"] = {"timestamp": datetime.now().isoformat(), "run_name": run_name}

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)

    logger.info(f"Results exported to {output_path}")
    return output_path
