"""Command-line entry point: build a roster from CSV files."""
import argparse
import json
import sys

from storerota.errors import StoreRotaError
from storerota.io.csv_loader import load_marks, load_team, split_by_role
from storerota.io.results_export import export_results, schedule_to_dict
from storerota.models.constraints import DEFAULT_HOURLY_REQUIREMENTS, EngineConfig, ScheduleMode
from storerota.models.validated import validate_requirements
from storerota.solver.engine import build_schedule
from storerota.utils.logging_setup import setup_logging
from storerota.utils.structured_logging import configure_structlog


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="storerota", description="Generate a 28-day store roster.")
    p.add_argument("--team", required=True, help="Roster CSV (id, name, role, staff_type, score, has_key)")
    p.add_argument("--marks", help="Leave marks CSV (date, id, type, hours)")
    p.add_argument("--start", required=True, help="First day, YYYY-MM-DD")
    p.add_argument("--mode", choices=[m.value for m in ScheduleMode], default=ScheduleMode.MULTI.value)
    p.add_argument("--json", action="store_true", help="Print the full schedule as JSON")
    p.add_argument("--output", help="Also write the JSON result to this file")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging on the console")
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(
        level="DEBUG" if args.verbose else "INFO",
        log_file=None,
        console_level="DEBUG" if args.verbose else "ERROR",
    )
    configure_structlog(json_output=True, stream=sys.stderr)

    try:
        people = load_team(args.team)
        if args.marks:
            load_marks(args.marks, people)
        pharmacists, clerks = split_by_role(people)
        mode = ScheduleMode(args.mode)
        config = EngineConfig()
        result = build_schedule(args.start, pharmacists, clerks, schedule_mode=mode, config=config)
    except (StoreRotaError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    requirements = validate_requirements(dict(DEFAULT_HOURLY_REQUIREMENTS), None, mode)
    if args.output:
        export_results(result, people, requirements, config, output_path=args.output)

    if args.json:
        print(json.dumps(schedule_to_dict(result, people, requirements, config), indent=2, ensure_ascii=False))
        return 0

    summary = result.summary()
    print(f"{summary['start']} .. {summary['end']}: {summary['blocks']} blocks, {summary['warnings']} warning(s)")
    for day in result.days:
        for w in day.warnings:
            print(f"  {day.date_str}  {w}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
