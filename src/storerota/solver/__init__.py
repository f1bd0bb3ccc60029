# storerota/solver - Greedy daily scheduling engine
from .checks import check_coverage, check_keys, check_supervisor, verify_day
from .coverage import can_place, ensures_coverage, hour_score, shortage_gain, total_shortage
from .cycle import cell_state, cycle_cell, next_cycle, swap_cells
from .engine import build_schedule
from .fairness import FairnessState, worked_closing_shift_yesterday
from .overrides import apply_overrides
from .ranking import RANK_ORDER, CandidateRank, is_better
from .stats import PersonHours, calculate_hours, calculate_shift_stats, stats_to_dict_list

__all__ = [
    "build_schedule",
    "apply_overrides",
    "cell_state",
    "next_cycle",
    "cycle_cell",
    "swap_cells",
    "ensures_coverage",
    "hour_score",
    "shortage_gain",
    "total_shortage",
    "can_place",
    "verify_day",
    "check_supervisor",
    "check_keys",
    "check_coverage",
    "FairnessState",
    "worked_closing_shift_yesterday",
    "RANK_ORDER",
    "CandidateRank",
    "is_better",
    "calculate_shift_stats",
    "calculate_hours",
    "stats_to_dict_list",
    "PersonHours",
]
