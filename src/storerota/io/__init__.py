# storerota/io - Input/output handling
from .csv_loader import load_marks, load_team, save_marks, save_team, split_by_role, team_to_dataframe
from .results_export import export_results, schedule_to_dict

__all__ = [
    "load_team",
    "load_marks",
    "save_team",
    "save_marks",
    "split_by_role",
    "team_to_dataframe",
    "schedule_to_dict",
    "export_results",
]
