"""CSV loading and saving for roster and leave-mark data."""
from pathlib import Path
from typing import Dict, List, Tuple, Union

import pandas as pd

from storerota.errors import InvalidInputError, UnknownPersonError
from storerota.models.person import Mark, MarkType, Person, Role, StaffType
from storerota.utils.logging_setup import get_logger

logger = get_logger("storerota.io.csv_loader")

TEAM_COLUMNS = ["id", "name", "role", "staff_type", "score", "has_key"]
MARK_COLUMNS = ["date", "id", "type", "hours"]


def _safe_int(value, default: int = 0) -> int:
    """Safely convert value to int."""
    try:
        return int(float(value))
    except (ValueError, TypeError):
        return default


def _safe_float(value):
    """Float or None for blank cells."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def _safe_bool(value, default: bool = False) -> bool:
    """Safely convert value to bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y", "key")
    return default


def _read(source: Union[str, Path, pd.DataFrame]) -> pd.DataFrame:
    if isinstance(source, pd.DataFrame):
        df = source.copy()
    else:
        df = pd.read_csv(source, dtype=str)
    return df.fillna("")


def load_team(source: Union[str, Path, pd.DataFrame]) -> List[Person]:
    """
    Load roster from CSV file or DataFrame.

    Args:
        source: Path to CSV file or pandas DataFrame with columns
            id, name, role and optionally staff_type, score, has_key

    Returns:
        List of Person objects in file order

    Raises:
        InvalidInputError: missing columns, unknown role or staff type,
            duplicate ids
    """
    df = _read(source)
    missing = [c for c in ("id", "role") if c not in df.columns]
    if missing:
        raise InvalidInputError(f"Team CSV is missing column(s): {missing}")

    people = []
    seen = set()
    for idx, (_, row) in enumerate(df.iterrows()):
        pid = str(row["id"]).strip()
        if not pid:
            continue
        if pid in seen:
            raise InvalidInputError(f"Duplicate person id {pid!r} at row {idx + 1}")
        seen.add(pid)
        try:
            role = Role.from_string(row["role"])
            staff_type = StaffType(str(row.get("staff_type", "") or "general").strip().lower())
        except ValueError as exc:
            raise InvalidInputError(f"Row {idx + 1} ({pid}): {exc}") from exc
        people.append(Person(
            id=pid,
            name=str(row.get("name", "")).strip() or pid,
            role=role,
            staff_type=staff_type,
            score=max(1, _safe_int(row.get("score"), 1)),
            has_key=_safe_bool(row.get("has_key")),
        ))

    logger.info(f"Loaded {len(people)} people")
    return people


def load_marks(source: Union[str, Path, pd.DataFrame], people: List[Person]) -> List[Person]:
    """
    Attach leave marks (``date, id, type, hours``) to the given people.

    Later rows for the same (date, id) replace earlier ones. Marks are
    written onto the Person objects passed in, which are also returned.
    """
    df = _read(source)
    missing = [c for c in ("date", "id", "type") if c not in df.columns]
    if missing:
        raise InvalidInputError(f"Marks CSV is missing column(s): {missing}")

    index: Dict[str, Person] = {p.id: p for p in people}
    count = 0
    for idx, (_, row) in enumerate(df.iterrows()):
        pid = str(row["id"]).strip()
        ds = str(row["date"]).strip()
        if not pid or not ds:
            continue
        person = index.get(pid)
        if person is None:
            raise UnknownPersonError(pid)
        try:
            mark = Mark(type=MarkType(str(row["type"]).strip().upper()), hours=_safe_float(row.get("hours")))
        except ValueError as exc:
            raise InvalidInputError(f"Row {idx + 1} ({pid}, {ds}): {exc}") from exc
        person.marks[ds] = mark
        count += 1

    logger.info(f"Loaded {count} mark(s)")
    return people


def split_by_role(people: List[Person]) -> Tuple[List[Person], List[Person]]:
    """(pharmacists, clerks) preserving order."""
    return (
        [p for p in people if p.role == Role.PHARMACIST],
        [p for p in people if p.role == Role.CLERK],
    )


def save_team(people: List[Person], path: Union[str, Path]) -> None:
    """
    Save roster to CSV file (marks are not included).

    Args:
        people: List of Person objects
        path: Output path
    """
    df = team_to_dataframe(people)
    if df.empty:
        df = pd.DataFrame(columns=TEAM_COLUMNS)
    else:
        df["has_key"] = df["has_key"].astype(int)
    df.to_csv(path, index=False)


def save_marks(people: List[Person], path: Union[str, Path]) -> None:
    rows = [
        {"date": ds, "id": p.id, "type": m.type.value, "hours": m.hours if m.hours is not None else ""}
        for p in people
        for ds, m in sorted(p.marks.items())
        if m.type != MarkType.NONE
    ]
    pd.DataFrame(rows, columns=MARK_COLUMNS).to_csv(path, index=False)


def team_to_dataframe(people: List[Person]) -> pd.DataFrame:
    """Convert roster to DataFrame for display."""
    if not people:
        return pd.DataFrame(columns=TEAM_COLUMNS)
    return pd.DataFrame([{k: v for k, v in p.to_dict().items() if k in TEAM_COLUMNS} for p in people], columns=TEAM_COLUMNS)
