"""
CSV Loaders
===========

Readers for the four input files. Each reader validates its file fully and
raises a single DataValidationError listing every problem found, so a bad
run fails before any computation starts.

File layouts (one header row each, columns are positional):
    supply profile   value
    demand profiles  <usetype>, <usetype>, ...   (one column per usetype)
    circuit groups   circuit group id, parcel count
    parcels          parcel id, usetype, circuit group id, annual supply kWh, annual demand kWh
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd
from tqdm import tqdm

from ..errors import DataValidationError, MissingProfileError
from ..grid.parcel import DEFAULT_SCRUB_POLICY, Parcel, ScrubPolicy
from ..profiles.store import HOURS_PER_YEAR, Profile, ProfileStore, SupplyProfile

logger = logging.getLogger(__name__)


def _read_table(path, min_columns: int, source: str, header="infer") -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"{source} file not found: {path}")
    try:
        df = pd.read_csv(path, header=header, dtype=str, keep_default_na=False, skipinitialspace=True)
    except pd.errors.EmptyDataError:
        raise DataValidationError(source, [f"{path} is empty"]) from None
    except pd.errors.ParserError as e:
        raise DataValidationError(source, [f"{path} is malformed: {e}"]) from None
    if df.shape[1] < min_columns:
        raise DataValidationError(
            source, [f"expected at least {min_columns} columns, found {df.shape[1]}"]
        )
    return df


def _numeric(column: pd.Series, label: str, problems: List[str]) -> np.ndarray:
    """Parse a string column as float64, reporting unparsable rows (1-based data rows)."""
    values = pd.to_numeric(column.str.strip(), errors="coerce")
    bad = values.isna() | ~np.isfinite(values.fillna(0.0))
    for row in np.flatnonzero(bad.to_numpy())[:10]:
        problems.append(f"{label}: row {row + 1} value '{column.iloc[row]}' is not a number")
    if bad.sum() > 10:
        problems.append(f"{label}: {int(bad.sum()) - 10} more unparsable values")
    return values.to_numpy(dtype=np.float64, na_value=np.nan)


def _check_curve(values: np.ndarray, label: str, hours: int, problems: List[str]) -> None:
    if values.size != hours:
        problems.append(f"{label}: expected {hours} hourly values, found {values.size}")
    negative = np.flatnonzero(values < 0)
    if negative.size:
        problems.append(f"{label}: {negative.size} negative values (first at row {negative[0] + 1})")


def load_supply_profile(path, hours: int = HOURS_PER_YEAR) -> SupplyProfile:
    """Read the shared solar supply profile from the first column."""
    source = "supply profile"
    df = _read_table(path, 1, source)
    problems: List[str] = []
    values = _numeric(df.iloc[:, 0], source, problems)
    if not problems:
        _check_curve(values, source, hours, problems)
    if problems:
        raise DataValidationError(source, problems)
    logger.info("Supply profile loaded: %d hours, total %.6f", values.size, values.sum())
    return SupplyProfile(values)


def load_demand_profiles(path, hours: int = HOURS_PER_YEAR, show_progress: bool = False) -> ProfileStore:
    """Read one demand profile per column, keyed by the column header (usetype)."""
    source = "demand profiles"
    # header read as data so duplicate usetype columns are not silently renamed
    raw = _read_table(path, 1, source, header=None)
    df = raw.iloc[1:].reset_index(drop=True)
    problems: List[str] = []
    profiles: List[Profile] = []

    usetypes = [str(c).strip() for c in raw.iloc[0]]
    duplicated = sorted({u for u in usetypes if usetypes.count(u) > 1})
    for u in duplicated:
        problems.append(f"duplicate usetype column '{u}'")

    for j in tqdm(range(df.shape[1]), desc="Demand profiles", disable=not show_progress):
        usetype = usetypes[j]
        label = f"{source} '{usetype}'"
        column_problems: List[str] = []
        values = _numeric(df.iloc[:, j], label, column_problems)
        if not column_problems:
            _check_curve(values, label, hours, column_problems)
        if column_problems:
            problems.extend(column_problems)
            continue
        total = values.sum()
        if not np.isclose(total, 1.0, rtol=1e-3, atol=1e-3):
            logger.warning("Demand profile '%s' sums to %.6f, not 1.0", usetype, total)
        profiles.append(Profile(usetype, values))

    if problems:
        raise DataValidationError(source, problems)
    store = ProfileStore(profiles)
    logger.info("Demand profiles loaded: %d usetypes", len(store))
    return store


def load_circuit_groups(path) -> List[Tuple[str, int]]:
    """Read declared (circuit group id, parcel count) pairs in file order."""
    source = "circuit groups"
    df = _read_table(path, 2, source)
    problems: List[str] = []

    ids = df.iloc[:, 0].str.strip()
    counts = _numeric(df.iloc[:, 1], f"{source} parcel count", problems)
    for row, (group_id, count) in enumerate(zip(ids, counts), start=1):
        if not group_id:
            problems.append(f"row {row}: empty circuit group id")
        if np.isfinite(count) and (count != np.floor(count) or count < 0):
            problems.append(f"row {row}: parcel count {count} is not a non-negative integer")
    if problems:
        raise DataValidationError(source, problems)

    declared = [(g, int(c)) for g, c in zip(ids, counts)]
    logger.info("Circuit groups loaded: %d groups", len(declared))
    return declared


def load_parcels(
    path,
    policy: ScrubPolicy = DEFAULT_SCRUB_POLICY,
    show_progress: bool = False,
) -> List[Parcel]:
    """Read parcels in file order, applying the scrub policy to every record."""
    source = "parcels"
    df = _read_table(path, 5, source)
    problems: List[str] = []

    supply = _numeric(df.iloc[:, 3], f"{source} annual supply", problems)
    demand = _numeric(df.iloc[:, 4], f"{source} annual demand", problems)
    if problems:
        raise DataValidationError(source, problems)

    parcel_ids = df.iloc[:, 0].str.strip()
    usetypes = df.iloc[:, 1].str.strip()
    group_ids = df.iloc[:, 2].str.strip()

    parcels: List[Parcel] = []
    rows = zip(parcel_ids, usetypes, group_ids, supply, demand)
    for row, (pid, use, gid, s, d) in enumerate(
        tqdm(rows, total=len(df), desc="Parcels", disable=not show_progress), start=1
    ):
        try:
            parcels.append(Parcel.from_raw(pid, use, gid, s, d, policy))
        except ValueError as e:
            problems.append(f"row {row} (parcel '{pid}'): {e}")

    if problems:
        raise DataValidationError(source, problems)
    logger.info("Parcels loaded: %d parcels", len(parcels))
    return parcels


def check_profile_coverage(store: ProfileStore, usetypes, supply: Optional[SupplyProfile] = None) -> None:
    """
    Cross-file checks between profiles and parcels.

    Raises:
        MissingProfileError: some parcel usetype has no demand profile
        DataValidationError: supply and demand profiles cover different hours
    """
    missing = store.missing(usetypes)
    if missing:
        raise MissingProfileError(missing)
    if supply is not None and store.hours is not None and store.hours != supply.hours:
        raise DataValidationError(
            "profiles",
            [f"supply profile has {supply.hours} hours, demand profiles have {store.hours}"],
        )
