"""
Result Writers
==============

Writes computed circuit groups to two CSV files derived from the results
path. For ``out/results.csv``:

    out/results_annualNet.csv   Circuit_Group_ID, Circuit_Group_Count,
                                Annual_Net_Supply_MWh, Annual_Max_Net_Supply_MWh
    out/results_hourlyNet.csv   Circuit_Group_ID, 1, 2, ..., <hours>

Nothing is written unless every group has been computed, and the two files
are staged as temporary files and moved into place together: a failure on
either leaves neither behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd

from ..grid.circuit_group import CircuitGroup

logger = logging.getLogger(__name__)

FLOAT_FORMAT = "%.8f"

ANNUAL_COLUMNS = [
    "Circuit_Group_ID",
    "Circuit_Group_Count",
    "Annual_Net_Supply_MWh",
    "Annual_Max_Net_Supply_MWh",
]


def output_paths(results_path) -> Tuple[Path, Path]:
    """(annual_path, hourly_path) next to the given results path, keeping its extension as given."""
    path = Path(results_path)
    annual = path.with_name(f"{path.stem}_annualNet{path.suffix}")
    hourly = path.with_name(f"{path.stem}_hourlyNet{path.suffix}")
    return annual, hourly


def annual_frame(groups: Sequence[CircuitGroup]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            (g.group_id, g.parcel_count, g.annual_net_supply, g.max_hourly_net_supply)
            for g in groups
        ],
        columns=ANNUAL_COLUMNS,
    )


def hourly_frame(groups: Sequence[CircuitGroup], hours: int) -> pd.DataFrame:
    if groups:
        values = np.vstack([g.hourly_net_supply for g in groups])
    else:
        values = np.zeros((0, hours), dtype=np.float64)
    df = pd.DataFrame(values, columns=[str(h) for h in range(1, hours + 1)])
    df.insert(0, "Circuit_Group_ID", [g.group_id for g in groups])
    return df


def write_results(groups: Sequence[CircuitGroup], results_path, hours: int) -> List[Path]:
    """
    Write annual and hourly result files.

    Args:
        groups: Computed circuit groups, in the order rows should appear
        results_path: Base results path; output names are derived from it
        hours: Number of hourly columns

    Returns:
        Paths written

    Raises:
        ValueError: a group has not been computed
        OSError: either file could not be written; no output is left behind
    """
    pending = [g.group_id for g in groups if not g.computed]
    if pending:
        raise ValueError(f"{len(pending)} circuit groups have no results (first: {pending[0]})")

    annual_path, hourly_path = output_paths(results_path)
    annual_path.parent.mkdir(parents=True, exist_ok=True)

    frames = [(annual_path, annual_frame(groups)), (hourly_path, hourly_frame(groups, hours))]
    staged: List[Path] = []
    placed: List[Path] = []
    try:
        for path, frame in frames:
            fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
            os.close(fd)
            staged.append(Path(tmp))
            frame.to_csv(tmp, index=False, float_format=FLOAT_FORMAT)
        for tmp, (path, _) in zip(staged, frames):
            os.replace(tmp, path)
            placed.append(path)
    except Exception:
        for path in staged + placed:
            path.unlink(missing_ok=True)
        raise

    logger.info("Wrote %d circuit groups to %s and %s", len(groups), annual_path, hourly_path)
    return [annual_path, hourly_path]
