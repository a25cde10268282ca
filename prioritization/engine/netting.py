"""
Net Supply Netting
==================

Vectorized supply/demand netting for one circuit group.

For P parcels over H hours:
    demand[h, i] = demand_profile(usetype_i)[h] * annual_demand_i
    supply[h, i] = supply_profile[h] * annual_supply_i      (outer product)
    net[h, i]    = supply[h, i] - demand[h, i]

    hourly_net_supply[h]  = sum_i net[h, i]                  (kWh)
    annual_net_supply     = sum_{h,i} net[h, i] * 0.001      (MWh)
    max_hourly_net_supply = max_h hourly_net_supply[h] * 0.001

Positive values are exports to the grid, negative values imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from ..grid.circuit_group import CircuitGroup
from ..profiles.store import ProfileStore, SupplyProfile

KWH_TO_MWH = 0.001


class PeakMode(Enum):
    """Which hour is reported as the group's peak."""
    EXPORT = "export"  # highest signed net supply (largest export)
    IMPORT = "import"  # lowest signed net supply (largest import)


@dataclass(frozen=True, eq=False)
class NetSupply:
    """Netting results for one circuit group."""
    hourly: np.ndarray
    annual: float
    peak: float


def demand_matrix(group: CircuitGroup, store: ProfileStore, hours: int) -> np.ndarray:
    """
    Hourly demand per parcel, shape (hours, parcel_count).

    Raises:
        MissingProfileError: a parcel usetype has no profile
    """
    if not group.parcels:
        return np.zeros((hours, 0), dtype=np.float64)
    curves = np.stack([store.lookup(p.usetype).hourly_fraction for p in group.parcels], axis=1)
    annual = np.fromiter((p.annual_demand for p in group.parcels), dtype=np.float64, count=len(group.parcels))
    return curves * annual


def supply_matrix(group: CircuitGroup, supply: SupplyProfile) -> np.ndarray:
    """Hourly supply per parcel, shape (hours, parcel_count)."""
    annual = np.fromiter((p.annual_supply for p in group.parcels), dtype=np.float64, count=len(group.parcels))
    return np.outer(supply.hourly_fraction, annual)


def net_supply(
    group: CircuitGroup,
    supply: SupplyProfile,
    store: ProfileStore,
    peak_mode: PeakMode = PeakMode.EXPORT,
) -> NetSupply:
    """Compute net supply for a group without modifying it."""
    hours = supply.hours
    net = supply_matrix(group, supply) - demand_matrix(group, store, hours)

    hourly = net.sum(axis=1)
    annual = float(net.sum()) * KWH_TO_MWH
    if peak_mode == PeakMode.IMPORT:
        peak = float(hourly.min()) * KWH_TO_MWH
    else:
        peak = float(hourly.max()) * KWH_TO_MWH
    return NetSupply(hourly=hourly, annual=annual, peak=peak)


def compute_group(
    group: CircuitGroup,
    supply: SupplyProfile,
    store: ProfileStore,
    peak_mode: PeakMode = PeakMode.EXPORT,
) -> CircuitGroup:
    """Fill the group's aggregate fields in place and return it."""
    result = net_supply(group, supply, store, peak_mode)
    result.hourly.flags.writeable = False
    group.hourly_net_supply = result.hourly
    group.annual_net_supply = result.annual
    group.max_hourly_net_supply = result.peak
    return group
