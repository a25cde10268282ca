"""
Parcel Model
============

A parcel is a single property with annual rooftop solar supply and annual
building demand totals (kWh). Raw demand records carry placeholder values
for missing accounts, so every parcel passes through a ScrubPolicy once at
load time.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class ScrubMode(Enum):
    """How missing demand values are recognised in raw parcel records."""
    CLAMP = "clamp"        # any negative demand is missing
    SENTINEL = "sentinel"  # only demand equal to the sentinel value is missing


@dataclass(frozen=True)
class ScrubPolicy:
    """
    Load-time cleaning rule for parcel supply/demand totals.

    CLAMP: demand < 0 becomes 0.
    SENTINEL: demand == sentinel zeroes both fields; any other negative
    demand is rejected.

    In both modes a parcel left with zero demand has its supply forced to
    zero as well, so it contributes nothing to its circuit group.

    Attributes:
        mode: Scrub mode
        sentinel: Placeholder value marking missing demand (SENTINEL mode)
    """
    mode: ScrubMode = ScrubMode.CLAMP
    sentinel: float = -1.0

    def apply(self, annual_supply: float, annual_demand: float) -> Tuple[float, float]:
        """
        Return scrubbed (annual_supply, annual_demand).

        Raises:
            ValueError: supply is negative, or demand is negative and not
                the sentinel in SENTINEL mode
        """
        supply = float(annual_supply)
        demand = float(annual_demand)

        if self.mode == ScrubMode.SENTINEL:
            if demand == self.sentinel:
                return 0.0, 0.0
            if demand < 0.0:
                raise ValueError(f"annual demand {demand} is negative and not the sentinel {self.sentinel}")
        elif demand < 0.0:
            demand = 0.0

        if demand == 0.0:
            supply = 0.0
        if supply < 0.0:
            raise ValueError(f"annual supply {supply} must be non-negative")
        return supply, demand


DEFAULT_SCRUB_POLICY = ScrubPolicy()


@dataclass(frozen=True)
class Parcel:
    """
    Parcel with scrubbed annual totals.

    Attributes:
        parcel_id: Parcel identifier
        usetype: Building use category (selects the demand profile)
        circuit_group_id: Owning circuit group
        annual_supply: Annual rooftop solar supply (kWh)
        annual_demand: Annual building demand (kWh)
    """
    parcel_id: str
    usetype: str
    circuit_group_id: str
    annual_supply: float
    annual_demand: float

    def __post_init__(self):
        if self.annual_supply < 0:
            raise ValueError("annual_supply must be non-negative")
        if self.annual_demand < 0:
            raise ValueError("annual_demand must be non-negative")

    @classmethod
    def from_raw(
        cls,
        parcel_id: str,
        usetype: str,
        circuit_group_id: str,
        annual_supply: float,
        annual_demand: float,
        policy: ScrubPolicy = DEFAULT_SCRUB_POLICY,
    ) -> "Parcel":
        """Build a parcel from raw record values, applying the scrub policy."""
        supply, demand = policy.apply(annual_supply, annual_demand)
        return cls(
            parcel_id=parcel_id,
            usetype=usetype,
            circuit_group_id=circuit_group_id,
            annual_supply=supply,
            annual_demand=demand,
        )
