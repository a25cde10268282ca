"""
Circuit Group Model
===================

A circuit group owns the complete, ordered tuple of its parcels. Aggregate
fields start empty and are filled exactly once by the worker that takes the
group's index from the dispatcher.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from ..errors import DataValidationError
from .parcel import Parcel


@dataclass
class CircuitGroup:
    """
    Circuit group with its parcels and net supply results.

    Attributes:
        group_id: Circuit group identifier
        parcel_count: Declared number of parcels
        parcels: Parcels in stable load order
        hourly_net_supply: Net supply per hour (kWh), None until computed
        annual_net_supply: Annual net supply (MWh)
        max_hourly_net_supply: Peak hour net supply (MW)
    """
    group_id: str
    parcel_count: int
    parcels: Tuple[Parcel, ...] = ()
    hourly_net_supply: Optional[np.ndarray] = None
    annual_net_supply: float = 0.0
    max_hourly_net_supply: float = 0.0

    def __post_init__(self):
        self.parcels = tuple(self.parcels)
        if self.parcel_count < 0:
            raise ValueError("parcel_count must be non-negative")
        if len(self.parcels) != self.parcel_count:
            raise ValueError(
                f"circuit group {self.group_id} declares {self.parcel_count} parcels "
                f"but owns {len(self.parcels)}"
            )

    @property
    def computed(self) -> bool:
        return self.hourly_net_supply is not None


@dataclass
class CircuitGroupPool:
    """
    Indexed collection of circuit groups.

    Indices are positions in load order and are what the dispatcher hands
    out; each index belongs to exactly one worker, so groups need no locking.
    """
    groups: List[CircuitGroup] = field(default_factory=list)

    def __post_init__(self):
        self._index_by_id: Dict[str, int] = {}
        duplicates = []
        for i, group in enumerate(self.groups):
            if group.group_id in self._index_by_id:
                duplicates.append(group.group_id)
            self._index_by_id[group.group_id] = i
        if duplicates:
            raise DataValidationError(
                "circuit groups",
                [f"duplicate circuit group id '{g}'" for g in duplicates],
            )

    def __len__(self) -> int:
        return len(self.groups)

    def __getitem__(self, index: int) -> CircuitGroup:
        return self.groups[index]

    def __iter__(self) -> Iterator[CircuitGroup]:
        return iter(self.groups)

    def indices(self) -> range:
        return range(len(self.groups))

    def index_of(self, group_id: str) -> int:
        return self._index_by_id[group_id]

    @property
    def parcel_total(self) -> int:
        return sum(g.parcel_count for g in self.groups)

    def usetypes(self) -> set:
        """All usetypes appearing among parcels."""
        return {p.usetype for g in self.groups for p in g.parcels}

    @classmethod
    def build(
        cls,
        declared: Sequence[Tuple[str, int]],
        parcels: Iterable[Parcel],
    ) -> "CircuitGroupPool":
        """
        Assemble groups from declared (group_id, parcel_count) pairs and parcels.

        Parcels keep their input order within a group. Every problem found
        (duplicate id, parcel with unknown group, count mismatch) is reported
        in a single DataValidationError.
        """
        problems: List[str] = []
        members: Dict[str, List[Parcel]] = {}
        order: List[Tuple[str, int]] = []
        for group_id, count in declared:
            if group_id in members:
                problems.append(f"duplicate circuit group id '{group_id}'")
                continue
            if count < 0:
                problems.append(f"circuit group '{group_id}' has negative parcel count {count}")
            members[group_id] = []
            order.append((group_id, count))

        for parcel in parcels:
            bucket = members.get(parcel.circuit_group_id)
            if bucket is None:
                problems.append(
                    f"parcel '{parcel.parcel_id}' references unknown circuit group "
                    f"'{parcel.circuit_group_id}'"
                )
                continue
            bucket.append(parcel)

        for group_id, count in order:
            owned = len(members[group_id])
            if count >= 0 and owned != count:
                problems.append(
                    f"circuit group '{group_id}' declares {count} parcels but {owned} were loaded"
                )

        if problems:
            raise DataValidationError("circuit groups / parcels", problems)

        return cls([CircuitGroup(g, c, tuple(members[g])) for g, c in order])
