"""
Hourly Profiles
===============

Hourly allocation curves that spread an annual total across the hours of
a year. One supply curve is shared by every parcel; demand curves are keyed
by usetype. Both are built once before any worker starts and are frozen:
the arrays are flagged non-writeable and the store mapping is a read-only
proxy, so workers share them without locks.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from collections.abc import Mapping
from typing import Iterable, Iterator, Set

import numpy as np

from ..errors import MissingProfileError

HOURS_PER_YEAR = 8760


def _frozen_curve(values, name: str) -> np.ndarray:
    curve = np.array(values, dtype=np.float64).reshape(-1)
    if curve.size == 0:
        raise ValueError(f"{name} profile is empty")
    if not np.all(np.isfinite(curve)):
        raise ValueError(f"{name} profile contains non-finite values")
    if np.any(curve < 0):
        raise ValueError(f"{name} profile contains negative values")
    curve.flags.writeable = False
    return curve


@dataclass(frozen=True, eq=False)
class Profile:
    """
    Demand allocation curve for one usetype.

    Attributes:
        usetype: Building use category
        hourly_fraction: Fraction of annual demand per hour, nominally sums to 1
    """
    usetype: str
    hourly_fraction: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "hourly_fraction", _frozen_curve(self.hourly_fraction, self.usetype))

    @property
    def hours(self) -> int:
        return int(self.hourly_fraction.size)

    @property
    def total(self) -> float:
        return float(self.hourly_fraction.sum())


@dataclass(frozen=True, eq=False)
class SupplyProfile:
    """Shared hourly solar allocation curve applied to every parcel's supply."""
    hourly_fraction: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "hourly_fraction", _frozen_curve(self.hourly_fraction, "supply"))

    @property
    def hours(self) -> int:
        return int(self.hourly_fraction.size)

    def __len__(self) -> int:
        return self.hours


class ProfileStore(Mapping):
    """
    Immutable usetype -> Profile mapping.

    All profiles must cover the same number of hours.
    """

    def __init__(self, profiles: Iterable[Profile]):
        table = {}
        hours = None
        for profile in profiles:
            if profile.usetype in table:
                raise ValueError(f"duplicate profile for usetype '{profile.usetype}'")
            if hours is None:
                hours = profile.hours
            elif profile.hours != hours:
                raise ValueError(
                    f"profile '{profile.usetype}' has {profile.hours} hours, expected {hours}"
                )
            table[profile.usetype] = profile
        self._profiles = MappingProxyType(table)
        self._hours = hours

    @classmethod
    def from_mapping(cls, curves: Mapping[str, Iterable[float]]) -> "ProfileStore":
        return cls(Profile(usetype, values) for usetype, values in curves.items())

    def __getitem__(self, usetype: str) -> Profile:
        return self._profiles[usetype]

    def __iter__(self) -> Iterator[str]:
        return iter(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)

    @property
    def hours(self):
        """Hours covered by every profile, None for an empty store."""
        return self._hours

    @property
    def usetypes(self) -> Set[str]:
        return set(self._profiles)

    def lookup(self, usetype: str) -> Profile:
        """
        Profile for a usetype.

        Raises:
            MissingProfileError: no profile is registered for the usetype
        """
        try:
            return self._profiles[usetype]
        except KeyError:
            raise MissingProfileError([usetype]) from None

    def missing(self, usetypes: Iterable[str]) -> Set[str]:
        """Usetypes among the given ones that have no profile."""
        return {u for u in usetypes if u not in self._profiles}
