"""
Grid Models
===========

Parcels and the circuit groups that own them.
"""

from .parcel import Parcel, ScrubMode, ScrubPolicy, DEFAULT_SCRUB_POLICY
from .circuit_group import CircuitGroup, CircuitGroupPool

__all__ = [
    "Parcel",
    "ScrubMode",
    "ScrubPolicy",
    "DEFAULT_SCRUB_POLICY",
    "CircuitGroup",
    "CircuitGroupPool",
]
