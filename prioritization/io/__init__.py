"""
Input / Output
==============

CSV loaders with load-time validation and CSV result writers.
"""

from .loaders import (
    check_profile_coverage,
    load_circuit_groups,
    load_demand_profiles,
    load_parcels,
    load_supply_profile,
)
from .writers import output_paths, write_results

__all__ = [
    "check_profile_coverage",
    "load_circuit_groups",
    "load_demand_profiles",
    "load_parcels",
    "load_supply_profile",
    "output_paths",
    "write_results",
]
