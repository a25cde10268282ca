"""
Circuit Prioritization Tool
===========================

Batch computation of hourly and annual net grid supply for circuit groups
(clusters of grid-connected parcels), used to rank candidate circuits for
grid upgrades.

Architecture:
- grid/: Parcel and circuit group models, scrub policy
- profiles/: Shared read-only hourly allocation profiles
- engine/: Worker pool, dispatch/result channels, net-supply netting
- io/: CSV loaders (with validation) and result writers
- pipeline: Load -> compute -> write orchestration
- cli: Command line entry point
"""

__version__ = "1.0.0"
