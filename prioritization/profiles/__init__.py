"""
Profiles
========

Shared, read-only hourly supply and demand allocation curves.
"""

from .store import HOURS_PER_YEAR, Profile, ProfileStore, SupplyProfile

__all__ = ["HOURS_PER_YEAR", "Profile", "ProfileStore", "SupplyProfile"]
