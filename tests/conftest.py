import numpy as np
import pytest

from prioritization.grid import CircuitGroup, CircuitGroupPool, Parcel
from prioritization.profiles import HOURS_PER_YEAR, ProfileStore, SupplyProfile


def spike(hour: int, hours: int = HOURS_PER_YEAR) -> np.ndarray:
    curve = np.zeros(hours)
    curve[hour] = 1.0
    return curve


def write_inputs(directory, supply, profiles, groups, parcels):
    """Write the four input CSVs and return their paths as a dict of RunConfig fields."""
    paths = {
        "supply_profile_path": directory / "supply_profile.csv",
        "demand_profile_path": directory / "demand_profile.csv",
        "circuit_group_path": directory / "circuit_groups.csv",
        "parcel_path": directory / "parcels.csv",
    }
    paths["supply_profile_path"].write_text(
        "supply\n" + "\n".join(repr(float(v)) for v in supply) + "\n"
    )
    usetypes = list(profiles)
    rows = zip(*(profiles[u] for u in usetypes))
    paths["demand_profile_path"].write_text(
        ",".join(usetypes) + "\n" + "\n".join(",".join(repr(float(v)) for v in r) for r in rows) + "\n"
    )
    paths["circuit_group_path"].write_text(
        "cgid,count\n" + "".join(f"{g},{c}\n" for g, c in groups)
    )
    paths["parcel_path"].write_text(
        "pid,usetype,cgid,supply,demand\n" + "".join(",".join(map(str, p)) + "\n" for p in parcels)
    )
    return paths


@pytest.fixture
def hours():
    return 48


@pytest.fixture
def supply(hours):
    t = np.arange(hours)
    curve = np.maximum(0.0, np.sin(np.pi * ((t % 24) - 6) / 12.0))
    return SupplyProfile(curve / curve.sum())


@pytest.fixture
def store(hours):
    flat = np.full(hours, 1.0 / hours)
    evening = np.where(np.arange(hours) % 24 >= 17, 1.0, 0.1)
    return ProfileStore.from_mapping({
        "RES": evening / evening.sum(),
        "COM": flat,
    })


@pytest.fixture
def pool():
    rng = np.random.default_rng(7)
    groups = []
    for g in range(12):
        parcels = tuple(
            Parcel(
                parcel_id=f"{g}-{i}",
                usetype="RES" if i % 3 else "COM",
                circuit_group_id=str(g),
                annual_supply=float(rng.uniform(0, 8000)),
                annual_demand=float(rng.uniform(1000, 12000)),
            )
            for i in range(g % 5)
        )
        groups.append(CircuitGroup(str(g), len(parcels), parcels))
    return CircuitGroupPool(groups)
