import pytest

from prioritization.grid import Parcel, ScrubMode, ScrubPolicy


def test_clamp_negative_demand_zeroes_both():
    p = Parcel.from_raw("p1", "RES", "1", 500.0, -3.0)
    assert p.annual_demand == 0.0
    assert p.annual_supply == 0.0


def test_zero_demand_forces_zero_supply():
    p = Parcel.from_raw("p1", "RES", "1", 1200.0, 0.0)
    assert (p.annual_supply, p.annual_demand) == (0.0, 0.0)


def test_positive_values_unchanged():
    p = Parcel.from_raw("p1", "RES", "1", 1200.0, 3400.0)
    assert (p.annual_supply, p.annual_demand) == (1200.0, 3400.0)


def test_sentinel_mode_zeroes_both_fields():
    policy = ScrubPolicy(mode=ScrubMode.SENTINEL, sentinel=-9999.0)
    assert policy.apply(800.0, -9999.0) == (0.0, 0.0)
    assert policy.apply(800.0, 10.0) == (800.0, 10.0)


def test_sentinel_mode_rejects_other_negative_demand():
    policy = ScrubPolicy(mode=ScrubMode.SENTINEL, sentinel=-9999.0)
    with pytest.raises(ValueError, match="not the sentinel"):
        policy.apply(800.0, -1.0)


def test_negative_supply_rejected():
    with pytest.raises(ValueError):
        Parcel.from_raw("p1", "RES", "1", -5.0, 100.0)


def test_parcel_is_immutable():
    p = Parcel("p1", "RES", "1", 1.0, 2.0)
    with pytest.raises(AttributeError):
        p.annual_supply = 3.0
