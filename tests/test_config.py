import pytest
from pydantic import ValidationError

from prioritization.config import RunConfig


def _inputs(tmp_path):
    return {
        "supply_profile_path": tmp_path / "supply.csv",
        "demand_profile_path": tmp_path / "demand.csv",
        "circuit_group_path": tmp_path / "groups.csv",
        "parcel_path": tmp_path / "in_annualNet.csv",
    }


def test_results_may_share_a_directory_with_inputs(tmp_path):
    config = RunConfig(**_inputs(tmp_path), results_path=tmp_path / "results.csv")
    assert config.results_path == tmp_path / "results.csv"


def test_derived_output_must_not_overwrite_an_input(tmp_path):
    with pytest.raises(ValidationError, match="in_annualNet.csv"):
        RunConfig(**_inputs(tmp_path), results_path=tmp_path / "in.csv")


def test_derived_output_clash_is_found_through_relative_paths(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    inputs = _inputs(tmp_path)
    inputs["circuit_group_path"] = tmp_path / "x_hourlyNet.csv"
    with pytest.raises(ValidationError, match="x_hourlyNet.csv"):
        RunConfig(**inputs, results_path="sub/../x.csv")
