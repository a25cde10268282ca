import json

import pandas as pd
import pytest

from conftest import spike, write_inputs
from prioritization.cli import main
from prioritization.config import RunConfig
from prioritization.pipeline import compute, load_inputs, run


@pytest.fixture
def scenario(tmp_path):
    """One exporting group, one importing group and one empty group."""
    paths = write_inputs(
        tmp_path,
        supply=spike(0),
        profiles={"RES": spike(1), "COM": spike(2)},
        groups=[("1", 1), ("2", 2), ("3", 0)],
        parcels=[
            ("p1", "RES", "1", 1000, 2000),
            ("p2", "COM", "2", 500, 1500),
            ("p3", "RES", "2", 300, 0),
        ],
    )
    paths["results_path"] = tmp_path / "out" / "results.csv"
    return paths


def _argv(paths, *extra):
    return [
        "-s", str(paths["supply_profile_path"]),
        "-d", str(paths["demand_profile_path"]),
        "-c", str(paths["circuit_group_path"]),
        "-p", str(paths["parcel_path"]),
        "-o", str(paths["results_path"]),
        "--no-progress",
        *extra,
    ]


def test_cli_end_to_end(scenario):
    assert main(_argv(scenario, "-w", "2")) == 0

    out = scenario["results_path"].parent
    annual = pd.read_csv(out / "results_annualNet.csv", dtype={"Circuit_Group_ID": str})
    assert list(annual["Circuit_Group_ID"]) == ["1", "2", "3"]
    rows = annual.set_index("Circuit_Group_ID")
    assert rows.loc["1", "Annual_Net_Supply_MWh"] == pytest.approx(-1.0)
    assert rows.loc["1", "Annual_Max_Net_Supply_MWh"] == pytest.approx(1.0)
    assert rows.loc["2", "Annual_Net_Supply_MWh"] == pytest.approx(-1.0)
    assert rows.loc["3", "Annual_Net_Supply_MWh"] == 0.0

    hourly = pd.read_csv(out / "results_hourlyNet.csv", dtype={"Circuit_Group_ID": str})
    assert hourly.shape == (3, 8761)
    assert hourly.loc[1, "3"] == pytest.approx(-1500.0)


def test_missing_profile_aborts_without_output(scenario):
    scenario["parcel_path"].write_text(
        "pid,usetype,cgid,supply,demand\np1,IND,1,1000,2000\np2,COM,2,5,10\np3,RES,2,1,1\n"
    )
    assert main(_argv(scenario)) == 2
    assert not scenario["results_path"].parent.exists()


def test_count_mismatch_aborts_without_output(scenario):
    scenario["circuit_group_path"].write_text("cgid,count\n1,2\n2,2\n3,0\n")
    assert main(_argv(scenario)) == 2
    assert not scenario["results_path"].parent.exists()


def test_missing_input_file(scenario, tmp_path):
    argv = _argv(scenario)
    argv[argv.index("-p") + 1] = str(tmp_path / "missing.csv")
    assert main(argv) == 2


def test_config_file_with_flag_override(scenario, tmp_path):
    config_path = tmp_path / "run.json"
    config_path.write_text(json.dumps({
        "supply_profile_path": str(scenario["supply_profile_path"]),
        "demand_profile_path": str(scenario["demand_profile_path"]),
        "circuit_group_path": str(scenario["circuit_group_path"]),
        "parcel_path": str(scenario["parcel_path"]),
        "results_path": str(tmp_path / "ignored" / "results.csv"),
        "peak_mode": "import",
        "show_progress": False,
    }))
    assert main(["--config", str(config_path), "-o", str(scenario["results_path"])]) == 0

    annual = pd.read_csv(
        scenario["results_path"].parent / "results_annualNet.csv", dtype={"Circuit_Group_ID": str}
    ).set_index("Circuit_Group_ID")
    assert annual.loc["1", "Annual_Max_Net_Supply_MWh"] == pytest.approx(-2.0)
    assert not (tmp_path / "ignored").exists()


def test_invalid_config_value(scenario):
    assert main(_argv(scenario, "-w", "0")) == 2


def test_pipeline_determinism_across_workers(scenario):
    config = RunConfig(**scenario, show_progress=False)
    one = {g.group_id: g.hourly_net_supply.copy() for g in compute(load_inputs(config), workers=1)}
    many = {g.group_id: g.hourly_net_supply.copy() for g in compute(load_inputs(config), workers=4)}
    assert one.keys() == many.keys()
    for gid in one:
        assert (one[gid] == many[gid]).all()


def test_run_summary(scenario):
    summary = run(RunConfig(**scenario, workers=3, show_progress=False))
    assert summary.groups == 3
    assert summary.parcels == 3
    assert summary.workers == 3
    assert all(p.exists() for p in summary.outputs)


def test_unwritable_hourly_output_leaves_no_annual_file(scenario):
    out = scenario["results_path"].parent
    (out / "results_hourlyNet.csv").mkdir(parents=True)
    assert main(_argv(scenario)) == 1
    assert not (out / "results_annualNet.csv").exists()


def test_output_clashing_with_input_is_rejected(scenario, tmp_path):
    renamed = scenario["parcel_path"].rename(tmp_path / "parcels_annualNet.csv")
    argv = _argv(scenario)
    argv[argv.index("-p") + 1] = str(renamed)
    argv[argv.index("-o") + 1] = str(tmp_path / "parcels.csv")
    assert main(argv) == 2
    assert renamed.exists()
