from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict

from pydantic import ValidationError

from .config import RunConfig, load_config_file
from .errors import DataValidationError
from .pipeline import run


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    flags = {
        "output": "results_path",
        "supply": "supply_profile_path",
        "demand": "demand_profile_path",
        "circuit_groups": "circuit_group_path",
        "parcels": "parcel_path",
        "workers": "workers",
        "hours": "hours",
        "peak_mode": "peak_mode",
    }
    for arg, key in flags.items():
        value = getattr(args, arg)
        if value is not None:
            data[key] = value
    if args.scrub_mode is not None or args.scrub_sentinel is not None:
        scrub = {}
        if args.scrub_mode is not None:
            scrub["mode"] = args.scrub_mode
        if args.scrub_sentinel is not None:
            scrub["sentinel"] = args.scrub_sentinel
        data["scrub"] = scrub
    if args.no_sort:
        data["sort_output"] = False
    if args.no_progress:
        data["show_progress"] = False
    return data


def build_config(args: argparse.Namespace) -> RunConfig:
    raw = load_config_file(args.config)
    overrides = _overrides(args)
    if "scrub" in overrides:
        raw["scrub"] = {**raw.get("scrub", {}), **overrides.pop("scrub")}
    raw.update(overrides)
    return RunConfig.model_validate(raw)


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y/%m/%d %H:%M:%S",
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Compute hourly and annual net grid supply per circuit group."
    )
    parser.add_argument("--config", help="Path to run configuration JSON. Flags override its values.")
    parser.add_argument("-o", "--output", help="Base path for results CSV (default out/results.csv).")
    parser.add_argument("-s", "--supply", help="Supply profile CSV (default in/supply_profile.csv).")
    parser.add_argument("-d", "--demand", help="Demand profile CSV (default in/demand_profile.csv).")
    parser.add_argument("-c", "--circuit-groups", help="Circuit group CSV (default in/circuit_groups.csv).")
    parser.add_argument("-p", "--parcels", help="Parcel CSV (default in/parcels.csv).")
    parser.add_argument("-w", "--workers", type=int, help="Worker threads (default: available CPUs).")
    parser.add_argument("--hours", type=int, help="Expected hourly values per profile (default 8760).")
    parser.add_argument("--scrub-mode", choices=["clamp", "sentinel"], help="Missing-demand scrub rule.")
    parser.add_argument("--scrub-sentinel", type=float, help="Missing-demand placeholder for sentinel mode.")
    parser.add_argument("--peak-mode", choices=["export", "import"], help="Peak hour to report per group.")
    parser.add_argument("--no-sort", action="store_true", help="Write groups in completion order.")
    parser.add_argument("--no-progress", action="store_true", help="Disable progress bars.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors.")

    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    try:
        config = build_config(args)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 2
    except ValidationError as e:
        print("Config validation error:", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    print(f"\tResults: {config.results_path.name}")
    print(f"\tSupply Profile: {config.supply_profile_path.name}")
    print(f"\tDemand Profile: {config.demand_profile_path.name}")
    print(f"\tCircuit Group Data: {config.circuit_group_path.name}")
    print(f"\tParcel Data: {config.parcel_path.name}")

    try:
        summary = run(config)
    except FileNotFoundError as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 2
    except DataValidationError as e:
        print(f"Input validation error: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"I/O error: {e}", file=sys.stderr)
        return 1

    print(f"Circuit groups: {summary.groups} ({summary.parcels} parcels, {summary.workers} workers)")
    for path in summary.outputs:
        print(f"Wrote: {path}")
    print(f"Elapsed time: {summary.elapsed_sec:.2f}s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
