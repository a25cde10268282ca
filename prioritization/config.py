from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from .engine.netting import PeakMode
from .grid.parcel import ScrubMode, ScrubPolicy
from .io.writers import output_paths
from .profiles.store import HOURS_PER_YEAR


class ScrubSpec(BaseModel):
    mode: Literal["clamp", "sentinel"] = Field(
        "clamp",
        description="'clamp': negative demand becomes 0. 'sentinel': demand equal to the sentinel zeroes both fields.",
    )
    sentinel: float = Field(-1.0, description="Missing-demand placeholder used in 'sentinel' mode.")

    def to_policy(self) -> ScrubPolicy:
        return ScrubPolicy(mode=ScrubMode(self.mode), sentinel=self.sentinel)


class RunConfig(BaseModel):
    supply_profile_path: Path = Field(Path("in/supply_profile.csv"), description="Supply profile CSV.")
    demand_profile_path: Path = Field(Path("in/demand_profile.csv"), description="Demand profiles CSV.")
    circuit_group_path: Path = Field(Path("in/circuit_groups.csv"), description="Circuit group CSV.")
    parcel_path: Path = Field(Path("in/parcels.csv"), description="Parcel CSV.")
    results_path: Path = Field(
        Path("out/results.csv"),
        description="Base results path; _annualNet and _hourlyNet files are written next to it.",
    )

    workers: Optional[int] = Field(
        None, ge=1, description="Worker threads. If omitted, min(CPU count, scheduler quota)."
    )
    hours: int = Field(HOURS_PER_YEAR, ge=1, description="Expected hourly values per profile.")
    scrub: ScrubSpec = Field(default_factory=ScrubSpec)
    peak_mode: Literal["export", "import"] = Field(
        "export",
        description="Peak hour reported per group: highest export ('export') or highest import ('import').",
    )
    sort_output: bool = Field(True, description="Write groups in input order instead of completion order.")
    show_progress: bool = Field(True, description="Show tqdm progress bars.")

    @model_validator(mode="after")
    def _distinct_output(self) -> "RunConfig":
        inputs = {
            p.resolve()
            for p in (
                self.supply_profile_path,
                self.demand_profile_path,
                self.circuit_group_path,
                self.parcel_path,
            )
        }
        clashes = [p for p in output_paths(self.results_path) if p.resolve() in inputs]
        if clashes:
            raise ValueError(f"results_path would overwrite input file {clashes[0]}")
        return self

    @property
    def scrub_policy(self) -> ScrubPolicy:
        return self.scrub.to_policy()

    @property
    def peak(self) -> PeakMode:
        return PeakMode(self.peak_mode)


def load_config_file(path: str | None) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if path:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"Config JSON not found: {path}")
        data = json.loads(p.read_text())
    return data
