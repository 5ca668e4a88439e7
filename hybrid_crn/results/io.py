from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import json
import numpy as np

from ..logger import get_logger
from .simulation_results import SimulationResults

logger = get_logger(__name__)

PathLike = Union[str, Path]


# ============================================================
# Pair format: <prefix>.npz + <prefix>.json
# ============================================================
def save_results(
    results: SimulationResults,
    path_prefix: PathLike,
    *,
    meta: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Save SimulationResults to:
      - <path_prefix>.npz  (time, trajectories, modes)
      - <path_prefix>.json (species, completion, seed and user metadata)
    """
    path_prefix = Path(path_prefix)
    path_prefix.parent.mkdir(parents=True, exist_ok=True)

    npz_path = path_prefix.with_suffix(".npz")
    json_path = path_prefix.with_suffix(".json")

    np.savez_compressed(
        npz_path,
        time=results.time,
        trajectories=results.trajectories,
        modes=results.modes,
    )

    meta_out: Dict[str, Any] = dict(meta or {})
    meta_out.setdefault("species", list(results.species))
    meta_out.setdefault("run_type", "hybrid")
    meta_out["completed"] = int(results.completed)
    meta_out["seed_entropy"] = None if results.seed_entropy is None else int(results.seed_entropy)
    meta_out.setdefault(
        "shapes",
        {
            "time": list(results.time.shape),
            "trajectories": list(results.trajectories.shape),
        },
    )

    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(meta_out, f, indent=2)

    logger.info("Results saved to %s and %s", npz_path, json_path)


def load_results(path_prefix: PathLike) -> Tuple[SimulationResults, Dict[str, Any]]:
    """
    Load SimulationResults saved by save_results().

    Returns
    -------
    (SimulationResults, meta_dict)
    """
    path_prefix = Path(path_prefix)
    npz_path = path_prefix.with_suffix(".npz")
    json_path = path_prefix.with_suffix(".json")

    if not npz_path.exists():
        raise FileNotFoundError(f"Missing npz file: {npz_path}")
    if not json_path.exists():
        raise FileNotFoundError(f"Missing json file: {json_path}")

    with open(json_path, "r", encoding="utf-8") as f:
        meta = json.load(f)

    with np.load(npz_path) as data:
        time = data["time"]
        trajectories = data["trajectories"]
        modes = data["modes"]

    species = list(meta.get("species", []))

    # Light validation
    if trajectories.shape[1] != time.shape[0]:
        raise ValueError("Loaded trajectories do not match the time axis")
    if trajectories.shape[2] != len(species):
        raise ValueError("Loaded trajectories do not match the species list")

    res = SimulationResults(
        time=time,
        trajectories=trajectories,
        modes=modes,
        species=species,
        completed=int(meta.get("completed", trajectories.shape[0])),
        seed_entropy=meta.get("seed_entropy"),
    )
    return res, meta
