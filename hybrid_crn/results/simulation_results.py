from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class SimulationResults:
    """
    Stores the sampled trajectories of a hybrid run.

    Shapes
    ------
    time         : (n_steps,)
    trajectories : (n_trajectories, n_steps, n_species)  float, NaN where never written
    modes        : (n_trajectories, n_steps, n_species)  int8 SpeciesMode, -1 where never written

    Only the first ``completed`` trajectories are filled when a run was
    cancelled.
    """
    time: np.ndarray
    trajectories: np.ndarray
    modes: np.ndarray
    species: list[str]
    completed: int
    seed_entropy: Optional[int] = None

    @property
    def n_trajectories(self) -> int:
        return int(self.trajectories.shape[0])

    @property
    def n_steps(self) -> int:
        return int(self.time.shape[0])

    @property
    def n_species(self) -> int:
        return int(self.trajectories.shape[2])

    @property
    def complete(self) -> bool:
        return self.completed == self.n_trajectories

    def species_series(self, name: str) -> np.ndarray:
        """(n_trajectories, n_steps) samples of one species."""
        try:
            idx = self.species.index(name)
        except ValueError:
            raise KeyError(f"Unknown species '{name}'. Known: {self.species}") from None
        return self.trajectories[:, :, idx]

    def mean(self) -> np.ndarray:
        """
        Mean over completed trajectories.

        Output shape: (n_steps, n_species)
        """
        if self.completed == 0:
            raise ValueError("no completed trajectories to average")
        return self.trajectories[: self.completed].mean(axis=0)
