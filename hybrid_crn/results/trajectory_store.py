from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .simulation_results import SimulationResults

# relative slack when comparing sample times against the integrator's time
TIME_EPS = 1e-9


def make_timeline(end_time: float, increment: float) -> np.ndarray:
    """Evenly spaced sample times 0, increment, ... up to end_time (inclusive)."""
    if end_time <= 0:
        raise ValueError("end_time must be > 0")
    if increment <= 0:
        raise ValueError("increment must be > 0")
    n_steps = int(np.floor(end_time / increment + TIME_EPS)) + 1
    return np.arange(n_steps, dtype=float) * increment


@dataclass
class TrajectoryStore:
    """
    Pre-allocated output buffer for a hybrid run.

    Allocated once before any trajectory runs; each trajectory writes its own
    slice ``trajectories[traj]`` one sample at a time.
    """
    end_time: float
    increment: float
    number_trajectories: int
    species: List[str]

    timeline: np.ndarray = field(init=False)
    trajectories: np.ndarray = field(init=False)
    modes: np.ndarray = field(init=False)
    completed: int = field(init=False, default=0)

    def __post_init__(self):
        if self.number_trajectories < 1:
            raise ValueError("number_trajectories must be >= 1")
        self.timeline = make_timeline(self.end_time, self.increment)
        shape = (int(self.number_trajectories), self.n_steps, len(self.species))
        self.trajectories = np.full(shape, np.nan, dtype=float)
        self.modes = np.full(shape, -1, dtype=np.int8)

    @property
    def n_steps(self) -> int:
        return int(self.timeline.shape[0])

    def record(self, traj: int, step: int, concentrations: np.ndarray, modes: np.ndarray) -> None:
        self.trajectories[traj, step, :] = concentrations
        self.modes[traj, step, :] = modes

    def record_until(
        self,
        traj: int,
        next_step: int,
        t: float,
        concentrations: np.ndarray,
        modes: np.ndarray,
    ) -> int:
        """
        Write the current state into every unrecorded sample with time <= t.

        Returns the index of the next sample still to be written.
        """
        limit = t + TIME_EPS * max(1.0, abs(t))
        while next_step < self.n_steps and self.timeline[next_step] <= limit:
            self.record(traj, next_step, concentrations, modes)
            next_step += 1
        return next_step

    def mark_completed(self, traj: int) -> None:
        self.completed = max(self.completed, traj + 1)

    def to_results(self, seed_entropy: Optional[int] = None) -> SimulationResults:
        return SimulationResults(
            time=self.timeline.copy(),
            trajectories=self.trajectories,
            modes=self.modes,
            species=list(self.species),
            completed=int(self.completed),
            seed_entropy=seed_entropy,
        )
