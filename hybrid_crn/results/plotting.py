from __future__ import annotations
from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from ..reactions import SpeciesMode
from .simulation_results import SimulationResults


def plot_trajectories(
    res: SimulationResults,
    species: Optional[Sequence[str]] = None,
    *,
    ax=None,
    show_individual: bool = True,
    save_path: Optional[str] = None,
):
    """
    Plot species time series: faint lines per trajectory plus the mean.

    Returns the matplotlib Axes.
    """
    names = list(res.species) if species is None else list(species)
    if ax is None:
        _, ax = plt.subplots(figsize=(10, 5))

    colors = plt.rcParams["axes.prop_cycle"].by_key()["color"]
    n_done = res.completed
    mean = res.mean() if n_done > 0 else None

    for i, sp in enumerate(names):
        color = colors[i % len(colors)]
        series = res.species_series(sp)[:n_done]
        if show_individual and n_done > 1:
            for row in series:
                ax.plot(res.time, row, color=color, alpha=0.15, linewidth=1)
        if mean is not None:
            ax.plot(res.time, mean[:, res.species.index(sp)], color=color, linewidth=2.5, label=sp)

    ax.set_xlabel("Time")
    ax.set_ylabel("Population")
    title = f"Hybrid simulation ({n_done}/{res.n_trajectories} trajectories)"
    ax.set_title(title if res.complete else title + " [incomplete]")
    if names and mean is not None:
        ax.legend(loc="best")
    ax.grid(True, alpha=0.2)

    if save_path is not None:
        ax.figure.savefig(save_path, dpi=150, bbox_inches="tight")
    return ax


def mode_fraction(res: SimulationResults) -> np.ndarray:
    """
    Fraction of completed trajectories in which each species was discrete.

    Output shape: (n_steps, n_species)
    """
    if res.completed == 0:
        raise ValueError("no completed trajectories")
    return (res.modes[: res.completed] == SpeciesMode.DISCRETE).mean(axis=0)
