import matplotlib

matplotlib.use("Agg")

import numpy as np

from hybrid_crn.results import SimulationResults
from hybrid_crn.results.plotting import mode_fraction, plot_trajectories


def _results():
    time = np.linspace(0.0, 1.0, 5)
    trajectories = np.stack([np.column_stack([10 - time, time]), np.column_stack([10 - 2 * time, 2 * time])])
    modes = np.zeros_like(trajectories, dtype=np.int8)
    modes[1, :, 1] = 1
    return SimulationResults(time=time, trajectories=trajectories, modes=modes, species=["A", "B"], completed=2)


def test_plot_trajectories_draws_mean_lines(tmp_path):
    ax = plot_trajectories(_results(), save_path=str(tmp_path / "plot.png"))

    labels = [line.get_label() for line in ax.get_lines()]
    assert "A" in labels and "B" in labels
    assert (tmp_path / "plot.png").exists()


def test_mode_fraction():
    frac = mode_fraction(_results())

    assert frac.shape == (5, 2)
    assert np.allclose(frac[:, 0], 0.0)
    assert np.allclose(frac[:, 1], 0.5)
