from .simulation_results import SimulationResults
from .trajectory_store import TrajectoryStore, make_timeline
from .io import save_results, load_results

__all__ = ["SimulationResults", "TrajectoryStore", "make_timeline", "save_results", "load_results"]
