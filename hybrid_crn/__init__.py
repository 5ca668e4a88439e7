from .reactions import Species, SpeciesMode, Reaction, Model
from .propensity import PropensityEvaluator, MassActionPropensity, FunctionPropensity
from .integrators import Integrator, IntegratorStatus, ScipyIntegrator, RK4Integrator
from .core import HybridSolver, HybridModel, SolverOptions, CancellationToken, interrupt_handler
from .results import SimulationResults, save_results, load_results
from .results.plotting import plot_trajectories
from .errors import SimulationError, IntegrationError, StepRetryError
from .logger import configure_logging


__all__ = [
    "Species",
    "SpeciesMode",
    "Reaction",
    "Model",
    "PropensityEvaluator",
    "MassActionPropensity",
    "FunctionPropensity",
    "Integrator",
    "IntegratorStatus",
    "ScipyIntegrator",
    "RK4Integrator",
    "HybridSolver",
    "HybridModel",
    "SolverOptions",
    "CancellationToken",
    "interrupt_handler",
    "SimulationResults",
    "save_results",
    "load_results",
    "plot_trajectories",
    "SimulationError",
    "IntegrationError",
    "StepRetryError",
    "configure_logging",
]
