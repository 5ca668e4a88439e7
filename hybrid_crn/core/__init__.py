from .integration_vector import IntegrationVector, draw_offset
from .solver_options import SolverOptions, DEFAULT_ABSTOL, DEFAULT_RELTOL
from .cancellation import CancellationToken, interrupt_handler, interrupted
from .hybrid_loop import HybridSolver
from .user_api import HybridModel

__all__ = [
    "IntegrationVector",
    "draw_offset",
    "SolverOptions",
    "DEFAULT_ABSTOL",
    "DEFAULT_RELTOL",
    "CancellationToken",
    "interrupt_handler",
    "interrupted",
    "HybridSolver",
    "HybridModel",
]
