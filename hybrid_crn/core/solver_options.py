from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Type

from ..integrators import Integrator, RHSFn, ScipyIntegrator

DEFAULT_ABSTOL = 1e-5
DEFAULT_RELTOL = 1e-5


@dataclass(frozen=True)
class SolverOptions:
    """
    Hybrid solver configuration.

    atol, rtol         : tolerances handed to the integrator
    min_tau_step       : smallest trial step before a trajectory is aborted
    max_retries        : consecutive step halvings allowed before aborting
    tau_growth         : factor applied to tau after an accepted step
                         (tau never exceeds the output increment)
    tau_tol            : relative change allowed per step in species consumed
                         by stochastic reactions; None turns step selection off
    integrator         : Integrator subclass instantiated once per trajectory
    integrator_kwargs  : extra keyword arguments for that class
                         (e.g. {"method": "BDF"} or {"max_step": 1e-3})
    """
    atol: float = DEFAULT_ABSTOL
    rtol: float = DEFAULT_RELTOL
    min_tau_step: float = 1e-9
    max_retries: int = 64
    tau_growth: float = 2.0
    tau_tol: Optional[float] = 0.03
    integrator: Type[Integrator] = ScipyIntegrator
    integrator_kwargs: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.atol < 0:
            raise ValueError("SolverOptions.atol must be >= 0")
        if self.rtol < 0:
            raise ValueError("SolverOptions.rtol must be >= 0")
        if self.min_tau_step <= 0:
            raise ValueError("SolverOptions.min_tau_step must be > 0")
        if self.max_retries < 1:
            raise ValueError("SolverOptions.max_retries must be >= 1")
        if self.tau_growth < 1:
            raise ValueError("SolverOptions.tau_growth must be >= 1")
        if self.tau_tol is not None and self.tau_tol <= 0:
            raise ValueError("SolverOptions.tau_tol must be > 0 or None")
        if not (isinstance(self.integrator, type) and issubclass(self.integrator, Integrator)):
            raise ValueError("SolverOptions.integrator must be an Integrator subclass")

    def make_integrator(self, rhs: RHSFn) -> Integrator:
        return self.integrator(rhs, atol=self.atol, rtol=self.rtol, **self.integrator_kwargs)
