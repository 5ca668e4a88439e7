from .base import Integrator, IntegrationResult, IntegratorStatus, RHSFn
from .rk4_integrator import rk4_step, RK4Integrator
from .scipy_integrator import ScipyIntegrator

__all__ = [
    "Integrator",
    "IntegrationResult",
    "IntegratorStatus",
    "RHSFn",
    "rk4_step",
    "RK4Integrator",
    "ScipyIntegrator",
]
