from __future__ import annotations

import numpy as np
from scipy.integrate import solve_ivp

from ..logger import get_logger
from .base import Integrator, IntegrationResult, IntegratorStatus, RHSFn

logger = get_logger(__name__)


class ScipyIntegrator(Integrator):
    """
    Adaptive integrator backed by ``scipy.integrate.solve_ivp``.

    LSODA switches between Adams and BDF automatically, which suits networks
    whose stiffness changes as species cross between regimes.
    """

    def __init__(self, rhs: RHSFn, *, atol: float, rtol: float, method: str = "LSODA"):
        super().__init__(rhs, atol=atol, rtol=rtol)
        self.method = str(method)

    def advance(self, y: np.ndarray, t: float, t_target: float) -> IntegrationResult:
        y = np.array(y, dtype=float)
        if not self._tolerances_valid() or t_target < t:
            return IntegrationResult(t=t, y=y, status=IntegratorStatus.ILL_INPUT)
        if t_target == t or y.size == 0:
            return IntegrationResult(t=float(t_target), y=y, status=IntegratorStatus.SUCCESS)

        try:
            solution = solve_ivp(
                self.rhs,
                (t, t_target),
                y,
                method=self.method,
                t_eval=[t_target],
                atol=self.atol,
                rtol=self.rtol,
            )
        except MemoryError:
            return IntegrationResult(t=t, y=y, status=IntegratorStatus.MEM_FAIL)

        if not solution.success or solution.y.shape[1] == 0:
            logger.debug("solve_ivp failed on [%g, %g]: %s", t, t_target, solution.message)
            return IntegrationResult(t=t, y=y, status=IntegratorStatus.SOLVER_FAILURE)

        return IntegrationResult(
            t=float(solution.t[-1]),
            y=solution.y[:, -1].copy(),
            status=IntegratorStatus.SUCCESS,
        )
