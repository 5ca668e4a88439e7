from __future__ import annotations
from typing import Callable

import numpy as np

from .base import Integrator, IntegrationResult, IntegratorStatus, RHSFn

StepRHSFn = Callable[[np.ndarray, float], np.ndarray]
# Signature: rhs(state, t) -> dstate/dt, same shape as state


def rk4_step(y: np.ndarray, t: float, dt: float, rhs: StepRHSFn) -> np.ndarray:
    """
    Perform one RK4 step for an ODE system y' = rhs(y, t).

    Parameters
    ----------
    y : np.ndarray
        Current state, any shape (for us: the flat integration vector).
    t : float
        Current time.
    dt : float
        Time step.
    rhs : callable
        Function rhs(y, t) returning dy/dt with same shape as y.

    Returns
    -------
    y_next : np.ndarray
        State at time t + dt.
    """
    if dt <= 0:
        raise ValueError("dt must be > 0")

    k1 = rhs(y, t)
    k2 = rhs(y + 0.5 * dt * k1, t + 0.5 * dt)
    k3 = rhs(y + 0.5 * dt * k2, t + 0.5 * dt)
    k4 = rhs(y + dt * k3, t + dt)

    return y + (dt / 6.0) * (k1 + 2 * k2 + 2 * k3 + k4)


class RK4Integrator(Integrator):
    """
    Fixed-step classical RK4.

    Tolerances are only validated, not used for step control; the interval
    [t, t_target] is split into equal sub-steps no longer than ``max_step``.
    """

    def __init__(self, rhs: RHSFn, *, atol: float, rtol: float, max_step: float = 1e-2):
        super().__init__(rhs, atol=atol, rtol=rtol)
        if max_step <= 0:
            raise ValueError("max_step must be > 0")
        self.max_step = float(max_step)

    def advance(self, y: np.ndarray, t: float, t_target: float) -> IntegrationResult:
        y = np.array(y, dtype=float)
        if not self._tolerances_valid() or t_target < t:
            return IntegrationResult(t=t, y=y, status=IntegratorStatus.ILL_INPUT)
        if t_target == t:
            return IntegrationResult(t=t, y=y, status=IntegratorStatus.SUCCESS)

        n_sub = max(1, int(np.ceil((t_target - t) / self.max_step)))
        dt = (t_target - t) / n_sub

        def step_rhs(state, time):
            return self.rhs(time, state)

        for i in range(n_sub):
            y = rk4_step(y, t + i * dt, dt, step_rhs)

        if not np.all(np.isfinite(y)):
            return IntegrationResult(t=t, y=y, status=IntegratorStatus.CONV_FAILURE)
        return IntegrationResult(t=float(t_target), y=y, status=IntegratorStatus.SUCCESS)
