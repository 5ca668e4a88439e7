from __future__ import annotations
from typing import Optional


class SimulationError(RuntimeError):
    """
    Run-level failure of the hybrid loop.

    Carries the trajectory index and the simulation time at which the
    trajectory was aborted.
    """

    def __init__(self, message: str, *, trajectory: int, time: float):
        super().__init__(f"{message} (trajectory={trajectory}, t={time:.6g})")
        self.trajectory = int(trajectory)
        self.time = float(time)


class IntegrationError(SimulationError):
    """The ODE integrator returned a non-success status."""

    def __init__(self, message: str, *, trajectory: int, time: float, status: int):
        super().__init__(f"{message} [status={int(status)}]", trajectory=trajectory, time=time)
        self.status = int(status)


class StepRetryError(SimulationError):
    """Step halving hit the minimum tau or the retry limit."""

    def __init__(
        self,
        message: str,
        *,
        trajectory: int,
        time: float,
        tau_step: float,
        retries: Optional[int] = None,
    ):
        super().__init__(f"{message} [tau_step={tau_step:.3g}, retries={retries}]", trajectory=trajectory, time=time)
        self.tau_step = float(tau_step)
        self.retries = retries
