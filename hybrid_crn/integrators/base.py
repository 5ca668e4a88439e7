from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable

import numpy as np

RHSFn = Callable[[float, np.ndarray], np.ndarray]
# Signature: rhs(t, y) -> dy/dt, same shape as y


class IntegratorStatus(IntEnum):
    """Status codes returned by ``Integrator.advance`` (CVODE numbering)."""
    SUCCESS = 0
    SOLVER_FAILURE = -1
    CONV_FAILURE = -4
    MEM_FAIL = -20
    ILL_INPUT = -22


@dataclass(frozen=True)
class IntegrationResult:
    t: float
    y: np.ndarray
    status: IntegratorStatus

    @property
    def ok(self) -> bool:
        return self.status == IntegratorStatus.SUCCESS


class Integrator(ABC):
    """
    ODE backend used by the hybrid loop.

    An instance is bound to one right-hand side and one set of tolerances and
    belongs to a single trajectory. ``advance`` never raises for numerical
    trouble; it reports it through ``IntegrationResult.status`` and the caller
    must check it.
    """

    def __init__(self, rhs: RHSFn, *, atol: float, rtol: float):
        self.rhs = rhs
        self.atol = float(atol)
        self.rtol = float(rtol)

    def _tolerances_valid(self) -> bool:
        return self.atol >= 0.0 and self.rtol >= 0.0

    @abstractmethod
    def advance(self, y: np.ndarray, t: float, t_target: float) -> IntegrationResult:
        """Integrate from (t, y) to at most t_target. ``y`` is not modified."""

    def close(self) -> None:
        """Release per-trajectory resources."""
