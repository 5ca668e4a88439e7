from __future__ import annotations
from abc import ABC, abstractmethod
from math import comb, factorial
from typing import Callable, Dict, Mapping, Optional, Sequence

import numpy as np


# User propensity signature:
#   x:     {"A": xA, "B": xB, ...}  (counts or concentrations)
#   rates: arbitrary dict of rate constants
PropensityFn = Callable[[Dict[str, float], Dict[str, float]], float]


class PropensityEvaluator(ABC):
    """
    Rate evaluation for every reaction of a model.

    Three entry points share the same reaction indexing:
      evaluate      : discrete integer state (pure stochastic use)
      tau_evaluate  : integer population vector (tau-leaping)
      ode_evaluate  : real concentration vector (ODE / hybrid use)

    Implementations must not mutate the state they are given.
    """

    @property
    @abstractmethod
    def n_reactions(self) -> int:
        ...

    @abstractmethod
    def evaluate(self, reaction_number: int, state: np.ndarray) -> float:
        ...

    @abstractmethod
    def tau_evaluate(self, reaction_number: int, populations: Sequence[int]) -> float:
        ...

    @abstractmethod
    def ode_evaluate(self, reaction_number: int, concentrations: Sequence[float]) -> float:
        ...

    def ode_evaluate_all(self, concentrations: Sequence[float], out: Optional[np.ndarray] = None) -> np.ndarray:
        """Continuous propensities of every reaction; raises on negative values."""
        if out is None:
            out = np.zeros(self.n_reactions, dtype=float)
        for r in range(self.n_reactions):
            out[r] = self.ode_evaluate(r, concentrations)
        if out.size and float(out.min()) < 0.0:
            j = int(np.argmin(out))
            raise ValueError(f"propensities must be nonnegative: idx={j}, val={out[j]}")
        return out


class MassActionPropensity(PropensityEvaluator):
    """
    Mass-action kinetics.

    reactant_orders[r, s] is the number of molecules of species s consumed by
    one firing of reaction r (catalysts included).

      stochastic: k * prod_s C(x_s, n_s)
      ODE:        k * prod_s x_s**n_s / n_s!
    """

    def __init__(self, rates: Sequence[float], reactant_orders: np.ndarray):
        self.rates = np.asarray(rates, dtype=float)
        self.reactant_orders = np.asarray(reactant_orders, dtype=int)

        if self.rates.ndim != 1:
            raise ValueError("rates must be 1D")
        if self.reactant_orders.ndim != 2 or self.reactant_orders.shape[0] != self.rates.shape[0]:
            raise ValueError("reactant_orders must have shape (n_reactions, n_species)")
        if np.any(self.rates < 0):
            raise ValueError("rates must be >= 0")
        if np.any(self.reactant_orders < 0):
            raise ValueError("reactant_orders must be >= 0")

        self._inv_factorials = np.array(
            [[1.0 / factorial(int(n)) for n in row] for row in self.reactant_orders],
            dtype=float,
        ).reshape(self.reactant_orders.shape)

    @property
    def n_reactions(self) -> int:
        return int(self.rates.shape[0])

    def _stochastic(self, reaction_number: int, populations) -> float:
        value = float(self.rates[reaction_number])
        for s in np.flatnonzero(self.reactant_orders[reaction_number]):
            x = int(populations[s])
            if x <= 0:
                return 0.0
            value *= comb(x, int(self.reactant_orders[reaction_number, s]))
        return value

    def evaluate(self, reaction_number: int, state: np.ndarray) -> float:
        return self._stochastic(reaction_number, state)

    def tau_evaluate(self, reaction_number: int, populations: Sequence[int]) -> float:
        return self._stochastic(reaction_number, populations)

    def ode_evaluate(self, reaction_number: int, concentrations: Sequence[float]) -> float:
        x = np.maximum(np.asarray(concentrations, dtype=float), 0.0)
        orders = self.reactant_orders[reaction_number]
        return float(
            self.rates[reaction_number]
            * np.prod(x ** orders * self._inv_factorials[reaction_number])
        )

    def ode_evaluate_all(self, concentrations: Sequence[float], out: Optional[np.ndarray] = None) -> np.ndarray:
        x = np.maximum(np.asarray(concentrations, dtype=float), 0.0)
        values = self.rates * np.prod(x[np.newaxis, :] ** self.reactant_orders * self._inv_factorials, axis=1)
        if out is None:
            return values
        out[:] = values
        return out


class FunctionPropensity(PropensityEvaluator):
    """
    Propensities given as user callables ``f(x, rates) -> float``.

    The same callable serves all three entry points; ``x`` maps species names
    to the current (integer or real) values.

    Example
    -------
        FunctionPropensity(
            [lambda x, r: r["k"] * x["A"]],
            species_names=["A", "B"],
            rates={"k": 0.5},
        )
    """

    def __init__(
        self,
        functions: Sequence[PropensityFn],
        species_names: Sequence[str],
        rates: Optional[Mapping[str, float]] = None,
    ):
        self.functions = list(functions)
        self.species_names = list(species_names)
        self.rates = {str(k): float(v) for k, v in (rates or {}).items()}

    @property
    def n_reactions(self) -> int:
        return len(self.functions)

    def _call(self, reaction_number: int, values) -> float:
        x = {sp: values[i] for i, sp in enumerate(self.species_names)}
        return float(self.functions[reaction_number](x, self.rates))

    def evaluate(self, reaction_number: int, state: np.ndarray) -> float:
        return self._call(reaction_number, [int(v) for v in state])

    def tau_evaluate(self, reaction_number: int, populations: Sequence[int]) -> float:
        return self._call(reaction_number, [int(v) for v in populations])

    def ode_evaluate(self, reaction_number: int, concentrations: Sequence[float]) -> float:
        return self._call(reaction_number, [float(v) for v in concentrations])
