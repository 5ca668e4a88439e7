from __future__ import annotations
from typing import Optional

import numpy as np

from ..propensity import PropensityEvaluator
from ..reactions import Model


_TINY = np.finfo(float).tiny


def draw_offset(rng: np.random.Generator, size: Optional[int] = None):
    """
    log(uniform(0, 1)): a strictly negative, finite reaction offset.

    Integrating a propensity onto this value and waiting for it to reach zero
    is equivalent to drawing an exponential waiting time in integrated-rate
    units.
    """
    return np.log(rng.uniform(_TINY, 1.0, size=size))


class IntegrationVector:
    """
    Layout of the flat vector handed to the ODE integrator and its derivative.

        [ --- concentrations --- | --- reaction offsets --- ]
          [0, n_species)           [n_species, n_species + n_reactions)

    Concentrations hold every species (continuous or discrete). Offsets hold
    one random counter per reaction; a counter reaching zero is a firing.

    ``deterministic`` is the current reaction partition: deterministic
    reactions drive the concentrations directly, the rest drive only their
    offsets and change populations when they fire. One instance belongs to
    one trajectory; the loop updates ``deterministic`` between steps, never
    during an integrator call.
    """

    def __init__(self, model: Model, propensity: PropensityEvaluator):
        if propensity.n_reactions != model.n_reactions:
            raise ValueError(
                f"propensity evaluator has {propensity.n_reactions} reactions, model has {model.n_reactions}"
            )
        self.model = model
        self.propensity = propensity
        self.n_species = model.n_species
        self.n_reactions = model.n_reactions
        self._stoich = model.stoichiometry.astype(float)
        # molecules each reaction removes from each species
        self._need = np.maximum(-self._stoich, 0.0)
        self.deterministic = np.ones(self.n_reactions, dtype=bool)

    @property
    def size(self) -> int:
        return self.n_species + self.n_reactions

    # ------------------------------------------------------------------
    # codec
    # ------------------------------------------------------------------
    def concentrations(self, y: np.ndarray) -> np.ndarray:
        return y[: self.n_species]

    def offsets(self, y: np.ndarray) -> np.ndarray:
        return y[self.n_species:]

    def pack(self, concentrations: np.ndarray, offsets: np.ndarray) -> np.ndarray:
        if concentrations.shape != (self.n_species,):
            raise ValueError(f"concentrations must have shape {(self.n_species,)}")
        if offsets.shape != (self.n_reactions,):
            raise ValueError(f"offsets must have shape {(self.n_reactions,)}")
        return np.concatenate([concentrations.astype(float), offsets.astype(float)])

    def initial_vector(self, rng: np.random.Generator) -> np.ndarray:
        """Initial populations followed by one fresh offset per reaction."""
        return self.pack(self.model.initial_populations, draw_offset(rng, size=self.n_reactions))

    # ------------------------------------------------------------------
    # derivative
    # ------------------------------------------------------------------
    def derivative(self, t: float, y: np.ndarray) -> np.ndarray:
        """
        dy/dt for the integrator.

        For reaction r with continuous propensity a_r:
          deterministic: dC_s/dt += d_rs * a_r for every species it changes
          stochastic:    d(offset_r)/dt = a_r, or 0 while a reactant holds
                         fewer molecules than one firing removes

        Offsets of deterministic reactions stay frozen. Waiting times are
        memoryless, so a frozen offset is as good as a fresh draw once the
        reaction turns stochastic again.
        """
        dydt = np.zeros(self.size, dtype=float)
        if self.n_reactions == 0:
            return dydt

        conc = self.concentrations(y)
        a = self.propensity.ode_evaluate_all(conc)

        det = self.deterministic
        can_fire = np.all((self._need == 0.0) | (conc[np.newaxis, :] >= self._need), axis=1)
        dydt[self.n_species:] = np.where(det, 0.0, a * can_fire)
        if self.n_species:
            dydt[: self.n_species] = self._stoich.T @ (a * det)
        return dydt
