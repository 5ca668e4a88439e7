from __future__ import annotations
from typing import TYPE_CHECKING, Tuple

import numpy as np

from ..reactions import SpeciesMode

if TYPE_CHECKING:
    from ..reactions import Model


def reaction_statistics(
    stoichiometry: np.ndarray,
    propensities: np.ndarray,
    populations: np.ndarray,
    tau: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Estimate mean and standard deviation of each species after a step of tau.

    Treats each reaction as a Poisson channel with constant rate over the step:
      mean_s = x_s + tau * sum_r d_rs * a_r
      sd_s   = sqrt(tau * sum_r d_rs^2 * a_r)

    Parameters
    ----------
    stoichiometry : (n_reactions, n_species) int
    propensities  : (n_reactions,) float
    populations   : (n_species,) float
    tau           : step length (>= 0)
    """
    if stoichiometry.ndim != 2:
        raise ValueError("stoichiometry must be 2D (n_reactions, n_species)")
    if propensities.shape != (stoichiometry.shape[0],):
        raise ValueError("propensities must have one entry per reaction")
    if populations.shape != (stoichiometry.shape[1],):
        raise ValueError("populations must have one entry per species")
    if tau < 0:
        raise ValueError("tau must be >= 0")

    drift = stoichiometry.T @ propensities
    variance = (stoichiometry.astype(float) ** 2).T @ propensities
    mean = populations + tau * drift
    sd = np.sqrt(np.maximum(tau * variance, 0.0))
    return mean, sd


def coefficient_of_variation(mean: np.ndarray, sd: np.ndarray) -> np.ndarray:
    """sd / mean, or inf where the mean is not positive."""
    cv = np.full(mean.shape, np.inf, dtype=float)
    positive = mean > 0
    cv[positive] = sd[positive] / mean[positive]
    return cv


def partition_species(
    model: "Model",
    populations: np.ndarray,
    propensities: np.ndarray,
    tau: float,
) -> np.ndarray:
    """
    Runtime partition of every species for the next step.

    Returns
    -------
    modes : (n_species,) int8 array of SpeciesMode.CONTINUOUS / DISCRETE

    Rule for DYNAMIC species:
      switch_min > 0 : continuous iff population >= switch_min
      otherwise      : continuous iff cv < switch_tol
    """
    n_species = model.n_species
    modes = np.empty(n_species, dtype=np.int8)
    if n_species == 0:
        return modes

    user_modes = np.array([sp.user_mode for sp in model.species], dtype=np.int8)
    switch_tol = np.array([sp.switch_tol for sp in model.species], dtype=float)
    switch_min = np.array([sp.switch_min for sp in model.species], dtype=float)

    mean, sd = reaction_statistics(model.stoichiometry, propensities, populations, tau)
    cv = coefficient_of_variation(mean, sd)

    by_min = (switch_min > 0) & (populations >= switch_min)
    by_cv = (switch_min == 0) & (cv < switch_tol)
    dynamic_continuous = by_min | by_cv

    modes[:] = np.where(dynamic_continuous, SpeciesMode.CONTINUOUS, SpeciesMode.DISCRETE)
    fixed = user_modes != SpeciesMode.DYNAMIC
    modes[fixed] = user_modes[fixed]
    return modes


def deterministic_reaction_mask(model: "Model", modes: np.ndarray) -> np.ndarray:
    """
    (n_reactions,) bool mask: True where every species the reaction changes is
    continuous. Such reactions are integrated as ODE terms; all others fire
    stochastically through their reaction offsets.
    """
    if model.n_reactions == 0:
        return np.zeros(0, dtype=bool)
    touched = model.stoichiometry != 0
    discrete = modes == SpeciesMode.DISCRETE
    return ~np.any(touched & discrete[np.newaxis, :], axis=1)


def select_tau(
    stoichiometry: np.ndarray,
    propensities: np.ndarray,
    populations: np.ndarray,
    stochastic: np.ndarray,
    tau_tol: float,
) -> float:
    """
    Largest step over which the stochastic reactions are not expected to move
    any species they consume by more than ``tau_tol`` of its population (and
    never by less than one molecule):

      bound_s = max(tau_tol * x_s, 1)
      tau     = min_s min(bound_s / |mu_s|, bound_s**2 / sigma2_s)

    mu_s and sigma2_s are the drift and variance of species s under the active
    stochastic reactions only. Returns inf when no such reaction consumes
    anything.
    """
    if tau_tol <= 0:
        raise ValueError("tau_tol must be > 0")

    active = np.asarray(stochastic, dtype=bool) & (propensities > 0)
    if not np.any(active):
        return np.inf

    stoich = stoichiometry[active].astype(float)
    a = propensities[active]
    consumed = np.any(stoich < 0, axis=0)
    if not np.any(consumed):
        return np.inf

    mu = np.abs(stoich.T @ a)[consumed]
    sigma2 = ((stoich ** 2).T @ a)[consumed]
    bound = np.maximum(tau_tol * np.maximum(populations[consumed], 0.0), 1.0)

    by_mean = np.divide(bound, mu, out=np.full(bound.shape, np.inf), where=mu > 0)
    by_var = np.divide(bound ** 2, sigma2, out=np.full(bound.shape, np.inf), where=sigma2 > 0)
    return float(min(by_mean.min(), by_var.min()))
