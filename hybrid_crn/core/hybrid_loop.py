from __future__ import annotations
from typing import List, Optional, Tuple

import numpy as np
from tqdm.auto import tqdm

from ..errors import IntegrationError, StepRetryError
from ..logger import get_logger
from ..partition import deterministic_reaction_mask, partition_species, select_tau
from ..propensity import MassActionPropensity, PropensityEvaluator
from ..reactions import Model
from ..results import SimulationResults, TrajectoryStore
from ..results.trajectory_store import TIME_EPS
from .cancellation import CancellationToken, interrupted
from .integration_vector import IntegrationVector, draw_offset
from .solver_options import SolverOptions

logger = get_logger(__name__)

# above this many expected extra firings the Poisson draw is replaced by its mean
_POISSON_LIMIT = 1e15


class HybridSolver:
    """
    Hybrid stochastic/continuous solver.

    Every trajectory integrates the vector

        [ --- concentrations --- | --- reaction offsets --- ]

    with an ODE backend. Deterministic reactions move concentrations
    continuously; stochastic reactions move their offsets, and each offset
    crossing zero is a firing applied between integrator calls. An offset only
    advances while its reaction has enough reactant molecules to fire. Steps
    are capped by ``tau_tol`` step selection; a step whose firings would leave
    a negative population is thrown away and retried with half the step.
    """

    def __init__(
        self,
        model: Model,
        propensity: PropensityEvaluator,
        options: Optional[SolverOptions] = None,
    ):
        if propensity.n_reactions != model.n_reactions:
            raise ValueError(
                f"propensity evaluator has {propensity.n_reactions} reactions, model has {model.n_reactions}"
            )
        self.model = model
        self.propensity = propensity
        self.options = SolverOptions() if options is None else options

        if isinstance(propensity, MassActionPropensity):
            # catalysts are read by a propensity without being changed by its reaction
            model.update_affected_reactions(
                depends_on=(propensity.reactant_orders > 0) | (model.stoichiometry != 0)
            )

    # ------------------------------------------------------------------
    # run
    # ------------------------------------------------------------------
    def run(
        self,
        end_time: float,
        increment: float,
        number_trajectories: int = 1,
        seed: Optional[int] = None,
        *,
        token: Optional[CancellationToken] = None,
        progress: bool = False,
    ) -> SimulationResults:
        """
        Simulate ``number_trajectories`` independent trajectories.

        Each trajectory draws from its own generator spawned from
        ``SeedSequence(seed)``, so equal seeds give identical results. The
        cancellation token is polled before every trajectory; a cancelled run
        returns the trajectories finished so far (``results.complete`` is False).
        """
        if number_trajectories < 1:
            raise ValueError("number_trajectories must be >= 1")

        store = TrajectoryStore(
            end_time=float(end_time),
            increment=float(increment),
            number_trajectories=int(number_trajectories),
            species=self.model.species_names,
        )
        token = interrupted if token is None else token

        seed_seq = np.random.SeedSequence(seed)
        streams = seed_seq.spawn(store.number_trajectories)

        logger.info(
            "Hybrid run: %d species, %d reactions, %d trajectories, end_time=%g, increment=%g",
            self.model.n_species,
            self.model.n_reactions,
            store.number_trajectories,
            store.end_time,
            store.increment,
        )

        iterator = range(store.number_trajectories)
        if progress:
            iterator = tqdm(iterator, total=store.number_trajectories, desc="Hybrid trajectories", unit="traj")

        for traj in iterator:
            if token.cancelled:
                logger.warning(
                    "Run cancelled after %d of %d trajectories", traj, store.number_trajectories
                )
                break
            self._run_trajectory(traj, np.random.default_rng(streams[traj]), store)
            store.mark_completed(traj)

        logger.info("Hybrid run finished: %d/%d trajectories", store.completed, store.number_trajectories)
        return store.to_results(seed_entropy=seed_seq.entropy)

    # ------------------------------------------------------------------
    # one trajectory
    # ------------------------------------------------------------------
    def _run_trajectory(self, traj: int, rng: np.random.Generator, store: TrajectoryStore) -> None:
        model = self.model
        opts = self.options
        end_time = store.end_time
        increment = store.increment

        codec = IntegrationVector(model, self.propensity)
        y = codec.initial_vector(rng)
        propensities = self.propensity.ode_evaluate_all(codec.concentrations(y))
        tau_step = increment
        modes = partition_species(model, codec.concentrations(y), propensities, tau_step)

        store.record(traj, 0, codec.concentrations(y), modes)
        next_sample = 1

        if model.n_species == 0 or model.n_reactions == 0:
            store.record_until(traj, next_sample, end_time, codec.concentrations(y), modes)
            return

        integrator = opts.make_integrator(codec.derivative)
        try:
            current_time = 0.0
            retries = 0
            stop_time = end_time - TIME_EPS * max(1.0, end_time)

            while current_time < stop_time:
                modes = partition_species(model, codec.concentrations(y), propensities, tau_step)
                codec.deterministic = deterministic_reaction_mask(model, modes)

                step = min(tau_step, end_time - current_time)
                if opts.tau_tol is not None:
                    selected = select_tau(
                        model.stoichiometry,
                        propensities,
                        codec.concentrations(y),
                        ~codec.deterministic,
                        opts.tau_tol,
                    )
                    step = min(step, max(selected, opts.min_tau_step))
                next_time = end_time if step >= end_time - current_time else current_time + step
                if next_time <= current_time:
                    raise StepRetryError(
                        "Step size below floating point resolution",
                        trajectory=traj,
                        time=current_time,
                        tau_step=step,
                        retries=retries,
                    )

                result = integrator.advance(y, current_time, next_time)
                if not result.ok:
                    raise IntegrationError(
                        "ODE integrator failed",
                        trajectory=traj,
                        time=current_time,
                        status=result.status,
                    )

                reconciled = self._reconcile(codec, result.y, rng)
                if reconciled is None:
                    retries += 1
                    # halve the interval actually tried, which is shorter than tau near end_time
                    tau_step = 0.5 * (next_time - current_time)
                    logger.debug(
                        "trajectory %d: negative population at t=%g, retrying with tau=%g",
                        traj,
                        next_time,
                        tau_step,
                    )
                    if tau_step < opts.min_tau_step or retries > opts.max_retries:
                        raise StepRetryError(
                            "Step halving exhausted",
                            trajectory=traj,
                            time=current_time,
                            tau_step=tau_step,
                            retries=retries,
                        )
                    continue

                y, fired = reconciled
                current_time = result.t
                retries = 0
                propensities = self._refresh_propensities(codec, y, propensities, fired)
                next_sample = store.record_until(
                    traj, next_sample, current_time, codec.concentrations(y), modes
                )
                tau_step = min(tau_step * opts.tau_growth, increment)

            store.record_until(traj, next_sample, end_time, codec.concentrations(y), modes)
        finally:
            integrator.close()

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _reconcile(
        self,
        codec: IntegrationVector,
        y: np.ndarray,
        rng: np.random.Generator,
    ) -> Optional[Tuple[np.ndarray, List[int]]]:
        """
        Apply the firings recorded in the offsets of stochastic reactions.

        An offset x >= 0 means one firing plus Poisson(x) further firings
        within the step; the offset is then redrawn. Returns the new vector
        and the fired reaction ids, or None when a population would go
        negative (``y`` is left untouched either way).
        """
        conc = codec.concentrations(y).copy()
        offsets = codec.offsets(y).copy()
        changes = np.zeros(codec.n_species, dtype=float)
        stoich = self.model.stoichiometry

        fired: List[int] = []
        for r in np.flatnonzero(~codec.deterministic & (offsets >= 0.0)):
            overshoot = float(offsets[r])
            extra = rng.poisson(overshoot) if overshoot < _POISSON_LIMIT else round(overshoot)
            changes += (1 + int(extra)) * stoich[r]
            offsets[r] = draw_offset(rng)
            fired.append(int(r))

        conc += changes

        # integrator round-off on species untouched by firings
        roundoff = (conc < 0.0) & (conc >= -self.options.atol) & (changes == 0.0)
        conc[roundoff] = 0.0

        if np.any(conc < 0.0):
            return None
        return codec.pack(conc, offsets), fired

    def _refresh_propensities(
        self,
        codec: IntegrationVector,
        y: np.ndarray,
        propensities: np.ndarray,
        fired: List[int],
    ) -> np.ndarray:
        """
        Propensities after an accepted step.

        With no deterministic reaction active only firings changed the state,
        so only reactions that depend on the fired ones are re-evaluated.
        These values feed the partition statistics; the derivative always
        evaluates propensities afresh.
        """
        conc = codec.concentrations(y)
        if np.any(codec.deterministic):
            return self.propensity.ode_evaluate_all(conc)
        if not fired:
            return propensities

        stale = sorted({j for r in fired for j in self.model.reactions[r].affected_reactions})
        if not stale:
            # dependency graph not built for this model
            return self.propensity.ode_evaluate_all(conc)
        out = propensities.copy()
        for j in stale:
            out[j] = self.propensity.ode_evaluate(j, conc)
        return out

