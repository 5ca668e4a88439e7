from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from ..propensity import MassActionPropensity
from ..reactions import Model, Reaction, Species, SpeciesMode
from ..results import SimulationResults
from .cancellation import CancellationToken
from .hybrid_loop import HybridSolver
from .solver_options import SolverOptions


@dataclass
class HybridModel:
    """
    User-friendly wrapper around Model + MassActionPropensity + HybridSolver.

    Users only specify:
      - species and initial populations
      - per-species representation (continuous / discrete / dynamic)
      - mass-action reactions

    Example
    -------
        m = HybridModel(species=["A", "B"])
        m.initial(A=100)
        m.add_reaction({"A": 1}, {"B": 1}, rate=0.5)
        res = m.build().run(time=10.0, dt=1.0, trajectories=5, seed=1)
    """

    species: List[str]

    def __post_init__(self):
        if not self.species:
            raise ValueError("species must be non-empty")
        if len(set(self.species)) != len(self.species):
            raise ValueError("species must be unique")

        self._initial: Dict[str, int] = {sp: 0 for sp in self.species}
        self._species_kwargs: Dict[str, dict] = {sp: {} for sp in self.species}
        self._reactions: List[dict] = []

        self._model: Optional[Model] = None
        self._solver: Optional[HybridSolver] = None

    # ------------------------------------------------------------------
    # configuration
    # ------------------------------------------------------------------
    def initial(self, **populations: int) -> "HybridModel":
        for sp, value in populations.items():
            self._check_species(sp)
            self._initial[sp] = int(value)
        self._invalidate()
        return self

    def species_options(
        self,
        name: str,
        *,
        mode: Optional[SpeciesMode] = None,
        switch_tol: Optional[float] = None,
        switch_min: Optional[int] = None,
    ) -> "HybridModel":
        self._check_species(name)
        opts = self._species_kwargs[name]
        if mode is not None:
            opts["user_mode"] = SpeciesMode(mode)
        if switch_tol is not None:
            opts["switch_tol"] = float(switch_tol)
        if switch_min is not None:
            opts["switch_min"] = int(switch_min)
        self._invalidate()
        return self

    def add_reaction(
        self,
        reactants: Dict[str, int],
        products: Dict[str, int],
        *,
        rate: float,
        name: Optional[str] = None,
    ) -> "HybridModel":
        for token_dict in (reactants, products):
            for sp, n in token_dict.items():
                self._check_species(sp)
                if int(n) < 0:
                    raise ValueError(f"stoichiometry of '{sp}' must be >= 0")
        if rate < 0:
            raise ValueError("rate must be >= 0")

        if name is None:
            name = f"r{len(self._reactions) + 1}"
        self._reactions.append({
            "name": str(name),
            "reactants": {sp: int(n) for sp, n in reactants.items()},
            "products": {sp: int(n) for sp, n in products.items()},
            "rate": float(rate),
        })
        self._invalidate()
        return self

    # ------------------------------------------------------------------
    # build
    # ------------------------------------------------------------------
    def build(self, options: Optional[SolverOptions] = None) -> "HybridModel":
        index = {sp: i for i, sp in enumerate(self.species)}
        n_species = len(self.species)
        n_reactions = len(self._reactions)

        species = [
            Species(id=i, name=sp, initial_population=self._initial[sp], **self._species_kwargs[sp])
            for i, sp in enumerate(self.species)
        ]

        orders = np.zeros((n_reactions, n_species), dtype=int)
        reactions = []
        for j, rec in enumerate(self._reactions):
            change = np.zeros(n_species, dtype=int)
            for sp, n in rec["reactants"].items():
                orders[j, index[sp]] += n
                change[index[sp]] -= n
            for sp, n in rec["products"].items():
                change[index[sp]] += n
            reactions.append(Reaction(id=j, name=rec["name"], species_change=change))

        model = Model(species, reactions)

        propensity = MassActionPropensity(
            rates=[rec["rate"] for rec in self._reactions],
            reactant_orders=orders.reshape(n_reactions, n_species),
        )

        self._model = model
        self._solver = HybridSolver(model, propensity, options)
        return self

    # ------------------------------------------------------------------
    # running
    # ------------------------------------------------------------------
    def run(
        self,
        *,
        time: float,
        dt: float,
        trajectories: int = 1,
        seed: Optional[int] = None,
        token: Optional[CancellationToken] = None,
        progress: bool = False,
    ) -> SimulationResults:
        return self.solver.run(
            end_time=float(time),
            increment=float(dt),
            number_trajectories=int(trajectories),
            seed=seed,
            token=token,
            progress=bool(progress),
        )

    def metadata(self) -> dict:
        model = self.model
        opts = self.solver.options
        return {
            "model": "Hybrid reaction network",
            "species": list(self.species),
            "initial_populations": dict(self._initial),
            "modes": {sp.name: sp.user_mode.name for sp in model.species},
            "reactions": [dict(rec) for rec in self._reactions],
            "atol": float(opts.atol),
            "rtol": float(opts.rtol),
            "integrator": opts.integrator.__name__,
        }

    # ------------------------------------------------------------------
    # inspection
    # ------------------------------------------------------------------
    def describe_reactions(self) -> str:
        """One line per reaction, e.g. ``r1: A + 2 B -> C  (k=0.5)``."""

        def side(terms: Dict[str, int]) -> str:
            parts = [sp if n == 1 else f"{n} {sp}" for sp, n in terms.items() if n > 0]
            return " + ".join(parts) if parts else "0"

        return "\n".join(
            f"{rec['name']}: {side(rec['reactants'])} -> {side(rec['products'])}  (k={rec['rate']:g})"
            for rec in self._reactions
        )

    @property
    def model(self) -> Model:
        if self._model is None:
            raise RuntimeError("Model not built yet. Call build() first.")
        return self._model

    @property
    def solver(self) -> HybridSolver:
        if self._solver is None:
            raise RuntimeError("Model not built yet. Call build() first.")
        return self._solver

    def _check_species(self, name: str) -> None:
        if name not in self._initial:
            raise ValueError(f"Unknown species '{name}'. Known: {self.species}")

    def _invalidate(self) -> None:
        self._model = None
        self._solver = None
