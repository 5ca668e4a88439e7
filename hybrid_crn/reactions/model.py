from __future__ import annotations
from dataclasses import replace
from typing import List, Optional, Sequence

import numpy as np

from .reaction_types import Reaction, Species, SpeciesMode


class Model:
    """
    Species and reactions of a reaction network.

    Ids are dense and follow input order. The model is read-only apart from
    ``update_affected_reactions``, which rebuilds the dependency graph.
    """

    def __init__(self, species: Sequence[Species], reactions: Sequence[Reaction]):
        self.species: tuple = tuple(species)
        self.reactions: tuple = tuple(reactions)

        n_species = len(self.species)
        if [sp.id for sp in self.species] != list(range(n_species)):
            raise ValueError("species ids must be dense and ordered 0..S-1")
        if [rx.id for rx in self.reactions] != list(range(len(self.reactions))):
            raise ValueError("reaction ids must be dense and ordered 0..R-1")
        if len(set(self.species_names)) != n_species:
            raise ValueError("species names must be unique")
        if len(set(self.reaction_names)) != len(self.reactions):
            raise ValueError("reaction names must be unique")

        for rx in self.reactions:
            if rx.species_change.shape != (n_species,):
                raise ValueError(
                    f"Reaction '{rx.name}' changes {rx.species_change.shape[0]} species, "
                    f"model has {n_species}"
                )
            for r in rx.affected_reactions:
                if not 0 <= r < len(self.reactions):
                    raise ValueError(f"Reaction '{rx.name}' lists unknown affected reaction {r}")

        self._stoichiometry = np.zeros((len(self.reactions), n_species), dtype=int)
        for rx in self.reactions:
            self._stoichiometry[rx.id] = rx.species_change
        self._stoichiometry.setflags(write=False)

    @classmethod
    def from_names(
        cls,
        species_names: Sequence[str],
        species_populations: Sequence[int],
        reaction_names: Sequence[str],
        species_changes: Optional[Sequence[Sequence[int]]] = None,
        user_modes: Optional[Sequence[SpeciesMode]] = None,
    ) -> "Model":
        """
        Build a model from parallel name/population lists.

        species_changes : one row of length S per reaction (zeros if omitted).
        user_modes      : one mode per species (DYNAMIC if omitted).
        """
        if len(species_names) != len(species_populations):
            raise ValueError("species_names and species_populations must have the same length")
        if user_modes is not None and len(user_modes) != len(species_names):
            raise ValueError("user_modes must have one entry per species")
        if species_changes is not None and len(species_changes) != len(reaction_names):
            raise ValueError("species_changes must have one row per reaction")

        species = [
            Species(
                id=i,
                name=str(name),
                initial_population=int(pop),
                user_mode=SpeciesMode.DYNAMIC if user_modes is None else user_modes[i],
            )
            for i, (name, pop) in enumerate(zip(species_names, species_populations))
        ]

        reactions = []
        for j, name in enumerate(reaction_names):
            if species_changes is None:
                change = np.zeros(len(species), dtype=int)
            else:
                change = np.asarray(species_changes[j])
            reactions.append(Reaction(id=j, name=str(name), species_change=change))

        model = cls(species, reactions)
        model.update_affected_reactions()
        return model

    # ------------------------------------------------------------------
    # dependency graph
    # ------------------------------------------------------------------
    def update_affected_reactions(self, depends_on: Optional[np.ndarray] = None) -> None:
        """
        Rebuild ``affected_reactions`` for every reaction.

        depends_on : optional (n_reactions, n_species) bool matrix of the
                     species each propensity reads. Defaults to the species
                     each reaction changes.

        Reaction j is affected by reaction i when i changes a species j
        depends on.
        """
        touched = self._stoichiometry != 0
        if depends_on is None:
            depends_on = touched
        else:
            depends_on = np.asarray(depends_on, dtype=bool)
            if depends_on.shape != touched.shape:
                raise ValueError(f"depends_on must have shape {touched.shape}")
        shared = (touched.astype(int) @ depends_on.T.astype(int)) > 0
        self.reactions = tuple(
            replace(rx, affected_reactions=tuple(int(j) for j in np.flatnonzero(shared[rx.id])))
            for rx in self.reactions
        )

    # ------------------------------------------------------------------
    # views
    # ------------------------------------------------------------------
    @property
    def n_species(self) -> int:
        return len(self.species)

    @property
    def n_reactions(self) -> int:
        return len(self.reactions)

    @property
    def species_names(self) -> List[str]:
        return [sp.name for sp in self.species]

    @property
    def reaction_names(self) -> List[str]:
        return [rx.name for rx in self.reactions]

    @property
    def stoichiometry(self) -> np.ndarray:
        """Read-only (n_reactions, n_species) matrix of species changes."""
        return self._stoichiometry

    @property
    def initial_populations(self) -> np.ndarray:
        return np.array([sp.initial_population for sp in self.species], dtype=float)

    def species_index(self, name: str) -> int:
        for sp in self.species:
            if sp.name == name:
                return sp.id
        raise KeyError(f"Unknown species '{name}'. Known: {self.species_names}")

    def __repr__(self) -> str:
        return f"Model(species={self.species_names}, reactions={self.reaction_names})"
