from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Tuple

import numpy as np


class SpeciesMode(IntEnum):
    """
    Representation of a species.

    CONTINUOUS / DISCRETE pin the species to one representation for the whole
    run; DYNAMIC lets the solver reclassify it at every step.
    """
    CONTINUOUS = 0
    DISCRETE = 1
    DYNAMIC = 2


@dataclass(frozen=True)
class Species:
    """
    A chemical species.

    switch_tol : coefficient-of-variation tolerance below which a DYNAMIC
                 species is treated continuously.
    switch_min : if > 0, replaces switch_tol: a DYNAMIC species is continuous
                 once its population reaches this value.
    """
    id: int
    name: str
    initial_population: int
    user_mode: SpeciesMode = SpeciesMode.DYNAMIC
    switch_tol: float = 0.03
    switch_min: int = 0

    def __post_init__(self):
        if self.id < 0:
            raise ValueError("Species.id must be >= 0")
        if not self.name:
            raise ValueError("Species.name must be non-empty")
        if int(self.initial_population) != self.initial_population or self.initial_population < 0:
            raise ValueError(f"initial_population of '{self.name}' must be a non-negative integer")
        if self.switch_tol < 0:
            raise ValueError("Species.switch_tol must be >= 0")
        if self.switch_min < 0:
            raise ValueError("Species.switch_min must be >= 0")
        object.__setattr__(self, "user_mode", SpeciesMode(self.user_mode))

    @property
    def fixed_mode(self) -> Optional[SpeciesMode]:
        """Partition mode pinned by the user, or None for DYNAMIC species."""
        if self.user_mode == SpeciesMode.DYNAMIC:
            return None
        return self.user_mode


@dataclass(frozen=True)
class Reaction:
    """
    A reaction channel.

    species_change convention:
      species_change[s] is the integer population change of species s when the
      reaction fires once (negative for reactants, positive for products).
    affected_reactions:
      ids of reactions whose propensity may change when this one fires.
    """
    id: int
    name: str
    species_change: np.ndarray
    affected_reactions: Tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self):
        change = np.asarray(self.species_change)
        if change.ndim != 1:
            raise ValueError(f"species_change of '{self.name}' must be 1D")
        if change.size and not np.all(np.equal(np.mod(change, 1), 0)):
            raise ValueError(f"species_change of '{self.name}' must hold integers")
        change = change.astype(int)
        change.setflags(write=False)
        object.__setattr__(self, "species_change", change)
        object.__setattr__(self, "affected_reactions", tuple(int(r) for r in self.affected_reactions))

    @property
    def touched_species(self) -> np.ndarray:
        """Indices of species with a nonzero change."""
        return np.flatnonzero(self.species_change)
