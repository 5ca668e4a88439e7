from .regime_utils import (
    reaction_statistics,
    coefficient_of_variation,
    partition_species,
    deterministic_reaction_mask,
    select_tau,
)

__all__ = [
    "reaction_statistics",
    "coefficient_of_variation",
    "partition_species",
    "deterministic_reaction_mask",
    "select_tau",
]
