from .reaction_types import Species, SpeciesMode, Reaction
from .model import Model

__all__ = ["Species", "SpeciesMode", "Reaction", "Model"]
