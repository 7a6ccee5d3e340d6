"""AlphaDigest - Lazy in silico protein digestion.

Enumerates the candidate peptides of protein sequences under a digestion
model (whole protein, unspecific, or enzymatic with specific, semi-specific
or terminus-only specificity) within a mass window. Peptides are produced one
at a time by Numba-accelerated iterators, so proteome-scale inputs never
materialize the full combinatorial space.
"""

__version__ = "0.1.0"

from alphadigest import digestion
from alphadigest.digestion import (
    CancellationToken,
    CleavageMode,
    DigestionParameters,
    EnzymeDigestion,
    ExtendedPeptide,
    IteratorState,
    ProteinDigester,
    Specificity,
    create_sequence_iterator,
    digest_protein_list,
)
from alphadigest.enzymes import Enzyme, EnzymeRegistry
from alphadigest.exceptions import (
    ConfigurationError,
    DigestionError,
    UnsupportedResidueError,
)
from alphadigest.modifications import (
    FixedModificationResolver,
    Modification,
    ModificationType,
)
from alphadigest.residues import Residue, ResidueTable

__all__ = [
    "digestion",
    "CancellationToken",
    "CleavageMode",
    "DigestionParameters",
    "EnzymeDigestion",
    "ExtendedPeptide",
    "IteratorState",
    "ProteinDigester",
    "Specificity",
    "create_sequence_iterator",
    "digest_protein_list",
    "Enzyme",
    "EnzymeRegistry",
    "ConfigurationError",
    "DigestionError",
    "UnsupportedResidueError",
    "FixedModificationResolver",
    "Modification",
    "ModificationType",
    "Residue",
    "ResidueTable",
]
