"""Protein digestion: configuration, peptide drafts and digestion iterators.

Peptides of a protein are produced lazily, one at a time:

>>> trypsin = EnzymeRegistry.default().get('Trypsin')
>>> digester = ProteinDigester(DigestionParameters.enzymatic(trypsin))
>>> for peptide in digester.iter_peptides("PEPTIDEKRPROTEINK", mass_min=500.0, mass_max=4000.0):
...     print(peptide.start, peptide.sequence, round(peptide.mass, 4))
"""

from .ambiguous import AmbiguousSequenceIterator, advance_odometer
from .builder import PeptideBuilder, in_mass_window
from .digester import (
    ProteinDigester,
    create_sequence_iterator,
    digest_protein_list,
)
from .draft import ExtendedPeptide, PeptideDraft
from .iterators import (
    CancellationToken,
    EnzymaticIterator,
    IteratorState,
    NoDigestionIterator,
    SemiSpecificIterator,
    SequenceIterator,
    SequentialEnzymeIterator,
    UnspecificIterator,
)
from .parameters import (
    CleavageMode,
    DigestionParameters,
    EnzymeDigestion,
    Specificity,
)

__all__ = [
    # Configuration
    'CleavageMode',
    'DigestionParameters',
    'EnzymeDigestion',
    'Specificity',

    # Peptides
    'ExtendedPeptide',
    'PeptideDraft',
    'PeptideBuilder',
    'in_mass_window',

    # Ambiguous sequences
    'AmbiguousSequenceIterator',
    'advance_odometer',

    # Iterators
    'CancellationToken',
    'IteratorState',
    'SequenceIterator',
    'EnzymaticIterator',
    'NoDigestionIterator',
    'SemiSpecificIterator',
    'SequentialEnzymeIterator',
    'UnspecificIterator',

    # Entry points
    'ProteinDigester',
    'create_sequence_iterator',
    'digest_protein_list',
]
