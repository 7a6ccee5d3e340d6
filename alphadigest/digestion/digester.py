"""Protein digestion entry points.

- :func:`create_sequence_iterator` picks the iterator matching the digestion
  parameters for one protein
- :class:`ProteinDigester` bundles parameters, residue table and
  modification resolver for repeated use
- :func:`digest_protein_list` digests many proteins and builds the
  peptide-to-protein mapping

Examples
--------
>>> trypsin = EnzymeRegistry.default().get('Trypsin')
>>> digester = ProteinDigester(DigestionParameters.enzymatic(trypsin, max_missed_cleavages=1))
>>> [p.sequence for p in digester.digest("PEPTIDEKRPROTEINK")]
['PEPTIDEK', 'PEPTIDEKRPROTEINK', 'RPROTEINK']
"""

import logging
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Tuple

from ..modifications import FixedModificationResolver
from ..residues import ResidueTable
from .builder import PeptideBuilder
from .draft import ExtendedPeptide
from .iterators import (
    CancellationToken,
    NoDigestionIterator,
    SequenceIterator,
    SequentialEnzymeIterator,
    UnspecificIterator,
    single_enzyme_iterator,
)
from .parameters import CleavageMode, DigestionParameters

logger = logging.getLogger(__name__)


def _whole_protein(builder, parameters, mass_min, mass_max, token, start, end):
    return NoDigestionIterator(builder, mass_min, mass_max, token, start, end)


def _unspecific(builder, parameters, mass_min, mass_max, token, start, end):
    return UnspecificIterator(builder, mass_min, mass_max, token, start, end)


def _enzymatic(builder, parameters, mass_min, mass_max, token, start, end):
    if len(parameters.enzymes) == 1:
        return single_enzyme_iterator(builder, parameters.enzymes[0], mass_min, mass_max, token, start, end)
    return SequentialEnzymeIterator(builder, parameters.enzymes, mass_min, mass_max, token, start, end)


ITERATOR_FACTORIES: Dict[CleavageMode, Callable[..., SequenceIterator]] = {
    CleavageMode.WHOLE_PROTEIN: _whole_protein,
    CleavageMode.UNSPECIFIC: _unspecific,
    CleavageMode.ENZYME: _enzymatic,
}


def create_sequence_iterator(
    protein_sequence: str,
    parameters: DigestionParameters,
    mass_min: Optional[float] = None,
    mass_max: Optional[float] = None,
    residues: Optional[ResidueTable] = None,
    resolver: Optional[FixedModificationResolver] = None,
    cancellation_token: Optional[CancellationToken] = None,
    start: int = 0,
    end: Optional[int] = None,
) -> SequenceIterator:
    """Iterator over the peptides of one protein.

    Parameters
    ----------
    protein_sequence : str
        Protein sequence of one-letter codes
    parameters : DigestionParameters
        Cleavage mode and enzymes
    mass_min, mass_max : float, optional
        Inclusive peptide mass window in Da, None for no bound
    residues : ResidueTable, optional
        Residue table, the default table if None
    resolver : FixedModificationResolver, optional
        Fixed modifications, none if None
    cancellation_token : CancellationToken, optional
        Token to stop the iteration from outside
    start, end : int
        Range of the protein to digest, the whole protein by default

    Returns
    -------
    SequenceIterator
        Lazy, single-pass iterator of ExtendedPeptide

    Raises
    ------
    UnsupportedResidueError
        If the digested range contains an unknown residue code
    """
    builder = PeptideBuilder(
        protein_sequence,
        ResidueTable.default() if residues is None else residues,
        FixedModificationResolver() if resolver is None else resolver,
        parameters.max_combinations,
    )
    factory = ITERATOR_FACTORIES[parameters.cleavage_mode]
    return factory(builder, parameters, mass_min, mass_max, cancellation_token, start, end)


class ProteinDigester:
    """Digests proteins with fixed parameters, residues and modifications.

    The residue table and the resolver are built once and shared read-only
    by every iterator, iterators themselves are independent and can run on
    separate threads.
    """

    def __init__(
        self,
        parameters: DigestionParameters,
        residues: Optional[ResidueTable] = None,
        resolver: Optional[FixedModificationResolver] = None,
    ):
        self.parameters = parameters
        self.residues = ResidueTable.default() if residues is None else residues
        self.resolver = FixedModificationResolver() if resolver is None else resolver

    def iter_peptides(
        self,
        protein_sequence: str,
        mass_min: Optional[float] = None,
        mass_max: Optional[float] = None,
        cancellation_token: Optional[CancellationToken] = None,
        start: int = 0,
        end: Optional[int] = None,
    ) -> SequenceIterator:
        """Lazy iterator over the peptides of a protein, see :func:`create_sequence_iterator`."""
        return create_sequence_iterator(
            protein_sequence,
            self.parameters,
            mass_min,
            mass_max,
            self.residues,
            self.resolver,
            cancellation_token,
            start,
            end,
        )

    def digest(
        self,
        protein_sequence: str,
        mass_min: Optional[float] = None,
        mass_max: Optional[float] = None,
    ) -> List[ExtendedPeptide]:
        """All peptides of a protein as a list."""
        return list(self.iter_peptides(protein_sequence, mass_min, mass_max))


def digest_protein_list(
    proteins: List[Tuple[str, str, str]],
    digester: ProteinDigester,
    mass_min: Optional[float] = None,
    mass_max: Optional[float] = None,
) -> Tuple[List[str], Dict[int, List[str]], Dict[str, Dict[str, str]]]:
    """Digest list of proteins and build peptide-to-protein mapping.

    Parameters
    ----------
    proteins : List[Tuple[str, str, str]]
        List of (protein_id, sequence, description) tuples
    digester : ProteinDigester
        Digestion settings
    mass_min, mass_max : float, optional
        Inclusive peptide mass window in Da

    Returns
    -------
    unique_peptides : List[str]
        Unique peptide sequences in order of first occurrence
    peptide_to_proteins : Dict[int, List[str]]
        Index-based mapping: peptide_idx -> list of protein IDs
    protein_db : Dict[str, Dict[str, str]]
        Protein database: protein_id -> {"sequence", "description", "gene_name"}

    Examples
    --------
    >>> proteins = [("P12345", "PEPTIDEKRPROTEINK", "Description GN=ABC1")]
    >>> peptides, mapping, protein_db = digest_protein_list(proteins, digester)
    >>> protein_db["P12345"]["gene_name"]
    'ABC1'
    """
    logger.info(f"Digesting {len(proteins):,} proteins...")

    protein_db = {}
    seq_to_proteins = defaultdict(list)
    total_peptides_generated = 0

    for idx, (protein_id, sequence, description) in enumerate(proteins):
        gene_name = ""
        if "GN=" in description:
            gn_start = description.index("GN=") + 3
            gn_end = description.find(" ", gn_start)
            gene_name = description[gn_start:gn_end] if gn_end != -1 else description[gn_start:]

        protein_db[protein_id] = {
            "sequence": sequence,
            "description": description,
            "gene_name": gene_name,
        }

        for peptide in digester.iter_peptides(sequence, mass_min, mass_max):
            proteins_of_peptide = seq_to_proteins[peptide.sequence]
            # A peptide found twice in one protein maps once
            if not proteins_of_peptide or proteins_of_peptide[-1] != protein_id:
                proteins_of_peptide.append(protein_id)
            total_peptides_generated += 1

        if (idx + 1) % 5000 == 0:
            logger.info(
                f"  Processed {idx + 1:,} proteins: "
                f"{len(seq_to_proteins):,} unique peptides"
            )

    unique_peptides = list(seq_to_proteins.keys())
    peptide_to_proteins = {
        i: seq_to_proteins[peptide]
        for i, peptide in enumerate(unique_peptides)
    }

    logger.info("Digestion complete:")
    logger.info(f"  Total proteins: {len(protein_db):,}")
    logger.info(f"  Total peptides generated: {total_peptides_generated:,}")
    logger.info(f"  Unique peptides: {len(unique_peptides):,}")
    if unique_peptides:
        shared_peptides = sum(1 for prots in peptide_to_proteins.values() if len(prots) > 1)
        logger.info(
            f"  Deduplication factor: "
            f"{total_peptides_generated / len(unique_peptides):.1f}x"
        )
        logger.info(
            f"  Shared peptides: {shared_peptides} "
            f"({shared_peptides / len(unique_peptides) * 100:.1f}%)"
        )

    return unique_peptides, peptide_to_proteins, protein_db
