"""Mass and modification bookkeeping shared by all digestion iterators.

A :class:`PeptideBuilder` is created per protein. It grows peptide drafts
residue by residue, resolves fixed and terminal modifications through the
modification resolver, applies the mass window on finalization and provides
the per-position mass bounds used for pruning.

All positions are protein indices, so that protein terminus modifications
are resolved correctly when only a sub-range of the protein is digested.
"""

from functools import cached_property
from typing import Iterator, Optional, Tuple

import numpy as np

from ..constants import H2O_MASS
from ..modifications import FixedModificationResolver
from ..residues import ResidueTable, encode_sequence_to_ord
from .ambiguous import AmbiguousSequenceIterator
from .draft import ExtendedPeptide, PeptideDraft

# Absorbs rounding in the cumulative sums, candidates are checked exactly
MASS_TOLERANCE = 1e-6


def in_mass_window(mass: float, mass_min: Optional[float], mass_max: Optional[float]) -> bool:
    """Inclusive mass window check, None bounds are open."""
    return (mass_min is None or mass >= mass_min) and (mass_max is None or mass <= mass_max)


class PeptideBuilder:
    """Builds peptides of one protein.

    Parameters
    ----------
    protein_sequence : str
        The protein
    residues : ResidueTable
        Residue masses and combination codes
    resolver : FixedModificationResolver
        Fixed modifications
    max_combinations : int
        Ambiguity budget per peptide
    """

    def __init__(
        self,
        protein_sequence: str,
        residues: ResidueTable,
        resolver: FixedModificationResolver,
        max_combinations: int,
    ):
        self.protein_sequence = protein_sequence
        self.residues = residues
        self.resolver = resolver
        self.max_combinations = max_combinations
        self.min_terminal_mass = resolver.min_terminal_mass
        self.max_terminal_mass = resolver.max_terminal_mass

    # -------------------------------------------------------------------------
    # Per-position tables
    # -------------------------------------------------------------------------

    @cached_property
    def sequence_ord(self) -> np.ndarray:
        return encode_sequence_to_ord(self.protein_sequence)

    @cached_property
    def combination_prefix(self) -> np.ndarray:
        """Cumulative number of combination residues, length ``len + 1``."""
        flags = self.residues.combination_flags[self.sequence_ord]
        return np.concatenate(([0], np.cumsum(flags, dtype=np.int64)))

    @cached_property
    def _position_mass_bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        min_masses = self.residues.min_masses[self.sequence_ord].astype(np.float64)
        max_masses = self.residues.max_masses[self.sequence_ord].astype(np.float64)

        # Fix-ups where a concrete residue or an alternative carries a modification
        touched = {
            residue.code for residue in self.residues
            if any(aa in self.resolver.modified_residues for aa in residue.concrete_codes)
        }
        if touched:
            for index, code in enumerate(self.protein_sequence):
                if code in touched:
                    masses = [
                        self.residues.mass(aa) + self.resolver.modification_mass(
                            self.resolver.fixed_modification_at(aa, self.protein_sequence, index)
                        )
                        for aa in self.residues.alternatives(code)
                    ]
                    min_masses[index] = min(masses)
                    max_masses[index] = max(masses)
        return min_masses, max_masses

    @cached_property
    def mass_prefix(self) -> Tuple[np.ndarray, np.ndarray]:
        """Cumulative lightest and heaviest residue masses, length ``len + 1``."""
        min_masses, max_masses = self._position_mass_bounds
        return (
            np.concatenate(([0.0], np.cumsum(min_masses))),
            np.concatenate(([0.0], np.cumsum(max_masses))),
        )

    def n_combinations(self, start: int, end: int) -> int:
        """Number of combination residues in ``[start, end)``."""
        prefix = self.combination_prefix
        return int(prefix[end] - prefix[start])

    def core_mass_bounds(self, start: int, end: int) -> Tuple[float, float]:
        """Lightest and heaviest mass of ``[start, end)`` with residue modifications."""
        min_prefix, max_prefix = self.mass_prefix
        return float(min_prefix[end] - min_prefix[start]), float(max_prefix[end] - max_prefix[start])

    def peptide_mass_bounds(self, start: int, end: int) -> Tuple[float, float]:
        """Lightest and heaviest peptide mass of ``[start, end)`` including termini and water."""
        lightest, heaviest = self.core_mass_bounds(start, end)
        return (
            lightest + self.min_terminal_mass + H2O_MASS,
            heaviest + self.max_terminal_mass + H2O_MASS,
        )

    def exceeds_mass_max(self, core_mass: float, mass_max: Optional[float]) -> bool:
        """Whether no peptide with this core mass or more can be light enough."""
        return mass_max is not None and core_mass + self.min_terminal_mass + H2O_MASS > mass_max

    # -------------------------------------------------------------------------
    # Drafts
    # -------------------------------------------------------------------------

    def extend_draft(self, draft: PeptideDraft, index: int, aa: Optional[str] = None) -> PeptideDraft:
        """Append the residue at a protein index, ``aa`` overrides the protein residue."""
        aa = self.protein_sequence[index] if aa is None else aa
        modification = self.resolver.fixed_modification_at(aa, self.protein_sequence, index)
        mass = self.residues.mass(aa) + self.resolver.modification_mass(modification)
        draft.append(aa, mass, modification)
        return draft

    def draft_for(
        self,
        start: int,
        sequence: str,
        mass_max: Optional[float] = None,
        missed_cleavages: int = 0,
    ) -> Optional[PeptideDraft]:
        """Draft of a concrete sequence at a protein position.

        Returns None as soon as the growing draft cannot end up below
        ``mass_max`` anymore.
        """
        draft = PeptideDraft(missed_cleavages=missed_cleavages)
        for offset, aa in enumerate(sequence):
            self.extend_draft(draft, start + offset, aa)
            if self.exceeds_mass_max(draft.mass, mass_max):
                return None
        return draft

    def finalize(
        self,
        draft: PeptideDraft,
        start: int,
        mass_min: Optional[float] = None,
        mass_max: Optional[float] = None,
        missed_cleavages: Optional[int] = None,
    ) -> Optional[ExtendedPeptide]:
        """Resolve terminal modifications and apply the mass window.

        Parameters
        ----------
        draft : PeptideDraft
            Non-empty draft, left unchanged
        start : int
            Protein index of the first residue of the draft
        mass_min, mass_max : float, optional
            Inclusive mass window
        missed_cleavages : int, optional
            Overrides the count recorded on the draft

        Returns
        -------
        Optional[ExtendedPeptide]
            The peptide, None if its mass is outside the window
        """
        n_term = self.resolver.terminal_modification(draft, self.protein_sequence, start, True)
        c_term = self.resolver.terminal_modification(
            draft, self.protein_sequence, start + len(draft) - 1, False
        )
        mass = (
            draft.mass
            + self.resolver.modification_mass(n_term)
            + self.resolver.modification_mass(c_term)
            + H2O_MASS
        )
        if not in_mass_window(mass, mass_min, mass_max):
            return None
        return ExtendedPeptide(
            sequence=draft.sequence,
            start=start,
            mass=mass,
            modifications=tuple(
                (name, position) for position, name in sorted(draft.modifications.items())
            ),
            n_term_modification=n_term,
            c_term_modification=c_term,
            missed_cleavages=draft.missed_cleavages if missed_cleavages is None else missed_cleavages,
        )

    def build_peptide(
        self,
        start: int,
        sequence: str,
        mass_min: Optional[float] = None,
        mass_max: Optional[float] = None,
        missed_cleavages: int = 0,
    ) -> Optional[ExtendedPeptide]:
        """Peptide of a concrete sequence at a protein position, None if out of the window."""
        if not sequence:
            return None
        draft = self.draft_for(start, sequence, mass_max, missed_cleavages)
        if draft is None:
            return None
        return self.finalize(draft, start, mass_min, mass_max)

    # -------------------------------------------------------------------------
    # Ambiguous windows
    # -------------------------------------------------------------------------

    def expander(
        self,
        start: int,
        end: int,
        mass_min: Optional[float] = None,
        mass_max: Optional[float] = None,
    ) -> AmbiguousSequenceIterator:
        """Expander of the protein window ``[start, end)``."""
        return AmbiguousSequenceIterator(
            self.protein_sequence[start:end],
            self.residues,
            self.max_combinations,
            mass_min,
            mass_max,
            mass_bounds=self.peptide_mass_bounds(start, end),
        )

    def expand_window(
        self,
        start: int,
        end: int,
        mass_min: Optional[float] = None,
        mass_max: Optional[float] = None,
        missed_cleavages: int = 0,
    ) -> Iterator[Optional[ExtendedPeptide]]:
        """Peptides of every concrete assignment of a window, in odometer order.

        Yields None for assignments outside the mass window so that callers
        get control back after every candidate.
        """
        for sequence in self.expander(start, end, mass_min, mass_max):
            yield self.build_peptide(start, sequence, mass_min, mass_max, missed_cleavages)
