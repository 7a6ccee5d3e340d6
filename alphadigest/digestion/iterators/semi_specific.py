"""Semi-specific and terminus-only enzymatic digestion.

The range is scanned from cleavage boundary to boundary. At boundary ``p``
with next boundary ``q``, every candidate starting in ``[p, q)`` is produced:

- N-terminus specific: the windows ``[p, e)`` up to the last end within the
  missed cleavage budget
- C-terminus specific: for every boundary ``b`` reachable from ``p`` within
  the missed cleavage budget, the windows ``[s, b)`` with ``p <= s < q``

Each window is produced exactly once, so no deduplication is needed. Concrete
windows are grown or shrunk one residue at a time on a draft, windows with
combination residues are expanded when they are within the ambiguity budget,
independently of the budget of any longer window containing them.

Candidates of one boundary are emitted by ascending start, then ascending end
(ambiguous windows in odometer order).
"""

import logging
from typing import Iterator, List, Optional, Sequence

import numpy as np

from ...enzymes import Enzyme
from ..builder import MASS_TOLERANCE
from ..draft import ExtendedPeptide, PeptideDraft
from ..parameters import Specificity
from .base import SequenceIterator
from .enzymatic import find_boundaries

logger = logging.getLogger(__name__)


class SemiSpecificIterator(SequenceIterator):
    """Peptides specific at one terminus at least.

    Parameters
    ----------
    builder : PeptideBuilder
        Builder of the protein to digest
    enzyme : Enzyme
        The enzyme
    max_missed_cleavages : int
        Missed cleavage budget of every peptide
    specificity : Specificity
        SEMI_SPECIFIC, SPECIFIC_N_TERM_ONLY or SPECIFIC_C_TERM_ONLY
    mass_min, mass_max, cancellation_token, start, end
        See :class:`SequenceIterator`
    """

    def __init__(
        self,
        builder,
        enzyme: Enzyme,
        max_missed_cleavages: int,
        specificity: Specificity,
        mass_min=None,
        mass_max=None,
        cancellation_token=None,
        start=0,
        end=None,
    ):
        super().__init__(builder, mass_min, mass_max, cancellation_token, start, end)
        if not (specificity.slides_c_term or specificity.slides_n_term):
            raise ValueError(f"Specificity {specificity.value} has no free terminus")
        self.enzyme = enzyme
        self.max_missed_cleavages = max_missed_cleavages
        self.specificity = specificity

        definite, boundaries = find_boundaries(builder, enzyme, self.start, self.end)
        self._definite_prefix = np.concatenate(([0], np.cumsum(definite, dtype=np.int64)))
        self._boundaries: List[int] = []
        if self.end > self.start:
            self._boundaries = [self.start] + [int(b) for b in boundaries] + [self.end]
        self._cursor = 0

    def _definite_sites(self, start: int, end: int) -> int:
        """Definite cleavage sites strictly inside ``[start, end)``."""
        if end - start < 2:
            return 0
        prefix = self._definite_prefix
        return int(prefix[end - self.start] - prefix[start - self.start + 1])

    def _scan(self) -> bool:
        if self._cursor >= len(self._boundaries) - 1:
            return False
        index = self._cursor
        self._cursor += 1
        start = self._boundaries[index]
        segment_end = self._boundaries[index + 1]

        ends = []
        for end in self._boundaries[index + 1:]:
            if self._definite_sites(start, end) > self.max_missed_cleavages:
                break
            ends.append(end)

        candidates = []
        for peptide in self._segment_candidates(start, segment_end, ends):
            if self.cancellation_token.cancelled:
                return True
            if peptide is not None:
                candidates.append(peptide)
        candidates.sort(key=lambda peptide: (peptide.start, peptide.end))
        for peptide in candidates:
            self._enqueue(peptide)
        return self._cursor < len(self._boundaries) - 1

    def _segment_candidates(
        self, start: int, segment_end: int, ends: Sequence[int]
    ) -> Iterator[Optional[ExtendedPeptide]]:
        n_term_specific = self.specificity.slides_c_term
        c_term_specific = self.specificity.slides_n_term
        if n_term_specific:
            c_term_ends = frozenset(ends) if c_term_specific else frozenset()
            yield from self._n_term_specific(start, ends[-1], c_term_ends)
        if c_term_specific:
            # [start, end) windows already came with the N-terminus specific ones
            first_start = start + 1 if n_term_specific else start
            for end in ends:
                yield from self._c_term_specific(first_start, segment_end, end)

    def _n_term_specific(self, start: int, last_end: int, c_term_ends) -> Iterator[Optional[ExtendedPeptide]]:
        """Windows ``[start, e)`` by ascending ``e``."""
        builder = self.builder
        draft = PeptideDraft()
        for end in range(start + 1, last_end + 1):
            lightest, _ = builder.peptide_mass_bounds(start, end)
            if self.mass_max is not None and lightest > self.mass_max + MASS_TOLERANCE:
                return
            n_combinations = builder.n_combinations(start, end)
            if n_combinations > builder.max_combinations:
                logger.debug(
                    f"Stopping windows at {start}: more than "
                    f"{builder.max_combinations} combination residues"
                )
                return
            if n_combinations > 0:
                yield from self._ambiguous_window(start, end, True, end in c_term_ends)
                continue
            builder.extend_draft(draft, end - 1)
            yield builder.finalize(
                draft, start, self.mass_min, self.mass_max,
                missed_cleavages=self._definite_sites(start, end),
            )

    def _c_term_specific(self, first_start: int, segment_end: int, end: int) -> Iterator[Optional[ExtendedPeptide]]:
        """Windows ``[s, end)`` for ``first_start <= s < segment_end`` by ascending ``s``."""
        builder = self.builder
        draft = None
        draft_start = first_start
        for start in range(first_start, segment_end):
            lightest, heaviest = builder.peptide_mass_bounds(start, end)
            if self.mass_min is not None and heaviest < self.mass_min - MASS_TOLERANCE:
                return
            n_combinations = builder.n_combinations(start, end)
            if n_combinations > 0:
                if n_combinations <= builder.max_combinations:
                    yield from self._ambiguous_window(start, end, False, True)
                continue
            if self.mass_max is not None and lightest > self.mass_max + MASS_TOLERANCE:
                continue
            if draft is None:
                draft = builder.draft_for(start, self.protein_sequence[start:end])
                draft_start = start
            while draft_start < start:
                draft.pop_first()
                draft_start += 1
            yield builder.finalize(
                draft, start, self.mass_min, self.mass_max,
                missed_cleavages=self._definite_sites(start, end),
            )

    def _ambiguous_window(
        self, start: int, end: int, n_term_kept: bool, c_term_kept: bool
    ) -> Iterator[Optional[ExtendedPeptide]]:
        """Concrete assignments of a window specific at a kept terminus."""
        residues = self.builder.residues
        protein = self.protein_sequence
        for sequence in self.builder.expander(start, end, self.mass_min, self.mass_max):
            n_term_ok = n_term_kept and (
                start == self.start
                or self.enzyme.is_cleavage_site_considering_combinations(protein[start - 1], sequence[0], residues)
            )
            c_term_ok = c_term_kept and (
                end == self.end
                or self.enzyme.is_cleavage_site_considering_combinations(sequence[-1], protein[end], residues)
            )
            if not (n_term_ok or c_term_ok):
                yield None
                continue
            missed_cleavages = self.enzyme.count_missed_cleavages(sequence)
            if missed_cleavages > self.max_missed_cleavages:
                yield None
                continue
            yield self.builder.build_peptide(start, sequence, self.mass_min, self.mass_max, missed_cleavages)
