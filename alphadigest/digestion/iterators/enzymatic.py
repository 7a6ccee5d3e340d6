"""Specific enzymatic digestion.

The protein is scanned left to right from boundary to boundary. A boundary is
a definite cleavage site, or a possible one when a combination residue is
involved. Every boundary so far that can still start a peptide is kept in a
table of open starts with the number of definite cleavage sites it spans,
its lightest possible mass and its count of combination residues. At each
boundary, every open start within the missed cleavage budget yields the
candidate peptide ending there, then the table is updated:

- starts exceeding the missed cleavage budget are dropped
- starts with more combination residues than allowed are dropped
- starts whose lightest mass cannot get below ``mass_max`` anymore are dropped

Older starts span more than newer ones, so dropped starts always are the
oldest ones. Their candidates are released at that point, which gives
ascending start order with ascending end per start while keeping the table
size independent of the protein length.

Example
-------
>>> params = DigestionParameters.enzymatic(EnzymeRegistry.default().get('Trypsin'), max_missed_cleavages=0)
>>> [(p.sequence, p.start) for p in ProteinDigester(params).iter_peptides("ARKPKR")]
[('AR', 0), ('KPK', 2), ('R', 5)]
"""

import logging
from collections import deque
from typing import Deque, Iterator, List, Optional, Union

import numpy as np

from ...enzymes import Enzyme
from ..draft import ExtendedPeptide, PeptideDraft
from .base import Job, SequenceIterator

logger = logging.getLogger(__name__)


def find_boundaries(builder, enzyme: Enzyme, start: int, end: int):
    """Cleavage boundaries of the range [start, end) of a protein.

    A boundary is a definite cleavage site, or a possible one where a
    combination residue is involved.

    Returns
    -------
    definite : np.ndarray (bool)
        Definite site flags relative to ``start``, length ``end - start + 1``
    boundaries : np.ndarray (int64)
        Protein indices of the internal boundaries, ascending
    """
    sequence_ord = builder.sequence_ord[start:end]
    definite = enzyme.cleavage_sites(sequence_ord)
    possible = np.zeros_like(definite)

    protein = builder.protein_sequence
    combination_flags = builder.residues.combination_flags[sequence_ord]
    for i in np.flatnonzero(combination_flags):
        for site in (i, i + 1):
            if 0 < site < len(sequence_ord):
                definite[site] = False
                possible[site] = enzyme.is_cleavage_site_considering_combinations(
                    protein[start + site - 1], protein[start + site], builder.residues,
                )

    boundaries = np.flatnonzero(definite | possible)
    return definite, boundaries + start


class OpenStart:
    """A boundary from which peptides may still start."""

    def __init__(self, start: int):
        self.start = start
        self.missed_cleavages = 0
        # None once the window contains a combination residue
        self.draft: Optional[PeptideDraft] = PeptideDraft()
        self.min_core_mass = 0.0
        self.n_combinations = 0
        self.candidates: List[Union[ExtendedPeptide, Job]] = []


class EnzymaticIterator(SequenceIterator):
    """Peptides specific at both termini for one enzyme.

    Parameters
    ----------
    builder : PeptideBuilder
        Builder of the protein to digest
    enzyme : Enzyme
        The enzyme
    max_missed_cleavages : int
        Missed cleavage budget
    mass_min, mass_max, cancellation_token, start, end
        See :class:`SequenceIterator`
    """

    def __init__(
        self,
        builder,
        enzyme: Enzyme,
        max_missed_cleavages: int,
        mass_min=None,
        mass_max=None,
        cancellation_token=None,
        start=0,
        end=None,
    ):
        super().__init__(builder, mass_min, mass_max, cancellation_token, start, end)
        self.enzyme = enzyme
        self.max_missed_cleavages = max_missed_cleavages

        self._definite, boundaries = find_boundaries(builder, enzyme, self.start, self.end)
        self._boundaries: Deque[int] = deque(int(b) for b in boundaries)
        self._open: Deque[OpenStart] = deque()
        if self.end > self.start:
            self._boundaries.append(self.end)
            self._open.append(OpenStart(self.start))
        self._segment_start = self.start

        logger.debug(
            f"{enzyme.name}: {int(self._definite.sum())} cleavage sites, "
            f"{len(self._boundaries)} boundaries in [{self.start}, {self.end})"
        )

    def _scan(self) -> bool:
        if not self._boundaries:
            return False

        boundary = self._boundaries.popleft()
        segment_start = self._segment_start
        self._segment_start = boundary

        for open_start in self._open:
            self._extend(open_start, segment_start, boundary)
            if open_start.missed_cleavages <= self.max_missed_cleavages:
                self._add_candidate(open_start, boundary)

        if boundary == self.end:
            while self._open:
                self._release(self._open.popleft())
            return False

        if self._definite[boundary - self.start]:
            for open_start in self._open:
                open_start.missed_cleavages += 1
        self._open.append(OpenStart(boundary))

        while self._open and self._is_closed(self._open[0]):
            self._release(self._open.popleft())
        return True

    def _extend(self, open_start: OpenStart, segment_start: int, segment_end: int) -> None:
        builder = self.builder
        n_combinations = builder.n_combinations(segment_start, segment_end)
        open_start.n_combinations += n_combinations
        open_start.min_core_mass += builder.core_mass_bounds(segment_start, segment_end)[0]
        if open_start.draft is None:
            return
        if n_combinations > 0:
            open_start.draft = None
            return
        for index in range(segment_start, segment_end):
            builder.extend_draft(open_start.draft, index)

    def _is_closed(self, open_start: OpenStart) -> bool:
        return (
            open_start.missed_cleavages > self.max_missed_cleavages
            or open_start.n_combinations > self.builder.max_combinations
            or self.builder.exceeds_mass_max(open_start.min_core_mass, self.mass_max)
        )

    def _add_candidate(self, open_start: OpenStart, end: int) -> None:
        if open_start.n_combinations > self.builder.max_combinations:
            return
        if open_start.draft is not None:
            peptide = self.builder.finalize(
                open_start.draft, open_start.start, self.mass_min, self.mass_max,
                missed_cleavages=open_start.missed_cleavages,
            )
            if peptide is not None:
                open_start.candidates.append(peptide)
        else:
            open_start.candidates.append(self._ambiguous_window(open_start.start, end))

    def _release(self, open_start: OpenStart) -> None:
        for candidate in open_start.candidates:
            self._enqueue(candidate)
        open_start.candidates = []

    def _ambiguous_window(self, start: int, end: int) -> Iterator[Optional[ExtendedPeptide]]:
        """Concrete assignments of an ambiguous window that are specific at both ends."""
        residues = self.builder.residues
        protein = self.protein_sequence
        for sequence in self.builder.expander(start, end, self.mass_min, self.mass_max):
            if start > self.start and not self.enzyme.is_cleavage_site_considering_combinations(
                    protein[start - 1], sequence[0], residues):
                yield None
                continue
            if end < self.end and not self.enzyme.is_cleavage_site_considering_combinations(
                    sequence[-1], protein[end], residues):
                yield None
                continue
            missed_cleavages = self.enzyme.count_missed_cleavages(sequence)
            if missed_cleavages > self.max_missed_cleavages:
                yield None
                continue
            yield self.builder.build_peptide(start, sequence, self.mass_min, self.mass_max, missed_cleavages)
