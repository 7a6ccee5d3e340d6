"""Digestion with several enzymes applied one after the other.

The peptides of the first enzyme, without mass window, are the windows
digested by the second enzyme, and so on; the mass window only applies to
the last enzyme. Windows are digested once per position, peptides are
emitted once per position, sequence and modification state.

Windows arrive by ascending start and only produce peptides starting at or
after their own start, so peptides are held per start and released, by
ascending end, once the windows have moved past that start.
"""

import logging
from typing import Dict, Optional, Sequence, Set, Tuple

from ..draft import ExtendedPeptide
from ..parameters import EnzymeDigestion, Specificity
from .base import SequenceIterator
from .enzymatic import EnzymaticIterator
from .semi_specific import SemiSpecificIterator

logger = logging.getLogger(__name__)


def single_enzyme_iterator(
    builder,
    digestion: EnzymeDigestion,
    mass_min=None,
    mass_max=None,
    cancellation_token=None,
    start=0,
    end=None,
) -> SequenceIterator:
    """Iterator for one enzyme at its specificity."""
    if digestion.specificity == Specificity.SPECIFIC:
        return EnzymaticIterator(
            builder, digestion.enzyme, digestion.max_missed_cleavages,
            mass_min, mass_max, cancellation_token, start, end,
        )
    return SemiSpecificIterator(
        builder, digestion.enzyme, digestion.max_missed_cleavages, digestion.specificity,
        mass_min, mass_max, cancellation_token, start, end,
    )


class SequentialEnzymeIterator(SequenceIterator):
    """Peptides of the last enzyme digesting the peptides of the previous ones.

    Parameters
    ----------
    builder : PeptideBuilder
        Builder of the protein to digest
    digestions : sequence of EnzymeDigestion
        Enzymes in order of application, at least two
    mass_min, mass_max, cancellation_token, start, end
        See :class:`SequenceIterator`
    """

    def __init__(
        self,
        builder,
        digestions: Sequence[EnzymeDigestion],
        mass_min=None,
        mass_max=None,
        cancellation_token=None,
        start=0,
        end=None,
    ):
        super().__init__(builder, mass_min, mass_max, cancellation_token, start, end)
        if len(digestions) < 2:
            raise ValueError("Sequential digestion requires at least two enzymes")
        self.digestions = tuple(digestions)

        previous = self.digestions[:-1]
        if len(previous) == 1:
            self._windows = single_enzyme_iterator(
                builder, previous[0], cancellation_token=self.cancellation_token,
                start=self.start, end=self.end,
            )
        else:
            self._windows = SequentialEnzymeIterator(
                builder, previous, cancellation_token=self.cancellation_token,
                start=self.start, end=self.end,
            )
        self._window_start = self.start
        self._seen_windows: Set[Tuple[int, int]] = set()
        self._pending: Dict[int, Dict[tuple, ExtendedPeptide]] = {}

    def _scan(self) -> bool:
        window = self._windows.next_peptide()
        if window is None:
            self._release()
            return False

        if window.start != self._window_start:
            self._release(window.start)
            self._window_start = window.start
            self._seen_windows.clear()
        if (window.start, window.end) in self._seen_windows:
            return True
        self._seen_windows.add((window.start, window.end))

        iterator = single_enzyme_iterator(
            self.builder, self.digestions[-1], self.mass_min, self.mass_max,
            self.cancellation_token, window.start, window.end,
        )
        for peptide in iterator:
            self._pending.setdefault(peptide.start, {}).setdefault(peptide.key, peptide)
        return True

    def _release(self, before: Optional[int] = None) -> None:
        """Queue the held peptides starting before ``before``, all if None."""
        starts = sorted(start for start in self._pending if before is None or start < before)
        for start in starts:
            peptides = self._pending.pop(start).values()
            for peptide in sorted(peptides, key=lambda peptide: peptide.end):
                self._enqueue(peptide)
