"""Whole protein iterator: the digested range is the one candidate peptide."""

from .base import SequenceIterator


class NoDigestionIterator(SequenceIterator):
    """Yields the digested range itself, expanded if it is ambiguous.

    The range defaults to the whole protein; passing ``start``/``end`` digests
    an externally supplied exact substring.
    """

    def _scan(self) -> bool:
        if self.end > self.start:
            if self.builder.n_combinations(self.start, self.end) == 0:
                self._enqueue(self.builder.build_peptide(
                    self.start,
                    self.protein_sequence[self.start:self.end],
                    self.mass_min,
                    self.mass_max,
                ))
            else:
                self._enqueue(self.builder.expand_window(
                    self.start, self.end, self.mass_min, self.mass_max
                ))
        return False
