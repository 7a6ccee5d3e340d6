"""Unspecific digestion: every substring of the protein within the mass window.

For each start position, the window ends that can possibly fall within the
mass window form a contiguous range. Both range limits only move forward
with the start, so they are found with a two-pointer pass over the
cumulative mass bounds, in linear time.
"""

import logging
from typing import Iterator, Optional

import numba
import numpy as np

from ...constants import H2O_MASS
from ..builder import MASS_TOLERANCE
from ..draft import ExtendedPeptide, PeptideDraft
from .base import SequenceIterator

logger = logging.getLogger(__name__)


@numba.jit(nopython=True, cache=True)
def window_end_bounds(
    min_prefix: np.ndarray,
    max_prefix: np.ndarray,
    lower: float,
    upper: float,
):
    """Range of window ends per start for a core mass window.

    Parameters
    ----------
    min_prefix, max_prefix : np.ndarray (float64)
        Cumulative lightest/heaviest residue masses, length n + 1
    lower, upper : float
        Core mass window (may be -inf/inf)

    Returns
    -------
    first_end, last_end : np.ndarray (int64)
        For start s, the windows [s, e) with ``first_end[s] <= e <= last_end[s]``
        are the only ones whose mass range meets the window. Empty when
        ``first_end[s] > last_end[s]``.
    """
    n = len(min_prefix) - 1
    first_end = np.empty(n, dtype=np.int64)
    last_end = np.empty(n, dtype=np.int64)
    lo = 1
    hi = 0
    for s in range(n):
        if lo < s + 1:
            lo = s + 1
        while lo <= n and max_prefix[lo] - max_prefix[s] < lower:
            lo += 1
        first_end[s] = lo

        if hi < s:
            hi = s
        while hi < n and min_prefix[hi + 1] - min_prefix[s] <= upper:
            hi += 1
        last_end[s] = hi
    return first_end, last_end


class UnspecificIterator(SequenceIterator):
    """All substrings of the digested range, by ascending start then length."""

    def __init__(self, builder, mass_min=None, mass_max=None, cancellation_token=None, start=0, end=None):
        super().__init__(builder, mass_min, mass_max, cancellation_token, start, end)

        lower = -np.inf if mass_min is None else mass_min - H2O_MASS - builder.max_terminal_mass - MASS_TOLERANCE
        upper = np.inf if mass_max is None else mass_max - H2O_MASS - builder.min_terminal_mass + MASS_TOLERANCE
        min_prefix, max_prefix = builder.mass_prefix
        first_end, last_end = window_end_bounds(
            np.ascontiguousarray(min_prefix[self.start:self.end + 1]),
            np.ascontiguousarray(max_prefix[self.start:self.end + 1]),
            lower,
            upper,
        )
        self._first_end = first_end + self.start
        self._last_end = last_end + self.start
        self._cursor = self.start

    def _scan(self) -> bool:
        if self._cursor >= self.end:
            return False
        offset = self._cursor - self.start
        first_end = int(self._first_end[offset])
        last_end = int(self._last_end[offset])
        if first_end <= last_end:
            self._enqueue(self._windows(self._cursor, first_end, last_end))
        self._cursor += 1
        return self._cursor < self.end

    def _windows(self, start: int, first_end: int, last_end: int) -> Iterator[Optional[ExtendedPeptide]]:
        """Candidates [start, e) for first_end <= e <= last_end, by ascending e."""
        builder = self.builder
        draft = PeptideDraft()
        index = start
        for end in range(first_end, last_end + 1):
            n_combinations = builder.n_combinations(start, end)
            if n_combinations > 0:
                if n_combinations > builder.max_combinations:
                    logger.debug(
                        f"Stopping windows at {start}: more than "
                        f"{builder.max_combinations} combination residues"
                    )
                    return
                yield from builder.expand_window(start, end, self.mass_min, self.mass_max)
                continue
            while index < end:
                builder.extend_draft(draft, index)
                index += 1
            yield builder.finalize(draft, start, self.mass_min, self.mass_max)
