"""Expansion of sequences containing combination residues.

An :class:`AmbiguousSequenceIterator` enumerates the concrete sequences a
sequence with combination codes (B, J, Z, X, ...) may stand for. The order is
odometer order: the rightmost combination position turns fastest and every
position goes through its alternatives in declared order, the same order as
``itertools.product``.

Examples
--------
>>> table = ResidueTable.from_masses(AA_MASSES_DICT, {'X': ('A', 'G')})
>>> list(AmbiguousSequenceIterator("PEPXTIDE", table, max_combinations=1))
['PEPATIDE', 'PEPGTIDE']

Windows with more combination residues than allowed, and windows whose mass
range lies entirely outside the mass window, yield nothing.
"""

import logging
from typing import List, Optional, Tuple

import numba
import numpy as np

from ..constants import DEFAULT_MAX_COMBINATIONS, H2O_MASS
from ..residues import ResidueTable

logger = logging.getLogger(__name__)


@numba.jit(nopython=True, cache=True)
def advance_odometer(digits: np.ndarray, radices: np.ndarray) -> bool:
    """Increment a mixed-radix counter in place, rightmost digit fastest.

    Returns False once the counter wrapped around, i.e. all combinations
    were visited.
    """
    for i in range(len(digits) - 1, -1, -1):
        digits[i] += 1
        if digits[i] < radices[i]:
            return True
        digits[i] = 0
    return False


class AmbiguousSequenceIterator:
    """Lazy enumeration of the concrete assignments of a sequence.

    Parameters
    ----------
    sequence : str
        Sequence, possibly containing combination codes
    residues : ResidueTable
        Residue table defining the combination codes
    max_combinations : int
        Maximal number of combination residues; sequences with more yield
        nothing
    mass_min, mass_max : float, optional
        Inclusive peptide mass window used for the precheck
    mass_bounds : Tuple[float, float], optional
        Lightest and heaviest possible peptide mass. Defaults to the residue
        mass bounds of the sequence plus water, callers accounting for
        modifications pass their own bounds.
    """

    def __init__(
        self,
        sequence: str,
        residues: ResidueTable,
        max_combinations: int = DEFAULT_MAX_COMBINATIONS,
        mass_min: Optional[float] = None,
        mass_max: Optional[float] = None,
        mass_bounds: Optional[Tuple[float, float]] = None,
    ):
        residues.validate(sequence)
        self.sequence = sequence
        self._residues: List[str] = list(sequence)
        self._positions = [i for i, aa in enumerate(sequence) if residues.is_combination(aa)]
        self._alternatives = [residues.alternatives(sequence[i]) for i in self._positions]
        self._digits = np.zeros(len(self._positions), dtype=np.int64)
        self._radices = np.array([len(a) for a in self._alternatives], dtype=np.int64)

        self.budget_exceeded = len(self._positions) > max_combinations
        self.outside_mass_window = False
        self._exhausted = False

        if self.budget_exceeded:
            logger.debug(
                f"Skipping {sequence}: {len(self._positions)} combination residues, "
                f"at most {max_combinations} allowed"
            )
            self._exhausted = True
            return

        if mass_bounds is None:
            lightest, heaviest = residues.sequence_mass_bounds(sequence)
            mass_bounds = (lightest + H2O_MASS, heaviest + H2O_MASS)
        lightest, heaviest = mass_bounds
        if (mass_max is not None and lightest > mass_max) or (mass_min is not None and heaviest < mass_min):
            logger.debug(
                f"Skipping {sequence}: mass range [{lightest:.4f}, {heaviest:.4f}] "
                f"outside of the mass window"
            )
            self.outside_mass_window = True
            self._exhausted = True

    @property
    def n_combinations(self) -> int:
        """Number of concrete sequences enumerated if nothing is skipped."""
        return int(np.prod(self._radices)) if len(self._radices) else 1

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def next_sequence(self) -> Optional[str]:
        """Next concrete sequence, None once all were returned."""
        if self._exhausted:
            return None
        for k, position in enumerate(self._positions):
            self._residues[position] = self._alternatives[k][self._digits[k]]
        sequence = ''.join(self._residues)
        if not self._positions or not advance_odometer(self._digits, self._radices):
            self._exhausted = True
        return sequence

    def __iter__(self):
        return self

    def __next__(self) -> str:
        sequence = self.next_sequence()
        if sequence is None:
            raise StopIteration
        return sequence
