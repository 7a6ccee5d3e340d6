"""Residue model: one-letter codes, masses and combination codes.

A :class:`ResidueTable` is an immutable registry built once at start-up and
passed to everything that needs residue masses. Besides the dictionary view,
it exposes ord()-indexed numpy arrays so that hot loops can run in Numba:

>>> table = ResidueTable.default()
>>> table.min_masses[ord('B')]   # lightest of D/N
114.042927
>>> table.alternatives('J')
('I', 'L')

Combination codes (B, J, Z, X by default) have no mass of their own; their
mass bounds are the bounds over their concrete alternatives.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple

import numba
import numpy as np

from .constants import (
    AA_COMBINATIONS,
    AA_MASSES_DICT,
    AA_MASSES_RARE,
    ORD_TABLE_SIZE,
)
from .exceptions import ConfigurationError, UnsupportedResidueError


# =============================================================================
# Residue
# =============================================================================

@dataclass(frozen=True)
class Residue:
    """A one-letter residue code.

    Concrete residues carry a monoisotopic mass. Combination residues carry
    the ordered tuple of concrete codes they may stand for and no mass.
    """

    code: str
    mass: Optional[float] = None
    alternatives: Tuple[str, ...] = ()

    @property
    def is_combination(self) -> bool:
        return len(self.alternatives) > 0

    @property
    def concrete_codes(self) -> Tuple[str, ...]:
        """Concrete codes this residue may represent, itself if concrete."""
        return self.alternatives if self.alternatives else (self.code,)


# =============================================================================
# Encoding
# =============================================================================

def encode_sequence_to_ord(sequence: str) -> np.ndarray:
    """Encode a sequence string to an ord() array for Numba processing.

    Parameters
    ----------
    sequence : str
        Sequence of one-letter codes (ASCII)

    Returns
    -------
    sequence_ord : np.ndarray (uint8)
        Array of ord() values for each residue

    Examples
    --------
    >>> encode_sequence_to_ord("PEPTIDE")
    array([80, 69, 80, 84, 73, 68, 69], dtype=uint8)
    """
    return np.array([ord(c) for c in sequence], dtype=np.uint8)


# =============================================================================
# Numba Kernels
# =============================================================================

@numba.jit(nopython=True, cache=True)
def calculate_residue_mass(sequence_ord: np.ndarray, masses: np.ndarray) -> float:
    """Sum of residue masses of an ord() encoded concrete sequence."""
    total = 0.0
    for i in range(len(sequence_ord)):
        total += masses[sequence_ord[i]]
    return total


@numba.jit(nopython=True, cache=True)
def calculate_mass_bounds(
    sequence_ord: np.ndarray,
    min_masses: np.ndarray,
    max_masses: np.ndarray,
) -> Tuple[float, float]:
    """Lightest and heaviest residue mass of a possibly ambiguous sequence."""
    lightest = 0.0
    heaviest = 0.0
    for i in range(len(sequence_ord)):
        lightest += min_masses[sequence_ord[i]]
        heaviest += max_masses[sequence_ord[i]]
    return lightest, heaviest


@numba.jit(nopython=True, cache=True)
def count_combinations(sequence_ord: np.ndarray, combination_flags: np.ndarray) -> int:
    """Number of combination residues in an ord() encoded sequence."""
    count = 0
    for i in range(len(sequence_ord)):
        if combination_flags[sequence_ord[i]]:
            count += 1
    return count


# =============================================================================
# Residue Table
# =============================================================================

class ResidueTable:
    """Immutable lookup table of residues.

    Attributes
    ----------
    min_masses : np.ndarray (float64)
        ord()-indexed lightest mass per code (the mass itself if concrete)
    max_masses : np.ndarray (float64)
        ord()-indexed heaviest mass per code
    combination_flags : np.ndarray (bool)
        ord()-indexed, True for combination codes
    known_flags : np.ndarray (bool)
        ord()-indexed, True for every code in the table
    """

    def __init__(self, residues: Iterable[Residue]):
        self._residues: Dict[str, Residue] = {}
        for residue in residues:
            if len(residue.code) != 1 or ord(residue.code) >= ORD_TABLE_SIZE:
                raise ConfigurationError(f"Invalid residue code: {residue.code!r}")
            if residue.code in self._residues:
                raise ConfigurationError(f"Duplicate residue code: {residue.code!r}")
            if not residue.is_combination and residue.mass is None:
                raise ConfigurationError(f"Concrete residue {residue.code!r} has no mass")
            self._residues[residue.code] = residue

        for residue in self._residues.values():
            for aa in residue.alternatives:
                alternative = self._residues.get(aa)
                if alternative is None or alternative.is_combination:
                    raise ConfigurationError(
                        f"Combination {residue.code!r} refers to {aa!r}, "
                        f"which is not a concrete residue"
                    )

        self.min_masses = np.zeros(ORD_TABLE_SIZE, dtype=np.float64)
        self.max_masses = np.zeros(ORD_TABLE_SIZE, dtype=np.float64)
        self.combination_flags = np.zeros(ORD_TABLE_SIZE, dtype=np.bool_)
        self.known_flags = np.zeros(ORD_TABLE_SIZE, dtype=np.bool_)

        for code, residue in self._residues.items():
            index = ord(code)
            masses = [self._residues[aa].mass for aa in residue.concrete_codes]
            self.min_masses[index] = min(masses)
            self.max_masses[index] = max(masses)
            self.combination_flags[index] = residue.is_combination
            self.known_flags[index] = True

        for array in (self.min_masses, self.max_masses, self.combination_flags, self.known_flags):
            array.flags.writeable = False

    @classmethod
    def from_masses(
        cls,
        masses: Mapping[str, float],
        combinations: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> 'ResidueTable':
        """Build a table from concrete masses and combination definitions.

        Examples
        --------
        >>> table = ResidueTable.from_masses(AA_MASSES_DICT, {'X': ('A', 'G')})
        >>> table.alternatives('X')
        ('A', 'G')
        """
        residues = [Residue(code, float(mass)) for code, mass in masses.items()]
        for code, alternatives in (combinations or {}).items():
            residues.append(Residue(code, None, tuple(alternatives)))
        return cls(residues)

    @classmethod
    def default(cls) -> 'ResidueTable':
        """Standard residues, U, O and the B/J/Z/X combination codes."""
        return cls.from_masses({**AA_MASSES_DICT, **AA_MASSES_RARE}, AA_COMBINATIONS)

    def __contains__(self, code: str) -> bool:
        return code in self._residues

    def __len__(self) -> int:
        return len(self._residues)

    def __iter__(self):
        return iter(self._residues.values())

    def get(self, code: str) -> Residue:
        residue = self._residues.get(code)
        if residue is None:
            raise UnsupportedResidueError(code)
        return residue

    def mass(self, code: str) -> float:
        """Monoisotopic mass of a concrete residue."""
        residue = self.get(code)
        if residue.is_combination:
            raise ValueError(f"Combination residue {code!r} has no single mass")
        return residue.mass

    def alternatives(self, code: str) -> Tuple[str, ...]:
        return self.get(code).concrete_codes

    def is_combination(self, code: str) -> bool:
        return self.get(code).is_combination

    def validate(self, sequence: str, start: int = 0, end: Optional[int] = None) -> None:
        """Raise UnsupportedResidueError for the first unknown code in a range."""
        end = len(sequence) if end is None else end
        for index in range(start, end):
            code = sequence[index]
            if ord(code) >= ORD_TABLE_SIZE or not self.known_flags[ord(code)]:
                raise UnsupportedResidueError(code, index)

    def has_combination(self, sequence: str) -> bool:
        return count_combinations(encode_sequence_to_ord(sequence), self.combination_flags) > 0

    def sequence_mass(self, sequence: str) -> float:
        """Residue mass of a concrete sequence (no water, no modifications)."""
        sequence_ord = encode_sequence_to_ord(sequence)
        if count_combinations(sequence_ord, self.combination_flags) > 0:
            raise ValueError(f"Sequence {sequence!r} contains combination residues")
        return calculate_residue_mass(sequence_ord, self.min_masses)

    def sequence_mass_bounds(self, sequence: str) -> Tuple[float, float]:
        """Lightest and heaviest residue mass over all concrete assignments."""
        return calculate_mass_bounds(
            encode_sequence_to_ord(sequence), self.min_masses, self.max_masses
        )
