"""Enzyme model: cleavage predicates and the enzyme registry.

An enzyme is defined by four residue sets. Cleavage happens between a residue
``before`` and a residue ``after`` when

- ``before`` is in ``amino_acid_before`` and ``after`` is not in
  ``restriction_after``, or
- ``after`` is in ``amino_acid_after`` and ``before`` is not in
  ``restriction_before``.

Trypsin, for example, cuts after K or R unless followed by P:

>>> trypsin = EnzymeRegistry.default().get('Trypsin')
>>> trypsin.is_cleavage_site('K', 'A')
True
>>> trypsin.is_cleavage_site('K', 'P')
False

Protein termini are never cleavage sites; the digestion iterators treat the
sequence boundaries as implicit peptide starts and ends without calling the
predicate there.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, FrozenSet, Iterable, Mapping, Tuple

import numba
import numpy as np

from .constants import DEFAULT_ENZYMES, ENZYME_WILDCARD, ORD_TABLE_SIZE
from .exceptions import ConfigurationError
from .residues import ResidueTable, encode_sequence_to_ord


# =============================================================================
# Numba Kernels
# =============================================================================

@numba.jit(nopython=True, cache=True)
def count_cleavage_sites(
    sequence_ord: np.ndarray,
    before_flags: np.ndarray,
    after_flags: np.ndarray,
    restriction_before_flags: np.ndarray,
    restriction_after_flags: np.ndarray,
) -> int:
    """Number of internal cleavage sites of a concrete ord() encoded sequence."""
    count = 0
    for i in range(1, len(sequence_ord)):
        aa_before = sequence_ord[i - 1]
        aa_after = sequence_ord[i]
        if before_flags[aa_before] and not restriction_after_flags[aa_after]:
            count += 1
        elif after_flags[aa_after] and not restriction_before_flags[aa_before]:
            count += 1
    return count


@numba.jit(nopython=True, cache=True)
def find_cleavage_sites(
    sequence_ord: np.ndarray,
    before_flags: np.ndarray,
    after_flags: np.ndarray,
    restriction_before_flags: np.ndarray,
    restriction_after_flags: np.ndarray,
) -> np.ndarray:
    """Cleavage site flags of an ord() encoded sequence.

    Returns
    -------
    sites : np.ndarray (bool)
        Length ``len(sequence_ord) + 1``; ``sites[i]`` is True when the enzyme
        cuts between residue ``i - 1`` and residue ``i``. The sequence
        boundaries (0 and len) are always False.
    """
    sites = np.zeros(len(sequence_ord) + 1, dtype=np.bool_)
    for i in range(1, len(sequence_ord)):
        aa_before = sequence_ord[i - 1]
        aa_after = sequence_ord[i]
        if before_flags[aa_before] and not restriction_after_flags[aa_after]:
            sites[i] = True
        elif after_flags[aa_after] and not restriction_before_flags[aa_before]:
            sites[i] = True
    return sites


def _residue_flags(residues: FrozenSet[str]) -> np.ndarray:
    flags = np.zeros(ORD_TABLE_SIZE, dtype=np.bool_)
    if ENZYME_WILDCARD in residues:
        flags[:] = True
    else:
        for aa in residues:
            flags[ord(aa)] = True
    return flags


# =============================================================================
# Enzyme
# =============================================================================

@dataclass(frozen=True)
class Enzyme:
    """A named cleavage rule. Immutable and safe to share between iterators."""

    name: str
    amino_acid_before: FrozenSet[str] = field(default_factory=frozenset)
    amino_acid_after: FrozenSet[str] = field(default_factory=frozenset)
    restriction_before: FrozenSet[str] = field(default_factory=frozenset)
    restriction_after: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if not self.name:
            raise ConfigurationError("Enzyme name must not be empty")
        if not self.amino_acid_before and not self.amino_acid_after:
            raise ConfigurationError(f"Enzyme {self.name!r} has no cleavage residue")
        # Accept strings and other iterables for convenience
        for attribute in ('amino_acid_before', 'amino_acid_after',
                          'restriction_before', 'restriction_after'):
            object.__setattr__(self, attribute, frozenset(getattr(self, attribute)))

    @classmethod
    def from_definition(cls, name: str, definition: Mapping[str, Iterable[str]]) -> 'Enzyme':
        """Build an enzyme from a ``DEFAULT_ENZYMES`` style definition."""
        unknown = set(definition) - {'before', 'after', 'restriction_before', 'restriction_after'}
        if unknown:
            raise ConfigurationError(f"Unknown keys in enzyme {name!r}: {sorted(unknown)}")
        return cls(
            name=name,
            amino_acid_before=frozenset(definition.get('before', ())),
            amino_acid_after=frozenset(definition.get('after', ())),
            restriction_before=frozenset(definition.get('restriction_before', ())),
            restriction_after=frozenset(definition.get('restriction_after', ())),
        )

    def _in(self, residues: FrozenSet[str], aa: str) -> bool:
        return aa in residues or ENZYME_WILDCARD in residues

    def is_cleavage_site(self, aa_before: str, aa_after: str) -> bool:
        """Whether the enzyme cuts between two concrete residues."""
        if self._in(self.amino_acid_before, aa_before) and not self._in(self.restriction_after, aa_after):
            return True
        return self._in(self.amino_acid_after, aa_after) and not self._in(self.restriction_before, aa_before)

    def is_cleavage_site_considering_combinations(
        self,
        aa_before: str,
        aa_after: str,
        residues: ResidueTable,
    ) -> bool:
        """Whether any concrete expansion of the two residues is a cleavage site."""
        for possible_before in residues.alternatives(aa_before):
            for possible_after in residues.alternatives(aa_after):
                if self.is_cleavage_site(possible_before, possible_after):
                    return True
        return False

    @cached_property
    def _flags(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        return (
            _residue_flags(self.amino_acid_before),
            _residue_flags(self.amino_acid_after),
            _residue_flags(self.restriction_before),
            _residue_flags(self.restriction_after),
        )

    def count_missed_cleavages(self, sequence: str) -> int:
        """Number of cleavage sites inside a concrete sequence.

        Examples
        --------
        >>> trypsin.count_missed_cleavages("PEPKTIDERPK")
        1
        """
        if len(sequence) < 2:
            return 0
        return count_cleavage_sites(encode_sequence_to_ord(sequence), *self._flags)

    def cleavage_sites(self, sequence_ord: np.ndarray) -> np.ndarray:
        """Cleavage site flags of an ord() encoded concrete sequence.

        See :func:`find_cleavage_sites`. Pairs involving combination codes are
        evaluated on the codes themselves and have to be re-checked with
        :meth:`is_cleavage_site_considering_combinations`.
        """
        return find_cleavage_sites(sequence_ord, *self._flags)

    def __str__(self) -> str:
        return self.name


# =============================================================================
# Enzyme Registry
# =============================================================================

class EnzymeRegistry:
    """Read-only collection of enzymes indexed by name.

    Built once and passed to whoever needs to resolve enzyme names; there is
    no global mutable enzyme table.
    """

    def __init__(self, enzymes: Iterable[Enzyme]):
        self._enzymes: Dict[str, Enzyme] = {}
        for enzyme in enzymes:
            if enzyme.name in self._enzymes:
                raise ConfigurationError(f"Duplicate enzyme name: {enzyme.name!r}")
            self._enzymes[enzyme.name] = enzyme

    @classmethod
    def from_definitions(cls, definitions: Mapping[str, Mapping[str, Iterable[str]]]) -> 'EnzymeRegistry':
        return cls(Enzyme.from_definition(name, definition) for name, definition in definitions.items())

    @classmethod
    def default(cls) -> 'EnzymeRegistry':
        """The default enzyme catalogue from ``constants.DEFAULT_ENZYMES``."""
        return cls.from_definitions(DEFAULT_ENZYMES)

    def get(self, name: str) -> Enzyme:
        enzyme = self._enzymes.get(name)
        if enzyme is None:
            raise ConfigurationError(
                f"Unknown enzyme: {name!r}. Available: {', '.join(self._enzymes)}"
            )
        return enzyme

    def __getitem__(self, name: str) -> Enzyme:
        return self.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._enzymes

    def __iter__(self):
        return iter(self._enzymes.values())

    def __len__(self) -> int:
        return len(self._enzymes)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._enzymes)
