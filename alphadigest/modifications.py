"""Fixed modifications and the modification resolver used during digestion.

The digestion iterators never decide on modifications themselves: they ask a
resolver, which must be pure and deterministic. The resolver provided here
handles fixed modifications of nine kinds:

- on a residue anywhere in the peptide
- on the peptide N/C-terminus, optionally only for given terminal residues
- on the protein N/C-terminus, optionally only for given terminal residues

A modification may additionally carry a motif, a regular expression that has
to match the protein sequence starting at the modified residue. The modified
residue is taken as assigned, so a motif applies to an N expanded from B,
while the following residues are matched as written in the protein.

Examples
--------
>>> resolver = FixedModificationResolver.from_names(
...     ["Carbamidomethylation of C", "Acetylation of protein N-term"]
... )
>>> resolver.fixed_modification_at('C', "PEPCK", 3)
'Carbamidomethylation of C'
>>> resolver.modification_mass('Carbamidomethylation of C')
57.021464
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from .constants import (
    ACETYL_MASS,
    AMIDATION_MASS,
    CARBAMIDOMETHYL_MASS,
    DEAMIDATION_MASS,
    H2O_MASS,
    OXIDATION_MASS,
    PYRO_GLU_Q_MASS,
)
from .exceptions import ConfigurationError
from .residues import ResidueTable


# =============================================================================
# Modification Definition
# =============================================================================

class ModificationType(Enum):
    """Where a fixed modification applies."""
    RESIDUE = "residue"
    PEPTIDE_N_TERM = "peptide_n_term"
    PEPTIDE_C_TERM = "peptide_c_term"
    PROTEIN_N_TERM = "protein_n_term"
    PROTEIN_C_TERM = "protein_c_term"
    PEPTIDE_N_TERM_RESIDUE = "peptide_n_term_residue"
    PEPTIDE_C_TERM_RESIDUE = "peptide_c_term_residue"
    PROTEIN_N_TERM_RESIDUE = "protein_n_term_residue"
    PROTEIN_C_TERM_RESIDUE = "protein_c_term_residue"

    @property
    def targets_residues(self) -> bool:
        return self in _RESIDUE_TARGETED

    @property
    def is_n_term(self) -> bool:
        return self in _N_TERM_TYPES

    @property
    def is_c_term(self) -> bool:
        return self in _C_TERM_TYPES


_RESIDUE_TARGETED = frozenset({
    ModificationType.RESIDUE,
    ModificationType.PEPTIDE_N_TERM_RESIDUE,
    ModificationType.PEPTIDE_C_TERM_RESIDUE,
    ModificationType.PROTEIN_N_TERM_RESIDUE,
    ModificationType.PROTEIN_C_TERM_RESIDUE,
})
_N_TERM_TYPES = frozenset({
    ModificationType.PEPTIDE_N_TERM,
    ModificationType.PROTEIN_N_TERM,
    ModificationType.PEPTIDE_N_TERM_RESIDUE,
    ModificationType.PROTEIN_N_TERM_RESIDUE,
})
_C_TERM_TYPES = frozenset({
    ModificationType.PEPTIDE_C_TERM,
    ModificationType.PROTEIN_C_TERM,
    ModificationType.PEPTIDE_C_TERM_RESIDUE,
    ModificationType.PROTEIN_C_TERM_RESIDUE,
})


@dataclass(frozen=True)
class Modification:
    """A fixed modification.

    Attributes
    ----------
    name : str
        Unique name, used as modification label on peptides
    mass : float
        Monoisotopic mass shift in Da
    modification_type : ModificationType
        Where the modification applies
    residues : frozenset of str
        Targeted residues, required for residue-targeted types only
    motif : str, optional
        Regular expression that must match the protein starting at the
        modified residue, e.g. ``"N[^P][ST]"``
    """

    name: str
    mass: float
    modification_type: ModificationType
    residues: FrozenSet[str] = field(default_factory=frozenset)
    motif: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'residues', frozenset(self.residues))
        if self.modification_type.targets_residues and not self.residues:
            raise ConfigurationError(f"Modification {self.name!r} targets no residue")
        if not self.modification_type.targets_residues and self.residues:
            raise ConfigurationError(
                f"Modification {self.name!r} of type {self.modification_type.value} "
                f"cannot target residues"
            )
        if self.motif is not None:
            try:
                re.compile(self.motif)
            except re.error as e:
                raise ConfigurationError(f"Invalid motif for {self.name!r}: {e}") from e

    @cached_property
    def _motif_regex(self):
        return re.compile(self.motif) if self.motif is not None else None

    def matches_motif(self, protein_sequence: str, index: int, residue: Optional[str] = None) -> bool:
        """Whether the motif, if any, matches the protein at the given index.

        ``residue`` is the concrete residue at ``index`` when the protein has
        a combination code there. Residues after ``index`` are matched as
        written in the protein.
        """
        if self._motif_regex is None:
            return True
        if residue is not None and residue != protein_sequence[index]:
            return self._motif_regex.match(residue + protein_sequence[index + 1:]) is not None
        return self._motif_regex.match(protein_sequence, index) is not None


# Default catalogue of fixed modifications, by name
DEFAULT_MODIFICATIONS: Dict[str, Modification] = {
    modification.name: modification for modification in (
        Modification("Carbamidomethylation of C", CARBAMIDOMETHYL_MASS,
                     ModificationType.RESIDUE, frozenset('C')),
        Modification("Oxidation of M", OXIDATION_MASS,
                     ModificationType.RESIDUE, frozenset('M')),
        Modification("Acetylation of protein N-term", ACETYL_MASS,
                     ModificationType.PROTEIN_N_TERM),
        Modification("Acetylation of peptide N-term", ACETYL_MASS,
                     ModificationType.PEPTIDE_N_TERM),
        Modification("Amidation of the peptide C-term", AMIDATION_MASS,
                     ModificationType.PEPTIDE_C_TERM),
        Modification("Amidation of the protein C-term", AMIDATION_MASS,
                     ModificationType.PROTEIN_C_TERM),
        Modification("Pyrolidone from Q", PYRO_GLU_Q_MASS,
                     ModificationType.PEPTIDE_N_TERM_RESIDUE, frozenset('Q')),
        Modification("Deamidation of N in N-x-S/T", DEAMIDATION_MASS,
                     ModificationType.RESIDUE, frozenset('N'), motif="N[^P][ST]"),
    )
}


# =============================================================================
# Modification Resolver
# =============================================================================

class FixedModificationResolver:
    """Resolves fixed modifications for residues and peptide termini.

    At most one modification is allowed per residue and category, and at
    most one unconditional modification per terminus kind. Violations raise
    ConfigurationError at construction.
    """

    def __init__(self, modifications: Iterable[Modification] = ()):
        self._masses: Dict[str, float] = {}
        self._terminus: Dict[ModificationType, Modification] = {}
        self._at_residue: Dict[ModificationType, Dict[str, Modification]] = {
            modification_type: {} for modification_type in _RESIDUE_TARGETED
        }

        for modification in modifications:
            if modification.name in self._masses:
                raise ConfigurationError(f"Duplicate modification: {modification.name!r}")
            self._masses[modification.name] = modification.mass
            modification_type = modification.modification_type

            if modification_type.targets_residues:
                targets = self._at_residue[modification_type]
                for aa in sorted(modification.residues):
                    if aa in targets:
                        raise ConfigurationError(
                            f"Only one fixed modification supported per {modification_type.value} "
                            f"at {aa}. Found {targets[aa].name!r} and {modification.name!r}."
                        )
                    targets[aa] = modification
            else:
                if modification_type in self._terminus:
                    raise ConfigurationError(
                        f"Only one fixed modification supported for the {modification_type.value}. "
                        f"Found {self._terminus[modification_type].name!r} and {modification.name!r}."
                    )
                self._terminus[modification_type] = modification

        self.modified_residues: FrozenSet[str] = frozenset(self._at_residue[ModificationType.RESIDUE])
        self.n_term_mass_bounds = self._terminal_mass_bounds(is_n_term=True)
        self.c_term_mass_bounds = self._terminal_mass_bounds(is_n_term=False)

    @classmethod
    def from_names(cls, names: Iterable[str], catalogue: Optional[Dict[str, Modification]] = None) -> 'FixedModificationResolver':
        """Resolver for modifications picked by name from a catalogue."""
        catalogue = DEFAULT_MODIFICATIONS if catalogue is None else catalogue
        modifications = []
        for name in names:
            if name not in catalogue:
                raise ConfigurationError(f"Unknown modification: {name!r}")
            modifications.append(catalogue[name])
        return cls(modifications)

    def _terminal_mass_bounds(self, is_n_term: bool) -> Tuple[float, float]:
        def on_terminus(modification_type: ModificationType) -> bool:
            return modification_type.is_n_term if is_n_term else modification_type.is_c_term

        masses = [0.0]
        for modification_type, modification in self._terminus.items():
            if on_terminus(modification_type):
                masses.append(modification.mass)
        for modification_type, targets in self._at_residue.items():
            if on_terminus(modification_type):
                masses.extend(modification.mass for modification in targets.values())
        return min(masses), max(masses)

    @property
    def min_terminal_mass(self) -> float:
        """Lower bound of the combined N- and C-terminal modification mass."""
        return self.n_term_mass_bounds[0] + self.c_term_mass_bounds[0]

    @property
    def max_terminal_mass(self) -> float:
        """Upper bound of the combined N- and C-terminal modification mass."""
        return self.n_term_mass_bounds[1] + self.c_term_mass_bounds[1]

    def modification_mass(self, name: Optional[str]) -> float:
        """Mass of a modification, 0.0 for no modification."""
        if name is None:
            return 0.0
        return self._masses[name]

    def fixed_modification_at(self, residue: str, protein_sequence: str, index: int) -> Optional[str]:
        """Fixed modification of a concrete residue at a protein index, if any."""
        modification = self._at_residue[ModificationType.RESIDUE].get(residue)
        if modification is not None and modification.matches_motif(protein_sequence, index, residue):
            return modification.name
        return None

    def _terminus_modification(
        self,
        terminus_type: ModificationType,
        residue_type: ModificationType,
        residue: str,
        protein_sequence: str,
        index: int,
    ) -> Optional[str]:
        modification = self._terminus.get(terminus_type)
        if modification is not None:
            return modification.name
        modification = self._at_residue[residue_type].get(residue)
        if modification is not None and modification.matches_motif(protein_sequence, index, residue):
            return modification.name
        return None

    def terminal_modification(
        self,
        peptide_draft,
        protein_sequence: str,
        position_on_protein: int,
        is_n_term: bool,
    ) -> Optional[str]:
        """Terminal modification of a peptide draft.

        Parameters
        ----------
        peptide_draft : PeptideDraft
            The draft, its first (N-term) or last (C-term) residue is used
        protein_sequence : str
            The protein the draft comes from
        position_on_protein : int
            Protein index of the terminal residue
        is_n_term : bool
            True for the N-terminus, False for the C-terminus

        Returns
        -------
        Optional[str]
            Modification name, protein terminus modifications take precedence
        """
        if is_n_term:
            residue = peptide_draft.first_residue
            if position_on_protein == 0:
                name = self._terminus_modification(
                    ModificationType.PROTEIN_N_TERM, ModificationType.PROTEIN_N_TERM_RESIDUE,
                    residue, protein_sequence, position_on_protein,
                )
                if name is not None:
                    return name
            return self._terminus_modification(
                ModificationType.PEPTIDE_N_TERM, ModificationType.PEPTIDE_N_TERM_RESIDUE,
                residue, protein_sequence, position_on_protein,
            )

        residue = peptide_draft.last_residue
        if position_on_protein == len(protein_sequence) - 1:
            name = self._terminus_modification(
                ModificationType.PROTEIN_C_TERM, ModificationType.PROTEIN_C_TERM_RESIDUE,
                residue, protein_sequence, position_on_protein,
            )
            if name is not None:
                return name
        return self._terminus_modification(
            ModificationType.PEPTIDE_C_TERM, ModificationType.PEPTIDE_C_TERM_RESIDUE,
            residue, protein_sequence, position_on_protein,
        )


# =============================================================================
# Mass Calculation with Modifications
# =============================================================================

def compute_modified_mass(
    sequence: str,
    modifications: List[Tuple[str, int]],
    resolver: FixedModificationResolver,
    residues: Optional[ResidueTable] = None,
    n_term_modification: Optional[str] = None,
    c_term_modification: Optional[str] = None,
) -> float:
    """Compute peptide neutral mass with modifications.

    Calculates the total neutral mass including:
    - Residue masses
    - Water (H2O) for the complete peptide
    - Residue and terminal modification mass shifts

    Parameters
    ----------
    sequence : str
        Concrete peptide sequence
    modifications : List[Tuple[str, int]]
        List of (modification name, 0-based position) tuples
    resolver : FixedModificationResolver
        Resolver knowing the modification masses
    residues : ResidueTable, optional
        Residue table, the default table if None
    n_term_modification, c_term_modification : str, optional
        Terminal modification names

    Returns
    -------
    float
        Neutral peptide mass in Daltons

    Examples
    --------
    >>> round(compute_modified_mass("PEPTIDE", [], FixedModificationResolver()), 4)
    799.36
    """
    residues = ResidueTable.default() if residues is None else residues
    mass = residues.sequence_mass(sequence) + H2O_MASS
    for name, _ in modifications:
        mass += resolver.modification_mass(name)
    mass += resolver.modification_mass(n_term_modification)
    mass += resolver.modification_mass(c_term_modification)
    return mass
