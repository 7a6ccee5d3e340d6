"""Peptide drafts and the peptides emitted by the digestion iterators."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


class PeptideDraft:
    """Mutable accumulator for a peptide being grown residue by residue.

    The running mass covers the residues and their fixed modifications only;
    terminal modifications and water are added when the draft is finalized.
    A draft belongs to one enumeration branch, branches that fork take a
    :meth:`clone`.

    Attributes
    ----------
    residues : List[str]
        Concrete one-letter codes
    modifications : Dict[int, str]
        0-based position in the draft -> fixed modification name
    n_term_modification, c_term_modification : str, optional
        Terminal modification labels, set on finalization
    mass : float
        Residue mass including residue modifications
    missed_cleavages : int
        Missed cleavage sites inside the draft
    n_combinations : int
        Combination residues the draft was expanded from
    """

    def __init__(
        self,
        residues: Optional[List[str]] = None,
        modifications: Optional[Dict[int, str]] = None,
        residue_masses: Optional[List[float]] = None,
        n_term_modification: Optional[str] = None,
        c_term_modification: Optional[str] = None,
        missed_cleavages: int = 0,
        n_combinations: int = 0,
    ):
        self.residues: List[str] = residues if residues is not None else []
        self.modifications: Dict[int, str] = modifications if modifications is not None else {}
        # Mass of each residue with its modification, for exact pops
        self._residue_masses: List[float] = residue_masses if residue_masses is not None else []
        self.mass = sum(self._residue_masses)
        self.n_term_modification = n_term_modification
        self.c_term_modification = c_term_modification
        self.missed_cleavages = missed_cleavages
        self.n_combinations = n_combinations

    def __len__(self) -> int:
        return len(self.residues)

    def __repr__(self) -> str:
        return f"PeptideDraft({self.sequence!r}, mass={self.mass:.6f})"

    @property
    def sequence(self) -> str:
        return ''.join(self.residues)

    @property
    def first_residue(self) -> str:
        return self.residues[0]

    @property
    def last_residue(self) -> str:
        return self.residues[-1]

    def append(self, aa: str, mass: float, modification: Optional[str] = None) -> None:
        """Add a residue at the C-terminal end.

        Parameters
        ----------
        aa : str
            Concrete residue code
        mass : float
            Residue mass including the modification mass, if any
        modification : str, optional
            Fixed modification of the residue
        """
        if modification is not None:
            self.modifications[len(self.residues)] = modification
        self.residues.append(aa)
        self._residue_masses.append(mass)
        self.mass += mass

    def pop(self) -> str:
        """Remove the C-terminal residue and return it."""
        position = len(self.residues) - 1
        self.modifications.pop(position, None)
        self.mass -= self._residue_masses.pop()
        return self.residues.pop()

    def pop_first(self) -> str:
        """Remove the N-terminal residue and return it."""
        self.modifications = {
            position - 1: name for position, name in self.modifications.items() if position > 0
        }
        self.mass -= self._residue_masses.pop(0)
        return self.residues.pop(0)

    def clone(self) -> 'PeptideDraft':
        """Independent copy, no buffer is shared with this draft."""
        return PeptideDraft(
            residues=list(self.residues),
            modifications=dict(self.modifications),
            residue_masses=list(self._residue_masses),
            n_term_modification=self.n_term_modification,
            c_term_modification=self.c_term_modification,
            missed_cleavages=self.missed_cleavages,
            n_combinations=self.n_combinations,
        )


@dataclass(frozen=True)
class ExtendedPeptide:
    """A peptide candidate with its position on the protein.

    Attributes
    ----------
    sequence : str
        Concrete peptide sequence
    start : int
        0-based index of the first residue on the protein
    mass : float
        Monoisotopic neutral mass: residues, fixed modifications, terminal
        modifications and H2O
    modifications : tuple of (str, int)
        Fixed residue modifications as (name, 0-based position on the peptide)
    n_term_modification, c_term_modification : str, optional
        Terminal modifications
    missed_cleavages : int
        Missed cleavage sites, 0 for non-enzymatic digestion
    """

    sequence: str
    start: int
    mass: float
    modifications: Tuple[Tuple[str, int], ...] = ()
    n_term_modification: Optional[str] = None
    c_term_modification: Optional[str] = None
    missed_cleavages: int = 0

    @property
    def end(self) -> int:
        """Index after the last residue on the protein."""
        return self.start + len(self.sequence)

    @property
    def length(self) -> int:
        return len(self.sequence)

    @property
    def key(self) -> tuple:
        """Identity of the candidate: position, sequence and modification state."""
        return (
            self.start,
            self.sequence,
            self.modifications,
            self.n_term_modification,
            self.c_term_modification,
        )
